from clusteriam import AttachmentSet, ResourceState, build_controller



def main():
    # Example usage of the controller factory
    aws_config = {
        "region_name": "us-west-1",
        "timeouts": {"create": 30 * 60, "update": 30 * 60, "delete": 15 * 60},
        "waiter": {"poll_interval": 15},
    }

    controller = build_controller("aws", aws_config)
    state = controller.create(ResourceState(
        cluster_identifier="analytics",
        iam_roles=AttachmentSet(["arn:aws:iam::123456789012:role/loader"]),
        default_iam_role_arn="arn:aws:iam::123456789012:role/loader",
    ))

    print(f"Attached roles: {state.iam_roles.as_list()}")
    print(f"Default role: {state.default_iam_role_arn}")

if __name__ == "__main__":
    main()
