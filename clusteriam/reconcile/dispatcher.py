"""Issues role attachment mutations against a cluster."""

from __future__ import annotations

from clusteriam.base.cluster import ClusterIamBlueprint
from clusteriam.base.logger import ci_logger
from clusteriam.base.types import AttachmentSet


class MutationDispatcher:
    """Sends exactly one ``ModifyClusterIamRoles`` request per call.

    No retries happen here; transient transport failures are the SDK
    client's concern and everything else propagates.
    """

    def __init__(self, api: ClusterIamBlueprint) -> None:
        self.api = api

    def mutate(
        self,
        identity: str,
        to_add: AttachmentSet,
        to_remove: AttachmentSet,
        default_attachment: str | None = None,
        *,
        operation: str | None = None,
    ) -> str:
        """Attach *to_add*, detach *to_remove* and set the default role.

        Args:
            identity: Cluster identifier. Must not be empty.
            to_add: Roles to attach.
            to_remove: Roles to detach.
            default_attachment: Default role ARN, sent as-is unless ``None``.
            operation: Lifecycle operation name, for log context.

        Returns:
            The identifier echoed by the API.

        Raises:
            ValueError: If *identity* is empty.
            ClusterNotFoundError: If the cluster does not exist.
            MutationFailedError: On any other API failure.
        """
        if not identity:
            raise ValueError("Cluster identifier must not be empty")
        ci_logger.debug(
            f"Modifying IAM roles: add={to_add.as_list()} remove={to_remove.as_list()} "
            f"default={default_attachment!r}",
            cluster=identity,
            operation=operation,
        )
        return self.api.modify_cluster_iam_roles(
            identity, to_add, to_remove, default_attachment
        )
