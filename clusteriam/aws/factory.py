"""AWS provider factory.

Maps provider names to their cluster IAM implementations.
``SERVICE_REGISTRY`` is consumed by :func:`clusteriam.factory.build_controller`.
"""

from clusteriam.aws.redshift import RedshiftClusterIam


# Service registry for AWS
SERVICE_REGISTRY: dict[str, type] = {
    "redshift": RedshiftClusterIam,
}
