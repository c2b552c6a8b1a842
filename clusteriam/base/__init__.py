"""Collaborator blueprint, value types and core utilities.

Import :class:`ClusterIamBlueprint` to type-hint your own code or to
plug in a custom provider.
"""

from .cluster import ClusterIamBlueprint
from .types import AttachmentSet, ClusterSnapshot, ClusterStatus, StatusReport
from .supported_services import existing_cloud_providers


__all__ = [
    "ClusterIamBlueprint",
    "AttachmentSet",
    "ClusterSnapshot",
    "ClusterStatus",
    "StatusReport",
    "existing_cloud_providers",
]
