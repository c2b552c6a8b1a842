"""Clusteriam: reconcile IAM role attachments on Redshift clusters.

Entry point for the library. Import :func:`build_controller` to get a
controller wired to a provider with a single call::

    from clusteriam import AttachmentSet, ResourceState, build_controller

    controller = build_controller("aws", {"region_name": "us-east-1"})
    state = controller.create(ResourceState(
        cluster_identifier="analytics",
        iam_roles=AttachmentSet(["arn:aws:iam::123456789012:role/loader"]),
    ))
"""

from .base import AttachmentSet, ClusterIamBlueprint, ClusterSnapshot, ClusterStatus
from .reconcile import ReconcileController, ResourceState
from .factory import build_controller

__all__ = [
    "AttachmentSet",
    "ClusterIamBlueprint",
    "ClusterSnapshot",
    "ClusterStatus",
    "ReconcileController",
    "ResourceState",
    "build_controller",
]
