"""Attachment set diffing.

Computes the minimal add/remove delta that turns the observed set of
role attachments into the desired one.
"""

from __future__ import annotations

from dataclasses import dataclass

from clusteriam.base.types import AttachmentSet
from clusteriam.reconcile.state import ReconcileRequest


@dataclass(frozen=True)
class AttachmentDiff:
    """Roles to attach and roles to detach."""

    to_add: AttachmentSet
    to_remove: AttachmentSet

    @property
    def is_empty(self) -> bool:
        return not len(self.to_add) and not len(self.to_remove)


def diff(desired: AttachmentSet, observed: AttachmentSet) -> AttachmentDiff:
    """Compute the change set between *desired* and *observed*.

    Args:
        desired: Roles that should be attached.
        observed: Roles currently attached.

    Returns:
        ``to_add`` = desired - observed, ``to_remove`` = observed - desired.
    """
    return AttachmentDiff(to_add=desired - observed, to_remove=observed - desired)


def diff_request(request: ReconcileRequest) -> AttachmentDiff:
    """Diff the desired and observed sets carried by *request*."""
    return diff(request.desired_set, request.observed_set)
