"""
Clusteriam exception hierarchy.

Every failure raised by the reconciler inherits from
:class:`ClusterIamError`.  Lookup, mutation and wait failures each have
their own branch so callers can tell a vanished cluster apart from a
rejected request, a stalled modification or a voluntary cancellation.
"""

from __future__ import annotations


# ── Base ──────────────────────────────────────────────────────────────
class ClusterIamError(Exception):
    """Root exception for all Clusteriam errors."""


# ── Lookup ────────────────────────────────────────────────────────────
class ClusterNotFoundError(ClusterIamError):
    """Cluster does not exist (or is being deleted)."""


class LookupFailedError(ClusterIamError):
    """Describing the cluster failed for a reason other than not-found."""


# ── Mutation ──────────────────────────────────────────────────────────
class MutationFailedError(ClusterIamError):
    """The role attachment change was rejected by the API."""


# ── Waiting ───────────────────────────────────────────────────────────
class WaitError(ClusterIamError):
    """Base exception for completion-wait failures."""


class WaitTimedOutError(WaitError):
    """The cluster did not reach a terminal state before the deadline."""


class WaitFailedError(WaitError):
    """The cluster reported a terminal failure state."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class WaitCancelledError(WaitError):
    """The caller cancelled the wait."""


# ── Host-facing ───────────────────────────────────────────────────────
class ReconcileError(ClusterIamError):
    """A lifecycle operation failed.

    Wraps the underlying cause together with the operation name and the
    cluster identity so a single message tells the whole story.
    """

    def __init__(self, operation: str, identity: str, cause: BaseException) -> None:
        super().__init__(
            f"error during {operation} of Redshift Cluster IAM Roles ({identity}): {cause}"
        )
        self.operation = operation
        self.identity = identity
        self.cause = cause

    @property
    def cancelled(self) -> bool:
        return isinstance(self.cause, WaitCancelledError)
