"""Reconcile engine: diff, dispatch, wait, read back."""

from .controller import ReconcileController
from .differ import AttachmentDiff, diff
from .dispatcher import MutationDispatcher
from .state import ReconcileRequest, ResourceState
from .waiter import CompletionWaiter, WaitOutcome

__all__ = [
    "ReconcileController",
    "AttachmentDiff",
    "diff",
    "MutationDispatcher",
    "ReconcileRequest",
    "ResourceState",
    "CompletionWaiter",
    "WaitOutcome",
]
