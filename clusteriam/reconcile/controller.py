"""
Reconcile controller.

Runs the create / read / update / delete lifecycle of a cluster's IAM
role attachments: diff desired against observed, dispatch one mutation,
wait for the cluster to settle, then read the observed state back.
"""

from __future__ import annotations

import threading
from typing import Iterable

from clusteriam.base.cluster import ClusterIamBlueprint
from clusteriam.base.config import ReconcileTimeouts
from clusteriam.base.exceptions import (
    ClusterIamError,
    ClusterNotFoundError,
    ReconcileError,
)
from clusteriam.base.logger import ci_logger
from clusteriam.base.types import AttachmentSet
from clusteriam.reconcile.differ import diff_request
from clusteriam.reconcile.dispatcher import MutationDispatcher
from clusteriam.reconcile.state import ReconcileRequest, ResourceState
from clusteriam.reconcile.waiter import CompletionWaiter, WaitOutcome


class ReconcileController:
    """Lifecycle operations over a :class:`ClusterIamBlueprint`.

    Attributes:
        api: Cluster IAM collaborator.
        dispatcher: Issues attachment mutations.
        waiter: Polls until the cluster settles.
        timeouts: Wait deadlines per operation.
    """

    def __init__(
        self,
        api: ClusterIamBlueprint,
        *,
        waiter: CompletionWaiter | None = None,
        timeouts: ReconcileTimeouts | None = None,
    ) -> None:
        self.api = api
        self.dispatcher = MutationDispatcher(api)
        self.waiter = waiter or CompletionWaiter(api.poll_status)
        self.timeouts = timeouts or ReconcileTimeouts()

    def _wait(
        self,
        state: ResourceState,
        timeout: float,
        operation: str,
        cancel: threading.Event | None,
    ) -> WaitOutcome:
        try:
            return self.waiter.wait(state.id, timeout, cancel=cancel, operation=operation)
        except ClusterIamError as e:
            ci_logger.error(f"Waiting for cluster failed: {e}", cluster=state.id, operation=operation)
            raise ReconcileError(operation, state.id, e) from e

    # --- Lifecycle ---

    def create(
        self, state: ResourceState, *, cancel: threading.Event | None = None
    ) -> ResourceState:
        """Attach the declared roles to ``state.cluster_identifier``.

        The identity is adopted from the API response only once the
        mutation succeeds; a later wait failure keeps it so the next pass
        can retry.

        Raises:
            ReconcileError: If the mutation, wait or read-back fails.
        """
        request = ReconcileRequest(
            identity=state.cluster_identifier,
            desired_set=state.iam_roles,
            observed_set=AttachmentSet(),
            desired_default=state.default_iam_role_arn,
        )
        delta = diff_request(request)

        ci_logger.info("Adding IAM roles", cluster=request.identity, operation="create")
        try:
            identity = self.dispatcher.mutate(
                request.identity,
                delta.to_add,
                delta.to_remove,
                request.desired_default,
                operation="create",
            )
        except (ClusterIamError, ValueError) as e:
            raise ReconcileError("create", request.identity, e) from e

        state.id = identity
        state.is_new_resource = True
        try:
            self._wait(state, self.timeouts.create, "create", cancel)
            return self.read(state)
        finally:
            state.is_new_resource = False

    def read(self, state: ResourceState) -> ResourceState:
        """Refresh *state* from the cluster's observed attachments.

        A cluster that has vanished is not an error unless the resource
        was just created: the identity is cleared and *state* returned.

        Raises:
            ReconcileError: On lookup failure.
        """
        if not state.exists:
            raise ReconcileError("read", state.id, ValueError("resource has no identity"))
        try:
            snapshot = self.api.lookup_cluster(state.id)
        except ClusterNotFoundError as e:
            if state.is_new_resource:
                raise ReconcileError("read", state.id, e) from e
            ci_logger.warning(
                "Redshift Cluster IAM Roles not found, removing from state",
                cluster=state.id,
                operation="read",
            )
            state.clear()
            return state
        except ClusterIamError as e:
            raise ReconcileError("read", state.id, e) from e

        state.apply_snapshot(snapshot)
        return state

    def update(
        self,
        state: ResourceState,
        iam_roles: Iterable[str],
        default_iam_role_arn: str | None,
        *,
        cancel: threading.Event | None = None,
    ) -> ResourceState:
        """Move the attachments from ``state`` to the new desired values.

        The prior set is the locally-known ``state.iam_roles``. The default
        role is always resent, as ``""`` when unset.

        Raises:
            ReconcileError: If the mutation, wait or read-back fails. The
                identity stays set.
        """
        iam_roles = AttachmentSet(iam_roles)
        default_iam_role_arn = default_iam_role_arn or None
        request = ReconcileRequest(
            identity=state.id,
            desired_set=iam_roles,
            observed_set=state.iam_roles,
            desired_default=default_iam_role_arn,
            observed_default=state.default_iam_role_arn,
        )
        delta = diff_request(request)
        if delta.is_empty and request.desired_default == request.observed_default:
            ci_logger.info("No IAM role changes", cluster=state.id, operation="update")
            return self.read(state)

        ci_logger.info("Modifying IAM roles", cluster=state.id, operation="update")
        try:
            self.dispatcher.mutate(
                request.identity,
                delta.to_add,
                delta.to_remove,
                request.desired_default or "",
                operation="update",
            )
        except (ClusterIamError, ValueError) as e:
            raise ReconcileError("update", state.id, e) from e

        state.set("iam_roles", iam_roles)
        state.set("default_iam_role_arn", default_iam_role_arn)
        self._wait(state, self.timeouts.update, "update", cancel)
        return self.read(state)

    def delete(
        self, state: ResourceState, *, cancel: threading.Event | None = None
    ) -> ResourceState:
        """Detach every locally-known role and forget the resource.

        A cluster that no longer exists counts as already deleted.

        Raises:
            ReconcileError: If the mutation or wait fails. The identity
                stays set.
        """
        if not state.exists:
            return state
        request = ReconcileRequest(
            identity=state.id,
            desired_set=AttachmentSet(),
            observed_set=state.iam_roles,
            desired_default=state.default_iam_role_arn,
            observed_default=state.default_iam_role_arn,
        )
        delta = diff_request(request)

        ci_logger.info("Removing IAM roles", cluster=state.id, operation="delete")
        try:
            self.dispatcher.mutate(
                request.identity,
                delta.to_add,
                delta.to_remove,
                request.desired_default or "",
                operation="delete",
            )
        except ClusterNotFoundError:
            ci_logger.warning("Cluster already gone", cluster=state.id, operation="delete")
            state.clear()
            return state
        except (ClusterIamError, ValueError) as e:
            raise ReconcileError("delete", state.id, e) from e

        try:
            self._wait(state, self.timeouts.delete, "delete", cancel)
        except ReconcileError as e:
            if not isinstance(e.cause, ClusterNotFoundError):
                raise
            ci_logger.warning("Cluster vanished while waiting", cluster=state.id, operation="delete")
        state.clear()
        return state

    def import_state(self, identity: str) -> ResourceState:
        """Adopt an existing cluster's attachments by identifier.

        Raises:
            ReconcileError: On lookup failure other than not-found.
        """
        return self.read(ResourceState(cluster_identifier=identity, id=identity))
