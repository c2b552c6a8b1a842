"""Tests for the reconcile controller lifecycle."""

import threading
from unittest.mock import MagicMock, call

import pytest

from clusteriam.base.cluster import ClusterIamBlueprint
from clusteriam.base.config import ReconcileTimeouts
from clusteriam.base.exceptions import (
    ClusterNotFoundError,
    LookupFailedError,
    MutationFailedError,
    ReconcileError,
    WaitCancelledError,
    WaitFailedError,
    WaitTimedOutError,
)
from clusteriam.base.types import AttachmentSet, ClusterSnapshot, ClusterStatus
from clusteriam.reconcile.controller import ReconcileController
from clusteriam.reconcile.state import ResourceState
from clusteriam.reconcile.waiter import CompletionWaiter, WaitOutcome

A = "arn:role/A"
B = "arn:role/B"
C = "arn:role/C"

TIMEOUTS = ReconcileTimeouts(create=4500, update=4400, delete=2400)


def _snapshot(roles=(A, B), default=A, identifier="rs-1") -> ClusterSnapshot:
    return ClusterSnapshot(
        cluster_identifier=identifier,
        iam_roles=AttachmentSet(roles),
        default_iam_role_arn=default,
        status=ClusterStatus.AVAILABLE,
    )


@pytest.fixture
def api():
    mock_api = MagicMock(spec=ClusterIamBlueprint)
    mock_api.modify_cluster_iam_roles.return_value = "rs-1"
    mock_api.lookup_cluster.return_value = _snapshot()
    return mock_api


@pytest.fixture
def waiter():
    mock_waiter = MagicMock(spec=CompletionWaiter)
    mock_waiter.wait.return_value = WaitOutcome(ClusterStatus.AVAILABLE, _snapshot())
    return mock_waiter


@pytest.fixture
def ctl(api, waiter):
    return ReconcileController(api, waiter=waiter, timeouts=TIMEOUTS)


def _existing(roles=(A, B), default=A) -> ResourceState:
    return ResourceState(
        cluster_identifier="rs-1",
        iam_roles=AttachmentSet(roles),
        default_iam_role_arn=default,
        id="rs-1",
    )


# --- create ---

class TestCreate:
    def test_adds_all_desired(self, ctl, api, waiter):
        state = ResourceState(
            cluster_identifier="rs-1",
            iam_roles=AttachmentSet([A, B]),
            default_iam_role_arn=A,
        )
        ctl.create(state)
        api.modify_cluster_iam_roles.assert_called_once_with(
            "rs-1", AttachmentSet([A, B]), AttachmentSet(), A
        )
        waiter.wait.assert_called_once_with("rs-1", 4500, cancel=None, operation="create")
        assert state.id == "rs-1"
        assert state.iam_roles == {A, B}
        assert not state.is_new_resource

    def test_default_omitted_when_unset(self, ctl, api):
        ctl.create(ResourceState(cluster_identifier="rs-1", iam_roles=AttachmentSet([A])))
        assert api.modify_cluster_iam_roles.call_args[0][3] is None

    def test_adopts_echoed_identity(self, ctl, api, waiter):
        api.modify_cluster_iam_roles.return_value = "rs-echoed"
        state = ResourceState(cluster_identifier="RS-1", iam_roles=AttachmentSet([A]))
        ctl.create(state)
        assert state.id == "rs-echoed"
        assert waiter.wait.call_args[0][0] == "rs-echoed"
        api.lookup_cluster.assert_called_once_with("rs-echoed")

    def test_mutation_failure_adopts_nothing(self, ctl, api, waiter):
        api.modify_cluster_iam_roles.side_effect = MutationFailedError("InvalidClusterState")
        state = ResourceState(cluster_identifier="rs-1", iam_roles=AttachmentSet([A]))
        with pytest.raises(ReconcileError) as exc:
            ctl.create(state)
        assert isinstance(exc.value.cause, MutationFailedError)
        assert exc.value.operation == "create"
        assert "rs-1" in str(exc.value)
        assert state.id == ""
        waiter.wait.assert_not_called()

    def test_wait_failure_keeps_identity(self, ctl, waiter):
        waiter.wait.side_effect = WaitTimedOutError("timeout")
        state = ResourceState(cluster_identifier="rs-1", iam_roles=AttachmentSet([A]))
        with pytest.raises(ReconcileError) as exc:
            ctl.create(state)
        assert isinstance(exc.value.cause, WaitTimedOutError)
        assert state.id == "rs-1"

    def test_vanished_right_after_create_is_error(self, ctl, api):
        api.lookup_cluster.side_effect = ClusterNotFoundError("gone")
        state = ResourceState(cluster_identifier="rs-1", iam_roles=AttachmentSet([A]))
        with pytest.raises(ReconcileError) as exc:
            ctl.create(state)
        assert isinstance(exc.value.cause, ClusterNotFoundError)
        assert state.id == "rs-1"

    def test_empty_identifier_rejected(self, ctl, api):
        with pytest.raises(ReconcileError) as exc:
            ctl.create(ResourceState(iam_roles=AttachmentSet([A])))
        assert isinstance(exc.value.cause, ValueError)
        api.modify_cluster_iam_roles.assert_not_called()


# --- read ---

class TestRead:
    def test_maps_observed_verbatim(self, ctl, api):
        api.lookup_cluster.return_value = _snapshot(roles=(B, C), default=None)
        state = ctl.read(_existing())
        assert state.iam_roles == {B, C}
        assert state.default_iam_role_arn is None
        assert state.cluster_identifier == "rs-1"

    def test_not_found_clears_identity(self, ctl, api):
        api.lookup_cluster.side_effect = ClusterNotFoundError("gone")
        state = _existing()
        result = ctl.read(state)
        assert result is state
        assert state.id == ""

    def test_other_failure_surfaces(self, ctl, api):
        api.lookup_cluster.side_effect = LookupFailedError("throttled")
        state = _existing()
        with pytest.raises(ReconcileError) as exc:
            ctl.read(state)
        assert exc.value.operation == "read"
        assert state.id == "rs-1"

    def test_without_identity(self, ctl, api):
        with pytest.raises(ReconcileError):
            ctl.read(ResourceState())
        api.lookup_cluster.assert_not_called()


# --- update ---

class TestUpdate:
    def test_sends_delta_and_new_default(self, ctl, api, waiter):
        api.lookup_cluster.return_value = _snapshot(roles=(A, C), default=C)
        state = _existing(roles=(A, B), default=A)
        ctl.update(state, [A, C], C)
        api.modify_cluster_iam_roles.assert_called_once_with(
            "rs-1", AttachmentSet([C]), AttachmentSet([B]), C
        )
        waiter.wait.assert_called_once_with("rs-1", 4400, cancel=None, operation="update")
        assert state.iam_roles == {A, C}
        assert state.default_iam_role_arn == C

    def test_default_resent_when_unchanged(self, ctl, api):
        ctl.update(_existing(roles=(A,), default=A), [A, B], A)
        assert api.modify_cluster_iam_roles.call_args[0][3] == A

    def test_unset_default_sent_as_empty_string(self, ctl, api):
        ctl.update(_existing(roles=(A, B), default=A), [A], None)
        assert api.modify_cluster_iam_roles.call_args[0][3] == ""

    def test_no_change_skips_mutation(self, ctl, api, waiter):
        ctl.update(_existing(roles=(A, B), default=A), [B, A], A)
        api.modify_cluster_iam_roles.assert_not_called()
        waiter.wait.assert_not_called()
        api.lookup_cluster.assert_called_once_with("rs-1")

    def test_wait_timeout_keeps_identity(self, ctl, waiter):
        waiter.wait.side_effect = WaitTimedOutError("timeout")
        state = _existing()
        with pytest.raises(ReconcileError) as exc:
            ctl.update(state, [A], A)
        assert isinstance(exc.value.cause, WaitTimedOutError)
        assert state.id == "rs-1"

    def test_mutation_failure(self, ctl, api, waiter):
        api.modify_cluster_iam_roles.side_effect = MutationFailedError("denied")
        state = _existing()
        with pytest.raises(ReconcileError) as exc:
            ctl.update(state, [C], None)
        assert exc.value.operation == "update"
        assert state.iam_roles == {A, B}
        waiter.wait.assert_not_called()

    def test_cancel_forwarded(self, ctl, waiter):
        cancel = threading.Event()
        waiter.wait.side_effect = WaitCancelledError("cancelled")
        with pytest.raises(ReconcileError) as exc:
            ctl.update(_existing(), [A], A, cancel=cancel)
        assert exc.value.cancelled
        assert waiter.wait.call_args[1]["cancel"] is cancel


# --- delete ---

class TestDelete:
    def test_removes_everything_known(self, ctl, api, waiter):
        state = _existing(roles=(A, B), default=A)
        ctl.delete(state)
        api.modify_cluster_iam_roles.assert_called_once_with(
            "rs-1", AttachmentSet(), AttachmentSet([A, B]), A
        )
        waiter.wait.assert_called_once_with("rs-1", 2400, cancel=None, operation="delete")
        assert state.id == ""

    def test_uses_shorter_timeout(self, ctl, waiter):
        ctl.delete(_existing())
        assert waiter.wait.call_args[0][1] < TIMEOUTS.update

    def test_unset_default_sent_as_empty_string(self, ctl, api):
        ctl.delete(_existing(default=None))
        assert api.modify_cluster_iam_roles.call_args[0][3] == ""

    def test_wait_failure_keeps_identity(self, ctl, waiter):
        waiter.wait.side_effect = WaitFailedError("cluster status 'hardware-failure'")
        state = _existing()
        with pytest.raises(ReconcileError) as exc:
            ctl.delete(state)
        assert "hardware-failure" in str(exc.value)
        assert state.id == "rs-1"

    def test_already_gone(self, ctl, api, waiter):
        api.modify_cluster_iam_roles.side_effect = ClusterNotFoundError("gone")
        state = _existing()
        ctl.delete(state)
        assert state.id == ""
        waiter.wait.assert_not_called()

    def test_vanished_while_waiting(self, ctl, api, waiter):
        waiter.wait.side_effect = ClusterNotFoundError("not found after 20 checks")
        state = _existing()
        ctl.delete(state)
        api.modify_cluster_iam_roles.assert_called_once()
        assert state.id == ""

    def test_nothing_to_delete(self, ctl, api):
        ctl.delete(ResourceState())
        api.modify_cluster_iam_roles.assert_not_called()


# --- import ---

class TestImport:
    def test_reads_existing(self, ctl, api):
        state = ctl.import_state("rs-1")
        assert state.id == "rs-1"
        assert state.iam_roles == {A, B}
        assert state.default_iam_role_arn == A

    def test_missing_cluster(self, ctl, api):
        api.lookup_cluster.side_effect = ClusterNotFoundError("gone")
        assert not ctl.import_state("rs-404").exists


# --- end to end with the real waiter ---

class TestWithRealWaiter:
    def test_create_polls_until_available(self, api):
        modifying = MagicMock(status=ClusterStatus.MODIFYING, snapshot=_snapshot(), found=True)
        available = MagicMock(status=ClusterStatus.AVAILABLE, snapshot=_snapshot(), found=True)
        api.poll_status.side_effect = [modifying, modifying, available]
        now = [0.0]
        waiter = CompletionWaiter(
            api.poll_status,
            poll_interval=5,
            clock=lambda: now[0],
            sleep=lambda s: now.__setitem__(0, now[0] + s),
        )
        ctl = ReconcileController(api, waiter=waiter, timeouts=TIMEOUTS)
        state = ctl.create(ResourceState(cluster_identifier="rs-1", iam_roles=AttachmentSet([A, B])))
        assert api.poll_status.call_args_list == [call("rs-1")] * 3
        assert state.id == "rs-1"
        assert now[0] == 10
