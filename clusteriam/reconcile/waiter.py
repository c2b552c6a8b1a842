"""
Completion waiter.

Polls a cluster's availability until it settles into ``AVAILABLE``,
reports ``FAILED``, the deadline passes, or the caller cancels.  Clock,
sleep and the status fetch are all injectable so status sequences can be
replayed in tests without real delays.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from clusteriam.base.config import WaiterConfig
from clusteriam.base.exceptions import (
    ClusterNotFoundError,
    WaitCancelledError,
    WaitFailedError,
    WaitTimedOutError,
)
from clusteriam.base.logger import ci_logger
from clusteriam.base.types import ClusterSnapshot, ClusterStatus, StatusReport


@dataclass(frozen=True)
class WaitOutcome:
    """Successful end of a wait: the terminal status and last snapshot."""

    status: ClusterStatus
    snapshot: ClusterSnapshot


class CompletionWaiter:
    """Waits for a cluster to leave its modifying state.

    Args:
        fetch_status: Callable returning a :class:`StatusReport` for an
            identity.
        poll_interval: Seconds between polls.
        not_found_checks: Consecutive not-found polls tolerated before
            giving up with :class:`ClusterNotFoundError`.
        clock: Monotonic clock, in seconds.
        sleep: Sleep function. When omitted, waits on the cancel event
            (if any) so cancellation interrupts the pause.
    """

    def __init__(
        self,
        fetch_status: Callable[[str], StatusReport],
        *,
        poll_interval: float = 10.0,
        not_found_checks: int = 20,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.fetch_status = fetch_status
        self.poll_interval = poll_interval
        self.not_found_checks = not_found_checks
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        fetch_status: Callable[[str], StatusReport],
        config: WaiterConfig,
        **kwargs,
    ) -> CompletionWaiter:
        return cls(
            fetch_status,
            poll_interval=config.poll_interval,
            not_found_checks=config.not_found_checks,
            **kwargs,
        )

    def _pause(self, seconds: float, cancel: threading.Event | None) -> None:
        if self._sleep is not None:
            self._sleep(seconds)
        elif cancel is not None:
            cancel.wait(seconds)
        else:
            time.sleep(seconds)

    def wait(
        self,
        identity: str,
        timeout: float,
        *,
        cancel: threading.Event | None = None,
        operation: str | None = None,
    ) -> WaitOutcome:
        """Block until *identity* is available.

        Args:
            identity: Cluster identifier.
            timeout: Deadline in seconds.
            cancel: Event that, once set, aborts the wait.
            operation: Lifecycle operation name, for log context.

        Returns:
            The terminal status and the last observed snapshot.

        Raises:
            WaitTimedOutError: No terminal state before the deadline.
            WaitFailedError: The cluster reported failure, or an
                unrecognised state.
            WaitCancelledError: *cancel* was set.
            ClusterNotFoundError: The cluster stayed missing for
                ``not_found_checks`` consecutive polls.
        """
        deadline = self._clock() + timeout
        last_status: ClusterStatus | None = None
        not_found = 0

        while True:
            if cancel is not None and cancel.is_set():
                raise WaitCancelledError(f"wait for cluster '{identity}' cancelled")

            report = self.fetch_status(identity)
            if not report.found:
                not_found += 1
                ci_logger.debug(
                    f"Cluster not found ({not_found}/{self.not_found_checks})",
                    cluster=identity,
                    operation=operation,
                )
                if not_found >= self.not_found_checks:
                    raise ClusterNotFoundError(
                        f"cluster '{identity}' not found after {not_found} checks"
                    )
            else:
                not_found = 0
                status = report.status
                if status is None:
                    raise WaitFailedError(f"unexpected state '{report.raw_status}'")
                if status is not last_status:
                    ci_logger.debug(
                        f"Cluster status is {status.value}",
                        cluster=identity,
                        operation=operation,
                    )
                last_status = status
                if status.is_terminal:
                    assert report.snapshot is not None
                    if status is ClusterStatus.AVAILABLE:
                        return WaitOutcome(status=status, snapshot=report.snapshot)
                    raise WaitFailedError(
                        f"cluster status '{report.snapshot.cluster_status or report.raw_status}'"
                    )

            remaining = deadline - self._clock()
            if remaining <= 0:
                last = last_status.value if last_status is not None else "not found"
                raise WaitTimedOutError(
                    f"timeout after {timeout:g}s waiting for cluster '{identity}' "
                    f"(last state: {last})"
                )
            self._pause(min(self.poll_interval, remaining), cancel)
