"""Value types shared by the collaborator contract and the reconciler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator


class AttachmentSet:
    """Immutable set of role ARNs.

    Duplicates collapse on construction; empty strings are rejected.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[str] = ()) -> None:
        values = frozenset(items)
        for value in values:
            if not isinstance(value, str):
                raise TypeError(f"Role reference must be a string, got {type(value).__name__}")
            if not value:
                raise ValueError("Role reference must not be empty")
        self._items: frozenset[str] = values

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AttachmentSet):
            return self._items == other._items
        if isinstance(other, (set, frozenset)):
            return self._items == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __sub__(self, other: Iterable[str]) -> AttachmentSet:
        return AttachmentSet(self._items - frozenset(other))

    def __repr__(self) -> str:
        return f"AttachmentSet({self.as_list()!r})"

    def as_list(self) -> list[str]:
        """Return the members sorted, for deterministic API requests."""
        return sorted(self._items)


class ClusterStatus(Enum):
    """Normalised cluster availability."""

    PENDING = "pending"
    MODIFYING = "modifying"
    AVAILABLE = "available"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ClusterStatus.AVAILABLE, ClusterStatus.FAILED)


# Redshift ClusterAvailabilityStatus -> ClusterStatus
AVAILABILITY_MAP: dict[str, ClusterStatus] = {
    "Available": ClusterStatus.AVAILABLE,
    "Modifying": ClusterStatus.MODIFYING,
    "Maintenance": ClusterStatus.PENDING,
    "Unavailable": ClusterStatus.PENDING,
    "Failed": ClusterStatus.FAILED,
}

# Redshift ClusterStatus -> ClusterStatus, for descriptions without
# ClusterAvailabilityStatus
CLUSTER_STATUS_MAP: dict[str, ClusterStatus] = {
    "available": ClusterStatus.AVAILABLE,
    "modifying": ClusterStatus.MODIFYING,
    "resizing": ClusterStatus.MODIFYING,
    "renaming": ClusterStatus.MODIFYING,
    "rebooting": ClusterStatus.MODIFYING,
    "updating-hsm": ClusterStatus.MODIFYING,
    "rotating-keys": ClusterStatus.MODIFYING,
    "creating": ClusterStatus.PENDING,
    "hardware-failure": ClusterStatus.FAILED,
    "incompatible-hsm": ClusterStatus.FAILED,
    "incompatible-network": ClusterStatus.FAILED,
    "incompatible-parameters": ClusterStatus.FAILED,
    "incompatible-restore": ClusterStatus.FAILED,
    "storage-full": ClusterStatus.FAILED,
}


@dataclass(frozen=True)
class ClusterSnapshot:
    """Observed role attachments and availability of one cluster."""

    cluster_identifier: str
    iam_roles: AttachmentSet
    default_iam_role_arn: str | None = None
    status: ClusterStatus | None = None
    cluster_status: str | None = None


@dataclass(frozen=True)
class StatusReport:
    """One status poll.

    ``status`` is ``None`` when the availability string was not
    recognised (``raw_status`` keeps it) or when the cluster was not
    found (``snapshot`` is ``None`` too).
    """

    status: ClusterStatus | None
    raw_status: str | None = None
    snapshot: ClusterSnapshot | None = None

    @property
    def found(self) -> bool:
        return self.snapshot is not None
