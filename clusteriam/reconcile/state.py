"""Local resource state and per-operation reconcile requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from clusteriam.base.types import AttachmentSet, ClusterSnapshot

FIELD_NAMES = ("cluster_identifier", "default_iam_role_arn", "iam_roles")


@dataclass
class ResourceState:
    """Locally-known state of one managed cluster role attachment resource.

    ``id`` is the identity adopted from the API; an empty ``id`` means the
    resource does not exist (never created, deleted, or vanished).
    """

    cluster_identifier: str = ""
    default_iam_role_arn: str | None = None
    iam_roles: AttachmentSet = field(default_factory=AttachmentSet)
    id: str = ""
    is_new_resource: bool = False

    def get(self, name: str) -> Any:
        if name == "cluster_identifier":
            return self.cluster_identifier
        if name == "default_iam_role_arn":
            return self.default_iam_role_arn
        if name == "iam_roles":
            return self.iam_roles
        raise KeyError(name)

    def set(self, name: str, value: Any) -> None:
        if name == "cluster_identifier":
            self.cluster_identifier = value
        elif name == "default_iam_role_arn":
            self.default_iam_role_arn = value or None
        elif name == "iam_roles":
            self.iam_roles = value if isinstance(value, AttachmentSet) else AttachmentSet(value or ())
        else:
            raise KeyError(name)

    @property
    def exists(self) -> bool:
        return bool(self.id)

    def clear(self) -> None:
        """Forget the identity; the resource is gone."""
        self.id = ""
        self.is_new_resource = False

    def apply_snapshot(self, snapshot: ClusterSnapshot) -> None:
        """Copy observed attachments verbatim into local state."""
        self.set("iam_roles", snapshot.iam_roles)
        self.set("default_iam_role_arn", snapshot.default_iam_role_arn)
        self.set("cluster_identifier", snapshot.cluster_identifier)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "cluster_identifier": self.cluster_identifier,
            "default_iam_role_arn": self.default_iam_role_arn,
            "iam_roles": self.iam_roles.as_list(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResourceState:
        return cls(
            cluster_identifier=data.get("cluster_identifier", ""),
            default_iam_role_arn=data.get("default_iam_role_arn") or None,
            iam_roles=AttachmentSet(data.get("iam_roles") or ()),
            id=data.get("id", ""),
        )


@dataclass(frozen=True)
class ReconcileRequest:
    """Desired vs. observed attachments for one lifecycle operation."""

    identity: str
    desired_set: AttachmentSet
    observed_set: AttachmentSet
    desired_default: str | None = None
    observed_default: str | None = None
