"""Cluster IAM role attachment blueprint."""

from abc import ABC, abstractmethod

from .types import AttachmentSet, ClusterSnapshot, StatusReport


class ClusterIamBlueprint(ABC):
    """Abstract interface to a cluster's IAM role attachments.

    Maps to the Amazon Redshift ``DescribeClusters`` and
    ``ModifyClusterIamRoles`` APIs.
    """

    @abstractmethod
    def lookup_cluster(self, identity: str) -> ClusterSnapshot:
        """Describe a cluster.

        Args:
            identity: Cluster identifier.

        Returns:
            Snapshot of the attached roles, default role and availability.

        Raises:
            ClusterNotFoundError: If the cluster does not exist or is
                being deleted.
            LookupFailedError: On any other API failure.
        """

    @abstractmethod
    def modify_cluster_iam_roles(
        self,
        identity: str,
        add: AttachmentSet,
        remove: AttachmentSet,
        default: str | None = None,
    ) -> str:
        """Issue one attachment change and return the echoed identifier.

        Args:
            identity: Cluster identifier.
            add: Role ARNs to attach. Omitted from the request when empty.
            remove: Role ARNs to detach. Omitted from the request when empty.
            default: Default role ARN. ``None`` omits the field; any string,
                including ``""``, is sent as-is.

        Raises:
            ClusterNotFoundError: If the cluster does not exist.
            MutationFailedError: On any other API failure.
        """

    @abstractmethod
    def poll_status(self, identity: str) -> StatusReport:
        """Fetch the cluster's current availability.

        A missing cluster is reported as a :class:`StatusReport` with no
        snapshot rather than raised, so the waiter can tolerate brief
        not-found windows.

        Raises:
            LookupFailedError: On any API failure other than not-found.
        """
