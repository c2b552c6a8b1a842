"""AWS Redshift implementation of the cluster IAM blueprint."""

from __future__ import annotations

from typing import Any, NoReturn

import boto3
from botocore.exceptions import ClientError

from clusteriam.base.cluster import ClusterIamBlueprint
from clusteriam.base.config import AWSConfig
from clusteriam.base.exceptions import (
    ClusterIamError,
    ClusterNotFoundError,
    LookupFailedError,
    MutationFailedError,
)
from clusteriam.base.types import (
    AVAILABILITY_MAP,
    CLUSTER_STATUS_MAP,
    AttachmentSet,
    ClusterStatus,
    ClusterSnapshot,
    StatusReport,
)

_NOT_FOUND_CODES = frozenset({"ClusterNotFound", "ClusterNotFoundFault"})

# Redshift ClusterStatus value for a cluster on its way out
_STATUS_DELETING = "deleting"


def _handle(e: ClientError, msg: str, default: type[ClusterIamError]) -> NoReturn:
    code = e.response["Error"]["Code"]
    exc = ClusterNotFoundError if code in _NOT_FOUND_CODES else default
    raise exc(f"{msg}: {e}") from e


def _raw_status(cluster: dict[str, Any]) -> str | None:
    return cluster.get("ClusterAvailabilityStatus") or cluster.get("ClusterStatus")


def _status(cluster: dict[str, Any]) -> ClusterStatus | None:
    availability = cluster.get("ClusterAvailabilityStatus")
    if availability:
        return AVAILABILITY_MAP.get(availability)
    # Older responses carry only ClusterStatus
    return CLUSTER_STATUS_MAP.get(cluster.get("ClusterStatus") or "")


def _to_snapshot(cluster: dict[str, Any]) -> ClusterSnapshot:
    return ClusterSnapshot(
        cluster_identifier=cluster["ClusterIdentifier"],
        iam_roles=AttachmentSet(
            r["IamRoleArn"] for r in cluster.get("IamRoles", []) if r.get("IamRoleArn")
        ),
        default_iam_role_arn=cluster.get("DefaultIamRoleArn") or None,
        status=_status(cluster),
        cluster_status=cluster.get("ClusterStatus"),
    )


class RedshiftClusterIam(ClusterIamBlueprint):
    """Redshift cluster IAM role attachments.

    Attributes:
        client: boto3 Redshift client.
    """

    def __init__(self, config: AWSConfig) -> None:
        """Initialize the Redshift client.

        Args:
            config: AWS configuration object containing credentials and region.
                   Expected attributes:
                   - aws_access_key_id: AWS access key ID
                   - aws_secret_access_key: AWS secret access key
                   - region_name: AWS region name (e.g., 'us-east-1')
                   - endpoint_url: Optional endpoint override
        """
        self.client = boto3.client(
            "redshift",
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
            region_name=config.region_name,
            endpoint_url=config.endpoint_url,
        )

    def _describe(self, identity: str) -> dict[str, Any]:
        """Return the raw cluster description.

        Raises:
            ClusterNotFoundError: If absent, ambiguous or being deleted.
        """
        try:
            resp = self.client.describe_clusters(ClusterIdentifier=identity)
        except ClientError as e:
            _handle(e, f"Failed to describe cluster '{identity}'", LookupFailedError)
        clusters = resp.get("Clusters", [])
        if len(clusters) != 1:
            raise ClusterNotFoundError(
                f"Expected one cluster '{identity}', found {len(clusters)}"
            )
        cluster = clusters[0]
        if cluster.get("ClusterStatus") == _STATUS_DELETING:
            raise ClusterNotFoundError(f"Cluster '{identity}' is being deleted")
        return cluster

    def lookup_cluster(self, identity: str) -> ClusterSnapshot:
        """Describe a cluster's role attachments.

        Raises:
            ClusterNotFoundError: If the cluster does not exist.
            LookupFailedError: On any other API failure.
        """
        return _to_snapshot(self._describe(identity))

    def modify_cluster_iam_roles(
        self,
        identity: str,
        add: AttachmentSet,
        remove: AttachmentSet,
        default: str | None = None,
    ) -> str:
        """Call ``ModifyClusterIamRoles``.

        Returns:
            The cluster identifier echoed in the response.

        Raises:
            ClusterNotFoundError: If the cluster does not exist.
            MutationFailedError: On any other API failure.
        """
        params: dict[str, Any] = {"ClusterIdentifier": identity}
        if len(add):
            params["AddIamRoles"] = add.as_list()
        if len(remove):
            params["RemoveIamRoles"] = remove.as_list()
        if default is not None:
            params["DefaultIamRoleArn"] = default
        try:
            resp = self.client.modify_cluster_iam_roles(**params)
        except ClientError as e:
            _handle(e, f"Failed to modify IAM roles of cluster '{identity}'", MutationFailedError)
        return resp["Cluster"]["ClusterIdentifier"]  # type: ignore[no-any-return]

    def poll_status(self, identity: str) -> StatusReport:
        """Report the cluster's availability.

        Returns:
            A report with no snapshot when the cluster is not found.

        Raises:
            LookupFailedError: On any API failure other than not-found.
        """
        try:
            cluster = self._describe(identity)
        except ClusterNotFoundError:
            return StatusReport(status=None)
        snapshot = _to_snapshot(cluster)
        return StatusReport(
            status=snapshot.status,
            raw_status=_raw_status(cluster),
            snapshot=snapshot,
        )
