"""AWS implementations."""

from .redshift import RedshiftClusterIam

__all__ = ["RedshiftClusterIam"]
