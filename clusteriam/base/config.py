"""
Pydantic configuration models.

Validates provider credentials, lifecycle timeouts and waiter tuning at
initialization time instead of silently passing bad values to the SDK
client or the polling loop.
"""

from __future__ import annotations

import os
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, model_validator


class AWSConfig(BaseModel):
    """Configuration for the AWS Redshift client.

    Credentials are resolved in order:
    1. Explicit values passed in the config dict.
    2. Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_DEFAULT_REGION).
    3. If neither is set, fields are left as None so boto3 can fall back to its
       own credential chain (instance metadata, ~/.aws/credentials, etc.).
    """

    model_config = ConfigDict(extra="forbid")

    aws_access_key_id: str | None = Field(default=None, description="AWS access key ID")
    aws_secret_access_key: str | None = Field(default=None, description="AWS secret access key")
    region_name: str | None = Field(default=None, description="AWS region (e.g. 'us-east-1')")
    endpoint_url: str | None = Field(default=None, description="Override the Redshift endpoint")

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to environment variables for missing credentials."""
        env_map = {
            "aws_access_key_id": "AWS_ACCESS_KEY_ID",
            "aws_secret_access_key": "AWS_SECRET_ACCESS_KEY",
            "region_name": "AWS_DEFAULT_REGION",
        }
        for field, env_var in env_map.items():
            if not values.get(field):
                values[field] = os.environ.get(env_var)
        return values


class ReconcileTimeouts(BaseModel):
    """Per-operation wait deadlines, in seconds.

    Cluster modification is a slow multi-step operation, so create and
    update get a long deadline; role detachment settles faster.
    """

    model_config = ConfigDict(extra="forbid")

    create: float = Field(default=75 * 60, gt=0, description="Create wait deadline")
    update: float = Field(default=75 * 60, gt=0, description="Update wait deadline")
    delete: float = Field(default=40 * 60, gt=0, description="Delete wait deadline")

    @model_validator(mode="after")
    def cap_default_delete(self) -> ReconcileTimeouts:
        """Keep an unset delete deadline no longer than the update one."""
        if "delete" not in self.model_fields_set:
            self.delete = min(self.delete, self.update)
        return self


class WaiterConfig(BaseModel):
    """Polling behaviour of the completion waiter."""

    model_config = ConfigDict(extra="forbid")

    poll_interval: float = Field(default=10.0, gt=0, description="Seconds between status polls")
    not_found_checks: int = Field(
        default=20, ge=1, description="Consecutive not-found polls tolerated"
    )


# Map provider names to their config models for dynamic validation
CONFIG_REGISTRY: dict[str, type[BaseModel]] = {
    "aws": AWSConfig,
}


def validate_config(cloud_provider: str, config: dict) -> BaseModel:
    """Validate and return a typed config model for the given provider.

    Args:
        cloud_provider: The cloud provider name (e.g. 'aws').
        config: Raw configuration dictionary.

    Returns:
        A validated Pydantic config model.

    Raises:
        ValueError: If the provider is unknown.
        pydantic.ValidationError: If the config is invalid.
    """
    model = CONFIG_REGISTRY.get(cloud_provider)
    if model is None:
        raise ValueError(f"No config model registered for provider: {cloud_provider}")
    return model(**config)


__all__ = [
    "AWSConfig",
    "ReconcileTimeouts",
    "WaiterConfig",
    "CONFIG_REGISTRY",
    "validate_config",
]
