"""Controller factory.

Provides :func:`build_controller`, the single entry-point for wiring a
provider's cluster IAM client, the completion waiter and the lifecycle
timeouts into a :class:`ReconcileController`.
"""

from typing import Any

from clusteriam.base import existing_cloud_providers
from clusteriam.base.config import ReconcileTimeouts, WaiterConfig, validate_config
from clusteriam.aws.factory import SERVICE_REGISTRY as AWS_SERVICES
from clusteriam.reconcile.controller import ReconcileController
from clusteriam.reconcile.waiter import CompletionWaiter


# Nested factory registry: cloud_provider -> service registry
_FACTORY_REGISTRY: dict[str, dict[str, type]] = {
    "aws": AWS_SERVICES,
}

_DEFAULT_SERVICE: dict[str, str] = {
    "aws": "redshift",
}


def build_controller(
    cloud_provider: existing_cloud_providers,
    config: dict[str, Any],
) -> ReconcileController:
    """
    Build a reconcile controller for the given cloud provider.
    Args:
        cloud_provider: The cloud provider (e.g., 'aws').
        config: Provider configuration. Optional nested ``timeouts`` and
            ``waiter`` dicts tune the lifecycle deadlines and polling; the
            rest is validated as the provider's credentials config.
    Returns:
        A ready-to-use :class:`ReconcileController`.
    Raises:
        ValueError: If the cloud provider is not supported.
        pydantic.ValidationError: If any config block is invalid.
    """
    if cloud_provider not in _FACTORY_REGISTRY:
        raise ValueError(f"Unsupported cloud provider: {cloud_provider}")

    provider_config = dict(config)
    timeouts = ReconcileTimeouts(**provider_config.pop("timeouts", {}))
    waiter_config = WaiterConfig(**provider_config.pop("waiter", {}))

    service_class = _FACTORY_REGISTRY[cloud_provider][_DEFAULT_SERVICE[cloud_provider]]
    configObj = validate_config(cloud_provider, provider_config)
    api = service_class(configObj)
    waiter = CompletionWaiter.from_config(api.poll_status, waiter_config)
    return ReconcileController(api, waiter=waiter, timeouts=timeouts)
