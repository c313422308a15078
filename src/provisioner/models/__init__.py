"""Pydantic models for configuration and resource specifications."""

from provisioner.models.config import (
    ProvisionerConfig,
    JFrogConfig,
    GcpConfig,
    RetryConfig,
    ServiceIdentity,
)
from provisioner.models.payloads import (
    OidcProviderPayload,
    IdentityMappingPayload,
    StaticAddressPayload,
    TokenSpec,
)
from provisioner.models.resource import (
    ResourceKind,
    ResourceSpec,
    ReconcileState,
    ReconciliationResult,
    ErrorDetail,
)

__all__ = [
    "ProvisionerConfig",
    "JFrogConfig",
    "GcpConfig",
    "RetryConfig",
    "ServiceIdentity",
    "OidcProviderPayload",
    "IdentityMappingPayload",
    "StaticAddressPayload",
    "TokenSpec",
    "ResourceKind",
    "ResourceSpec",
    "ReconcileState",
    "ReconciliationResult",
    "ErrorDetail",
]
