"""
BookVerse Provisioner - idempotent provisioning against eventually-consistent APIs.

Reserves static addresses and creates JFrog OIDC integrations with their
identity mappings, tolerating retries, races and transient backend failures.
"""

__version__ = "1.0.0"
__author__ = "BookVerse Platform Team"

# Re-export key components for easier access
from provisioner.models.config import ProvisionerConfig
from provisioner.models.resource import (
    ReconciliationResult,
    ReconcileState,
    ResourceKind,
    ResourceSpec,
)

__all__ = [
    "ProvisionerConfig",
    "ReconciliationResult",
    "ReconcileState",
    "ResourceKind",
    "ResourceSpec",
]
