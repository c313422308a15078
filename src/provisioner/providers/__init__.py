"""Resource providers for the provisioner."""

from provisioner.providers.base import BaseProvider, ProviderStatus
from provisioner.providers.registry import ProviderRegistry

__all__ = [
    "BaseProvider",
    "ProviderStatus",
    "ProviderRegistry",
]
