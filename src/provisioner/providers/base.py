"""Base provider interface."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict

from provisioner.backend import BackendResponse
from provisioner.models.resource import ResourceSpec


class ProviderStatus(Enum):
    """Result of a best-effort existence check."""
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


class BaseProvider(ABC):
    """Base provider interface that all providers must implement.

    A provider knows how one resource kind is looked up, created and deleted
    in its backend. Providers never decide whether to retry; they report what
    the backend said and leave classification to the reconciler.
    """

    @abstractmethod
    async def initialize(self, config: Any, registry: Any):
        """Initialize the provider with configuration."""
        pass

    @abstractmethod
    async def status(self, spec: ResourceSpec) -> ProviderStatus:
        """Check whether the resource exists.

        Only PRESENT is authoritative. ABSENT and UNKNOWN both lead to a
        creation attempt.
        """
        pass

    @abstractmethod
    async def create(self, spec: ResourceSpec) -> BackendResponse:
        """Issue a single creation call for the resource."""
        pass

    @abstractmethod
    async def delete(self, spec: ResourceSpec) -> BackendResponse:
        """Issue a single deletion call for the resource."""
        pass

    async def details(self, spec: ResourceSpec) -> Dict[str, str]:
        """Read-back attributes of an existing resource worth reporting."""
        return {}

    @abstractmethod
    async def validate_spec(self, spec: ResourceSpec) -> bool:
        """Validate the resource specification."""
        pass
