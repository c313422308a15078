"""Deletion of planned resources, children before parents."""

import logging
from typing import Iterable, List, Optional

from provisioner.backend import BackendUnavailableError
from provisioner.models.resource import ResourceSpec


logger = logging.getLogger(__name__)


class CleanupOutcome:
    """Result of deleting one resource."""

    def __init__(self, spec: ResourceSpec, deleted: bool, error: Optional[str] = None):
        self.spec = spec
        self.deleted = deleted
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None


async def remove_resources(provider_registry, specs: Iterable[ResourceSpec]) -> List[CleanupOutcome]:
    """Delete resources in reverse declared order.

    A 404 means the resource is already gone and counts as success.
    """
    outcomes = []
    for spec in reversed(list(specs)):
        provider = provider_registry.get_provider(spec.kind)
        label = spec.describe()
        try:
            response = await provider.delete(spec)
        except BackendUnavailableError as e:
            logger.error(f"Failed to delete {label}: {e}")
            outcomes.append(CleanupOutcome(spec, deleted=False, error=str(e)))
            continue

        if response.ok:
            logger.info(f"Deleted {label}")
            outcomes.append(CleanupOutcome(spec, deleted=True))
        elif response.status_code == 404:
            logger.info(f"{label} already absent")
            outcomes.append(CleanupOutcome(spec, deleted=False))
        else:
            error = f"HTTP {response.status_code}: {response.body}"
            logger.error(f"Failed to delete {label}: {error}")
            outcomes.append(CleanupOutcome(spec, deleted=False, error=error))

    return outcomes
