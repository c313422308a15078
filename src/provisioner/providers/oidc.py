"""Providers for JFrog OIDC integrations and their identity mappings."""

import logging
from typing import Optional

from pydantic import ValidationError

from provisioner.backend import BackendClient, BackendResponse, BackendUnavailableError
from provisioner.models.payloads import IdentityMappingPayload, OidcProviderPayload, serialize
from provisioner.models.resource import ResourceSpec
from provisioner.providers.base import BaseProvider, ProviderStatus


logger = logging.getLogger(__name__)

OIDC_API = "/access/api/v1/oidc"


async def _listed(client: BackendClient, path: str, name: str) -> ProviderStatus:
    """Look for an exact ``name`` match in a list endpoint.

    List endpoints lag behind writes, so a miss is UNKNOWN rather than ABSENT.
    """
    try:
        response = await client.get(path)
    except BackendUnavailableError as e:
        logger.warning(f"Existence check {path} failed: {e}")
        return ProviderStatus.UNKNOWN

    if not response.ok:
        logger.debug(f"Existence check {path} returned HTTP {response.status_code}")
        return ProviderStatus.UNKNOWN

    items = response.json()
    if not isinstance(items, list):
        logger.debug(f"Existence check {path} returned a non-list body")
        return ProviderStatus.UNKNOWN

    for item in items:
        if isinstance(item, dict) and item.get("name") == name:
            return ProviderStatus.PRESENT
    return ProviderStatus.UNKNOWN


class OidcProviderProvider(BaseProvider):
    """Provider for OIDC identity-provider integrations."""

    def __init__(self):
        """Initialize OIDC provider."""
        self.client: Optional[BackendClient] = None

    async def initialize(self, config, registry):
        """Initialize provider with configuration."""
        self.client = registry.get_client("jfrog")

    async def status(self, spec: ResourceSpec) -> ProviderStatus:
        """Check whether the integration is listed."""
        return await _listed(self.client, OIDC_API, spec.name)

    async def create(self, spec: ResourceSpec) -> BackendResponse:
        """Create the integration."""
        payload = OidcProviderPayload(**spec.payload)
        return await self.client.post(OIDC_API, serialize(payload))

    async def delete(self, spec: ResourceSpec) -> BackendResponse:
        """Delete the integration."""
        return await self.client.delete(f"{OIDC_API}/{spec.name}")

    async def validate_spec(self, spec: ResourceSpec) -> bool:
        """Validate integration specification."""
        try:
            payload = OidcProviderPayload(**spec.payload)
        except ValidationError as e:
            logger.error(f"Invalid OIDC provider payload for {spec.name}: {e}")
            return False

        if payload.name != spec.name:
            logger.error(f"OIDC provider payload name {payload.name} does not match {spec.name}")
            return False

        return True


class IdentityMappingProvider(BaseProvider):
    """Provider for identity mappings scoped under an OIDC integration."""

    def __init__(self):
        """Initialize identity mapping provider."""
        self.client: Optional[BackendClient] = None

    async def initialize(self, config, registry):
        """Initialize provider with configuration."""
        self.client = registry.get_client("jfrog")

    def _mappings_path(self, spec: ResourceSpec) -> str:
        return f"{OIDC_API}/{spec.parent_key}/identity_mappings"

    async def status(self, spec: ResourceSpec) -> ProviderStatus:
        """Check whether the mapping is listed under its integration."""
        return await _listed(self.client, self._mappings_path(spec), spec.name)

    async def create(self, spec: ResourceSpec) -> BackendResponse:
        """Create the mapping."""
        payload = IdentityMappingPayload(**spec.payload)
        return await self.client.post(self._mappings_path(spec), serialize(payload))

    async def delete(self, spec: ResourceSpec) -> BackendResponse:
        """Delete the mapping."""
        return await self.client.delete(f"{self._mappings_path(spec)}/{spec.name}")

    async def validate_spec(self, spec: ResourceSpec) -> bool:
        """Validate mapping specification."""
        if not spec.parent_key:
            logger.error(f"Identity mapping {spec.name} has no parent integration")
            return False

        try:
            payload = IdentityMappingPayload(**spec.payload)
        except ValidationError as e:
            logger.error(f"Invalid identity mapping payload for {spec.name}: {e}")
            return False

        if payload.provider_name != spec.parent_key:
            logger.error(
                f"Identity mapping {spec.name} targets {payload.provider_name}, "
                f"expected {spec.parent_key}"
            )
            return False

        return True
