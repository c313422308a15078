"""Provider registry for managing resource providers."""

import logging
from typing import Dict, Optional, Type

import httpx

from provisioner.backend import BackendClient
from provisioner.models.resource import ResourceKind
from provisioner.providers.address import StaticAddressProvider
from provisioner.providers.base import BaseProvider
from provisioner.providers.oidc import IdentityMappingProvider, OidcProviderProvider


logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry mapping resource kinds to providers and owning their clients."""

    def __init__(
        self,
        tokens: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize provider registry."""
        self._tokens = tokens or {}
        self._transport = transport
        self._clients: Dict[str, BackendClient] = {}
        self._providers: Dict[ResourceKind, BaseProvider] = {}
        self._provider_classes: Dict[ResourceKind, Type[BaseProvider]] = {
            ResourceKind.STATIC_ADDRESS: StaticAddressProvider,
            ResourceKind.OIDC_PROVIDER: OidcProviderProvider,
            ResourceKind.IDENTITY_MAPPING: IdentityMappingProvider,
        }

    async def initialize(self, config):
        """Create backend clients, then initialize all providers with two-pass injection."""
        self._clients["jfrog"] = BackendClient(
            config.jfrog.url,
            token=self._tokens.get("jfrog"),
            timeout=config.jfrog.timeout,
            transport=self._transport,
        )
        if config.gcp is not None:
            self._clients["gcp"] = BackendClient(
                config.gcp.api_url,
                token=self._tokens.get("gcp"),
                timeout=config.gcp.timeout,
                transport=self._transport,
            )

        # Phase 1: Instantiate all providers
        for kind, provider_class in self._provider_classes.items():
            try:
                self._providers[kind] = provider_class()
            except Exception as e:
                logger.error(f"Failed to instantiate provider {kind.value}: {e}")
                raise

        # Phase 2: Initialize and inject registry
        for kind, provider in self._providers.items():
            try:
                await provider.initialize(config, self)
                logger.debug(f"Initialized provider: {kind.value}")
            except Exception as e:
                logger.error(f"Failed to initialize provider {kind.value}: {e}")
                raise

    def get_client(self, name: str) -> Optional[BackendClient]:
        """Get a backend client by name."""
        return self._clients.get(name)

    def get_provider(self, kind: ResourceKind) -> Optional[BaseProvider]:
        """Get the provider for a resource kind."""
        return self._providers.get(kind)

    def list_providers(self) -> list[ResourceKind]:
        """List kinds with a registered provider."""
        return list(self._providers.keys())

    async def close(self):
        """Close all backend clients."""
        for client in self._clients.values():
            await client.aclose()
        self._clients.clear()
