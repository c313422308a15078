"""Derive the ordered list of resources to provision from configuration."""

from typing import List, Optional

from provisioner.models.config import ProvisionerConfig
from provisioner.models.payloads import (
    IdentityMappingPayload,
    OidcProviderPayload,
    StaticAddressPayload,
    serialize,
)
from provisioner.models.resource import ResourceKind, ResourceSpec


def static_address_specs(config: ProvisionerConfig) -> List[ResourceSpec]:
    """One spec per configured address, or none without a GCP project."""
    if config.gcp is None:
        return []
    return [
        ResourceSpec(
            kind=ResourceKind.STATIC_ADDRESS,
            name=name,
            payload=serialize(StaticAddressPayload(
                name=name,
                description=f"BookVerse {config.project_key} static address",
            )),
        )
        for name in config.static_addresses
    ]


def oidc_specs(config: ProvisionerConfig) -> List[ResourceSpec]:
    """An integration followed by its identity mapping, for every service."""
    specs = []
    for service in config.services:
        integration = config.integration_name(service.name)
        specs.append(ResourceSpec(
            kind=ResourceKind.OIDC_PROVIDER,
            name=integration,
            payload=serialize(OidcProviderPayload(name=integration)),
        ))
        specs.append(ResourceSpec(
            kind=ResourceKind.IDENTITY_MAPPING,
            name=integration,
            parent_key=integration,
            payload=serialize(IdentityMappingPayload.for_repository(
                name=integration,
                provider_name=integration,
                repository=f"{config.github_org}/bookverse-{service.name}",
                username=service.username,
            )),
        ))
    return specs


def build_plan(config: ProvisionerConfig, only: Optional[ResourceKind] = None) -> List[ResourceSpec]:
    """Build the full plan in dependency order."""
    specs = static_address_specs(config) + oidc_specs(config)
    if only is not None:
        specs = [spec for spec in specs if spec.kind is only]
    return specs
