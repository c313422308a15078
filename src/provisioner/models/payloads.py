"""Typed request builders for backend creation calls."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


GITHUB_ACTIONS_ISSUER = "https://token.actions.githubusercontent.com"
DEFAULT_TOKEN_SCOPE = "applied-permissions/user"


class OidcProviderPayload(BaseModel):
    """JFrog OIDC integration creation body.

    Only the minimal fields are sent; they are accepted across Access API
    versions.
    """
    name: str = Field(..., min_length=1)
    issuer_url: str = Field(default=GITHUB_ACTIONS_ISSUER)

    model_config = ConfigDict(extra="forbid")


class TokenSpec(BaseModel):
    """Token issued to a workflow that matches an identity mapping."""
    username: str = Field(..., min_length=1)
    scope: str = Field(default=DEFAULT_TOKEN_SCOPE)


class IdentityMappingPayload(BaseModel):
    """JFrog OIDC identity mapping creation body."""
    name: str = Field(..., min_length=1)
    provider_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    priority: int = Field(default=1, ge=1)
    claims: Dict[str, str] = Field(default_factory=dict)
    token_spec: TokenSpec

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def for_repository(cls, name: str, provider_name: str, repository: str, username: str):
        """Build a mapping that binds a GitHub repository to a platform user."""
        return cls(
            name=name,
            provider_name=provider_name,
            description=f"Identity mapping for {name}",
            priority=1,
            claims={"repository": repository},
            token_spec=TokenSpec(username=username),
        )


class StaticAddressPayload(BaseModel):
    """GCE global address creation body."""
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    ipVersion: str = Field(default="IPV4")

    model_config = ConfigDict(extra="forbid")


def serialize(payload: BaseModel) -> dict:
    """Serialize a request builder into a JSON-ready dict."""
    return payload.model_dump(exclude_none=True)
