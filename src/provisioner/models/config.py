"""Configuration models."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JFrogConfig(BaseModel):
    """JFrog platform connection settings."""
    url: str = Field(default="https://evidencetrial.jfrog.io")
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Normalize the base URL."""
        return v.rstrip("/")


class GcpConfig(BaseModel):
    """Google Compute Engine settings for static address reservation."""
    project_id: str = Field(..., min_length=1)
    api_url: str = Field(default="https://compute.googleapis.com")
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Normalize the base URL."""
        return v.rstrip("/")


class RetryConfig(BaseModel):
    """Retry budget for transient creation failures."""
    max_attempts: int = Field(default=3, ge=1, le=3)
    base_delay: float = Field(default=3.0, ge=0)


class ServiceIdentity(BaseModel):
    """A BookVerse service that authenticates to JFrog from GitHub Actions."""
    name: str = Field(..., min_length=1, description="Service short name")
    username: str = Field(..., min_length=1, description="Platform user the token maps to")
    display_name: Optional[str] = None


DEFAULT_SERVICES = [
    ServiceIdentity(name="inventory", username="frank.inventory@bookverse.com",
                    display_name="BookVerse Inventory"),
    ServiceIdentity(name="recommendations", username="grace.ai@bookverse.com",
                    display_name="BookVerse Recommendations"),
    ServiceIdentity(name="checkout", username="henry.checkout@bookverse.com",
                    display_name="BookVerse Checkout"),
    ServiceIdentity(name="platform", username="diana.architect@bookverse.com",
                    display_name="BookVerse Platform"),
    ServiceIdentity(name="web", username="alice.developer@bookverse.com",
                    display_name="BookVerse Web"),
]


class ProvisionerConfig(BaseModel):
    """Main configuration model."""
    model_config = ConfigDict(extra="ignore")

    project_key: str = Field(default="bookverse", min_length=1)
    github_org: str = Field(default="yonatanp-jfrog", min_length=1)
    log_level: str = Field(default="INFO")
    jfrog: JFrogConfig = Field(default_factory=JFrogConfig)
    gcp: Optional[GcpConfig] = None
    retry: RetryConfig = Field(default_factory=RetryConfig)
    static_addresses: List[str] = Field(default_factory=lambda: ["argocd-ip", "bookverse-web-ip"])
    services: List[ServiceIdentity] = Field(default_factory=lambda: list(DEFAULT_SERVICES))

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    def integration_name(self, service: str) -> str:
        """Name of the OIDC integration for a service."""
        return f"{self.project_key}-{service}-github"
