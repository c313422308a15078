"""Resource specification and reconciliation result models."""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResourceKind(str, Enum):
    """Kinds of external resources the provisioner can reconcile."""
    STATIC_ADDRESS = "StaticAddress"
    OIDC_PROVIDER = "OidcProvider"
    IDENTITY_MAPPING = "IdentityMapping"

    @property
    def parent_kind(self) -> Optional["ResourceKind"]:
        """Kind of resource this kind is scoped under, if any."""
        if self is ResourceKind.IDENTITY_MAPPING:
            return ResourceKind.OIDC_PROVIDER
        return None


class ResourceSpec(BaseModel):
    """Desired state of a single named external resource."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ResourceKind = Field(..., description="Resource kind")
    name: str = Field(..., min_length=1, description="Idempotency and lookup key")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Creation parameters")
    parent_key: Optional[str] = Field(None, description="Name of the parent resource")

    @property
    def key(self) -> tuple:
        """Identity tuple used to decide whether the resource already exists."""
        return (self.kind, self.name, self.parent_key)

    @property
    def is_scoped(self) -> bool:
        return self.parent_key is not None

    def describe(self) -> str:
        if self.parent_key:
            return f"{self.kind.value} {self.parent_key}/{self.name}"
        return f"{self.kind.value} {self.name}"


class ReconcileState(str, Enum):
    """Final outcome of a reconcile attempt."""
    ALREADY_EXISTS = "AlreadyExists"
    CREATED = "Created"
    FAILED_TERMINAL = "FailedTerminal"
    FAILED_EXHAUSTED = "FailedExhausted"

    @property
    def succeeded(self) -> bool:
        return self in (ReconcileState.ALREADY_EXISTS, ReconcileState.CREATED)


class ErrorDetail(BaseModel):
    """Classified error detail carried by a failed result."""
    status_code: Optional[int] = Field(None, description="HTTP status, None on transport failure")
    body: str = Field(default="", description="Raw backend response body")
    message: str = Field(default="")


class ReconciliationResult(BaseModel):
    """Outcome of reconciling one ResourceSpec."""
    spec: ResourceSpec
    state: ReconcileState
    attempts: int = Field(default=0, ge=0)
    last_error: Optional[ErrorDetail] = None
    skipped: bool = Field(default=False, description="Not attempted because the parent failed")

    @property
    def succeeded(self) -> bool:
        return self.state.succeeded

    def raise_for_state(self) -> "ReconciliationResult":
        """Raise the typed error matching a failed state, else return self."""
        # Deferred: the engine package imports this module
        from provisioner.engine.errors import error_for_result

        error = error_for_result(self)
        if error is not None:
            raise error
        return self
