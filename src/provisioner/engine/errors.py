"""Typed errors for failed reconciliations."""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from provisioner.models.resource import ErrorDetail, ReconciliationResult


class ReconcileError(Exception):
    """Base class for reconciliation failures."""

    def __init__(self, message: str, detail: Optional["ErrorDetail"] = None):
        super().__init__(message)
        self.detail = detail

    @property
    def body(self) -> str:
        return self.detail.body if self.detail else ""


class TransientBackendError(ReconcileError):
    """Backend failure expected to clear on retry (5xx, or 404 on a scoped resource)."""
    pass


class TerminalRequestError(ReconcileError):
    """The backend rejected the request on its merits; retrying will not help."""
    pass


class RetriesExhaustedError(ReconcileError):
    """Transient failures persisted past the retry budget."""
    pass


def error_for_result(result: "ReconciliationResult") -> Optional[ReconcileError]:
    """Build the typed error for a failed result, or None on success."""
    from provisioner.models.resource import ReconcileState

    detail = result.last_error
    message = detail.message if detail and detail.message else result.spec.describe()
    if result.state is ReconcileState.FAILED_TERMINAL:
        return TerminalRequestError(message, detail)
    if result.state is ReconcileState.FAILED_EXHAUSTED:
        return RetriesExhaustedError(message, detail)
    return None
