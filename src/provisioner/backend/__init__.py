"""HTTP access to the external systems resources live in."""

from provisioner.backend.client import BackendClient, BackendResponse, BackendUnavailableError

__all__ = [
    "BackendClient",
    "BackendResponse",
    "BackendUnavailableError",
]
