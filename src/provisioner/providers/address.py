"""Provider for reserving global static IP addresses on GCE."""

import logging
from typing import Dict, Optional

from pydantic import ValidationError

from provisioner.backend import BackendClient, BackendResponse, BackendUnavailableError
from provisioner.engine.errors import TerminalRequestError, TransientBackendError
from provisioner.models.payloads import StaticAddressPayload, serialize
from provisioner.models.resource import ErrorDetail, ResourceSpec
from provisioner.providers.base import BaseProvider, ProviderStatus


logger = logging.getLogger(__name__)

# Each globalOperations wait call blocks for up to two minutes server-side
OPERATION_WAITS = 5


class StaticAddressProvider(BaseProvider):
    """Provider for global static addresses."""

    def __init__(self):
        """Initialize static address provider."""
        self.client: Optional[BackendClient] = None
        self.project_id: Optional[str] = None

    async def initialize(self, config, registry):
        """Initialize provider with configuration."""
        if config.gcp is None:
            logger.debug("No GCP project configured, static addresses disabled")
            return
        self.project_id = config.gcp.project_id
        self.client = registry.get_client("gcp")

    @property
    def _operations_path(self) -> str:
        return f"/compute/v1/projects/{self.project_id}/global/operations"

    @property
    def _addresses_path(self) -> str:
        return f"/compute/v1/projects/{self.project_id}/global/addresses"

    def _require_client(self) -> BackendClient:
        if self.client is None:
            raise RuntimeError("Static address provider requires a GCP project configuration")
        return self.client

    async def status(self, spec: ResourceSpec) -> ProviderStatus:
        """Look the address up directly by name."""
        client = self._require_client()
        try:
            response = await client.get(f"{self._addresses_path}/{spec.name}")
        except BackendUnavailableError as e:
            logger.warning(f"Error checking address {spec.name}: {e}")
            return ProviderStatus.UNKNOWN

        if response.ok:
            body = response.json() or {}
            if body.get("address"):
                logger.debug(f"Address {spec.name} is reserved as {body['address']}")
            return ProviderStatus.PRESENT
        if response.status_code == 404:
            return ProviderStatus.ABSENT
        return ProviderStatus.UNKNOWN

    async def create(self, spec: ResourceSpec) -> BackendResponse:
        """Reserve the address and wait for the insert operation to finish.

        An operation that finishes with an error raises TerminalRequestError
        carrying the operation body. One still running after the wait budget
        raises TransientBackendError.
        """
        client = self._require_client()
        payload = StaticAddressPayload(**spec.payload)
        response = await client.post(self._addresses_path, serialize(payload))
        if not response.ok:
            return response

        operation = response.json()
        if not isinstance(operation, dict) or not operation.get("name"):
            return response

        op_name = operation["name"]
        waits = 0
        while operation.get("status") != "DONE":
            if waits >= OPERATION_WAITS:
                raise TransientBackendError(
                    f"Reservation of {spec.name} still {operation.get('status')}",
                    ErrorDetail(status_code=response.status_code, body=response.body,
                                message=f"Operation {op_name} did not finish"),
                )
            response = await client.post(f"{self._operations_path}/{op_name}/wait", {})
            waits += 1
            if not response.ok:
                return response
            operation = response.json() or {}

        if operation.get("error"):
            message = f"Reservation of {spec.name} failed (operation {op_name})"
            raise TerminalRequestError(
                message,
                ErrorDetail(status_code=response.status_code, body=response.body, message=message),
            )

        logger.debug(f"Operation {op_name} for {spec.name} is DONE")
        return response

    async def details(self, spec: ResourceSpec) -> Dict[str, str]:
        """Reserved IP of the address, if it can be read back."""
        try:
            response = await self._require_client().get(f"{self._addresses_path}/{spec.name}")
        except BackendUnavailableError as e:
            logger.warning(f"Error reading address {spec.name}: {e}")
            return {}

        body = response.json() if response.ok else None
        if isinstance(body, dict) and body.get("address"):
            return {"address": body["address"]}
        return {}

    async def delete(self, spec: ResourceSpec) -> BackendResponse:
        """Release the address."""
        return await self._require_client().delete(f"{self._addresses_path}/{spec.name}")

    async def validate_spec(self, spec: ResourceSpec) -> bool:
        """Validate address specification."""
        if self.client is None:
            logger.error(f"Cannot reserve {spec.name}: no GCP project configured")
            return False

        try:
            payload = StaticAddressPayload(**spec.payload)
        except ValidationError as e:
            logger.error(f"Invalid static address payload for {spec.name}: {e}")
            return False

        if payload.name != spec.name:
            logger.error(f"Static address payload name {payload.name} does not match {spec.name}")
            return False

        return True
