"""Idempotent check-then-create reconciliation of a single resource."""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from provisioner.backend import BackendUnavailableError
from provisioner.engine.errors import TerminalRequestError, TransientBackendError
from provisioner.models.resource import (
    ErrorDetail,
    ReconciliationResult,
    ReconcileState,
    ResourceSpec,
)
from provisioner.providers.base import BaseProvider, ProviderStatus


logger = logging.getLogger(__name__)

TRANSIENT_STATUSES = frozenset({500, 502, 503, 504})

Sleeper = Callable[[float], Awaitable[None]]


class ResponseClass(Enum):
    """How a creation response is handled."""
    SUCCESS = "success"
    CONFLICT = "conflict"
    TRANSIENT = "transient"
    TERMINAL = "terminal"


def classify_response(status_code: Optional[int], scoped: bool = False) -> ResponseClass:
    """Classify a creation response status.

    ``None`` stands for a transport failure with no response at all. A 404
    on a scoped resource usually means the parent is not visible yet.
    """
    if status_code is None:
        return ResponseClass.TRANSIENT
    if 200 <= status_code < 300:
        return ResponseClass.SUCCESS
    if status_code == 409:
        return ResponseClass.CONFLICT
    if status_code in TRANSIENT_STATUSES:
        return ResponseClass.TRANSIENT
    if scoped and status_code == 404:
        return ResponseClass.TRANSIENT
    return ResponseClass.TERMINAL


class RetryPolicy:
    """Linear backoff: the delay after attempt ``n`` is ``n * base_delay``."""

    def __init__(self, max_attempts: int = 3, base_delay: float = 3.0):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    @classmethod
    def from_config(cls, retry_config) -> "RetryPolicy":
        return cls(max_attempts=retry_config.max_attempts, base_delay=retry_config.base_delay)

    def delay(self, attempt: int) -> float:
        return attempt * self.base_delay


DEFAULT_POLICY = RetryPolicy()


async def _create_once(spec: ResourceSpec, provider: BaseProvider) -> ReconcileState:
    """Issue one creation call and classify it.

    Raises TransientBackendError or TerminalRequestError for failures.
    """
    label = spec.describe()
    try:
        response = await provider.create(spec)
    except BackendUnavailableError as e:
        raise TransientBackendError(
            str(e), ErrorDetail(status_code=None, body="", message=str(e))
        ) from e

    outcome = classify_response(response.status_code, scoped=spec.is_scoped)
    if outcome is ResponseClass.SUCCESS:
        logger.info(f"{label} created successfully (HTTP {response.status_code})")
        return ReconcileState.CREATED
    if outcome is ResponseClass.CONFLICT:
        logger.info(f"{label} already exists (HTTP {response.status_code})")
        return ReconcileState.ALREADY_EXISTS

    detail = ErrorDetail(
        status_code=response.status_code,
        body=response.body,
        message=f"Failed to create {label} (HTTP {response.status_code})",
    )
    if outcome is ResponseClass.TERMINAL:
        raise TerminalRequestError(detail.message, detail)
    raise TransientBackendError(detail.message, detail)


async def reconcile(
    spec: ResourceSpec,
    provider: BaseProvider,
    policy: RetryPolicy = DEFAULT_POLICY,
    sleep: Sleeper = asyncio.sleep,
) -> ReconciliationResult:
    """Ensure the resource described by ``spec`` exists exactly once.

    Never deletes or modifies an existing resource.
    """
    label = spec.describe()

    if await provider.status(spec) == ProviderStatus.PRESENT:
        logger.info(f"{label} already exists (pre-check)")
        return ReconciliationResult(spec=spec, state=ReconcileState.ALREADY_EXISTS, attempts=0)

    last_error: Optional[ErrorDetail] = None
    for attempt in range(1, policy.max_attempts + 1):
        logger.info(f"Creating {label} (attempt {attempt}/{policy.max_attempts})")
        try:
            state = await _create_once(spec, provider)
        except TerminalRequestError as e:
            logger.error(f"{e}; response body: {e.body}")
            return ReconciliationResult(
                spec=spec,
                state=ReconcileState.FAILED_TERMINAL,
                attempts=attempt,
                last_error=e.detail,
            )
        except TransientBackendError as e:
            last_error = e.detail
            logger.warning(f"Transient error creating {label}: {e}; response body: {e.body}")
        else:
            return ReconciliationResult(spec=spec, state=state, attempts=attempt)

        # The failed call may still have taken effect
        if await provider.status(spec) == ProviderStatus.PRESENT:
            logger.info(f"Detected {label} present after error; continuing")
            return ReconciliationResult(
                spec=spec, state=ReconcileState.ALREADY_EXISTS, attempts=attempt
            )

        if attempt < policy.max_attempts:
            await sleep(policy.delay(attempt))

    logger.error(f"Failed to create {label} after {policy.max_attempts} attempts")
    return ReconciliationResult(
        spec=spec,
        state=ReconcileState.FAILED_EXHAUSTED,
        attempts=policy.max_attempts,
        last_error=last_error,
    )


class Reconciler:
    """Reconciles specs through the provider registered for their kind."""

    def __init__(self, provider_registry, policy: RetryPolicy = DEFAULT_POLICY,
                 sleep: Sleeper = asyncio.sleep):
        """Initialize reconciler."""
        self.provider_registry = provider_registry
        self.policy = policy
        self._sleep = sleep

    def _provider_for(self, spec: ResourceSpec) -> BaseProvider:
        provider = self.provider_registry.get_provider(spec.kind)
        if provider is None:
            raise RuntimeError(f"No provider registered for {spec.kind.value}")
        return provider

    async def reconcile(self, spec: ResourceSpec) -> ReconciliationResult:
        """Validate then reconcile a single spec."""
        provider = self._provider_for(spec)

        if not await provider.validate_spec(spec):
            detail = ErrorDetail(message=f"Invalid specification for {spec.describe()}")
            logger.error(detail.message)
            return ReconciliationResult(
                spec=spec, state=ReconcileState.FAILED_TERMINAL, attempts=0, last_error=detail
            )

        return await reconcile(spec, provider, policy=self.policy, sleep=self._sleep)

    async def check(self, spec: ResourceSpec) -> ProviderStatus:
        """Check a spec for existence without creating anything."""
        return await self._provider_for(spec).status(spec)

    async def details(self, spec: ResourceSpec) -> Dict[str, str]:
        """Read-back attributes of an existing resource."""
        return await self._provider_for(spec).details(spec)
