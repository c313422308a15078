"""HTTP client for the external APIs resources are reconciled against."""

import logging
from typing import Any, Dict, Optional

import httpx


logger = logging.getLogger(__name__)


class BackendUnavailableError(Exception):
    """The backend could not be reached or did not answer in time."""
    pass


class BackendResponse:
    """Status code and raw body of a backend call."""

    def __init__(self, status_code: int, body: str = "", data: Any = None):
        self.status_code = status_code
        self.body = body
        self.data = data

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decoded JSON body, or None when the body was not JSON."""
        return self.data

    def __repr__(self):
        return f"BackendResponse(status_code={self.status_code})"


class BackendClient:
    """Bearer-token authenticated JSON client with a bounded timeout."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize backend client."""
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> BackendResponse:
        return await self._send("GET", path, params=params)

    async def post(self, path: str, payload: Dict[str, Any]) -> BackendResponse:
        return await self._send("POST", path, json=payload)

    async def delete(self, path: str) -> BackendResponse:
        return await self._send("DELETE", path)

    async def _send(self, method: str, path: str, **kwargs) -> BackendResponse:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise BackendUnavailableError(f"{method} {self.base_url}{path} failed: {e}") from e

        logger.debug(f"{method} {path} -> HTTP {response.status_code}")
        try:
            data = response.json() if response.content else None
        except ValueError:
            data = None
        return BackendResponse(response.status_code, response.text, data)

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
