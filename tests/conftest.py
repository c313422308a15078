"""Shared fixtures: an in-memory JFrog Access and GCE addresses backend."""

import json

import httpx
import pytest

from provisioner.models.config import GcpConfig, JFrogConfig, ProvisionerConfig, RetryConfig


OIDC_PREFIX = "/access/api/v1/oidc"
ADDRESS_MARKER = "/global/addresses"
OPERATION_MARKER = "/global/operations"


class FakeBackend:
    """Minimal stateful stand-in for the JFrog and GCE REST APIs."""

    def __init__(self):
        self.integrations = {}
        self.mappings = {}
        self.addresses = {}
        self.requests = []
        # Status codes forced onto upcoming POSTs, consumed in order
        self.forced_post_statuses = []
        self.list_status = 200
        # Error payload reported by the next finished insert operation
        self.operation_error = None
        self.operations = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith(OIDC_PREFIX):
            return self._oidc(request, path[len(OIDC_PREFIX):].strip("/"))
        if ADDRESS_MARKER in path:
            return self._address(request, path.split(ADDRESS_MARKER, 1)[1].strip("/"))
        if OPERATION_MARKER in path:
            return self._operation(request, path.split(OPERATION_MARKER, 1)[1].strip("/"))
        return httpx.Response(404, json={"error": "not found"})

    def posts(self, fragment: str = "") -> list:
        return [r for r in self.requests if r.method == "POST" and fragment in r.url.path]

    def _forced(self):
        if self.forced_post_statuses:
            return httpx.Response(self.forced_post_statuses.pop(0), text="forced failure")
        return None

    def _oidc(self, request, rest):
        parts = [p for p in rest.split("/") if p]
        method = request.method

        if not parts:
            if method == "GET":
                if self.list_status != 200:
                    return httpx.Response(self.list_status, text="list unavailable")
                return httpx.Response(200, json=list(self.integrations.values()))
            if method == "POST":
                forced = self._forced()
                if forced is not None:
                    return forced
                body = json.loads(request.content)
                if body["name"] in self.integrations:
                    return httpx.Response(409, json={"errors": [{"message": "exists"}]})
                self.integrations[body["name"]] = body
                self.mappings.setdefault(body["name"], {})
                return httpx.Response(201, json=body)

        provider = parts[0]
        if len(parts) == 1 and method == "DELETE":
            if provider not in self.integrations:
                return httpx.Response(404)
            del self.integrations[provider]
            self.mappings.pop(provider, None)
            return httpx.Response(204)

        if len(parts) >= 2 and parts[1] == "identity_mappings":
            if method == "POST":
                forced = self._forced()
                if forced is not None:
                    return forced
            if provider not in self.integrations:
                return httpx.Response(404, json={"errors": [{"message": "provider not found"}]})
            mappings = self.mappings[provider]
            if method == "GET":
                return httpx.Response(200, json=list(mappings.values()))
            if method == "POST":
                body = json.loads(request.content)
                if body["name"] in mappings:
                    return httpx.Response(409)
                mappings[body["name"]] = body
                return httpx.Response(201, json=body)
            if method == "DELETE" and len(parts) == 3:
                if mappings.pop(parts[2], None) is None:
                    return httpx.Response(404)
                return httpx.Response(204)

        return httpx.Response(400, text="unsupported")

    def _address(self, request, name):
        method = request.method
        if method == "GET":
            if name not in self.addresses:
                return httpx.Response(404, json={"error": {"code": 404}})
            return httpx.Response(200, json=self.addresses[name])
        if method == "POST":
            forced = self._forced()
            if forced is not None:
                return forced
            body = json.loads(request.content)
            if body["name"] in self.addresses:
                return httpx.Response(409, json={"error": {"code": 409}})
            op_name = f"operation-{len(self.operations) + 1}"
            operation = {"kind": "compute#operation", "name": op_name, "status": "DONE"}
            if self.operation_error is not None:
                operation["error"] = self.operation_error
            else:
                index = len(self.addresses) + 10
                self.addresses[body["name"]] = dict(body, address=f"34.120.0.{index}")
            self.operations[op_name] = operation
            return httpx.Response(
                200, json={"kind": "compute#operation", "name": op_name, "status": "RUNNING"}
            )
        if method == "DELETE":
            if self.addresses.pop(name, None) is None:
                return httpx.Response(404)
            return httpx.Response(200, json={"kind": "compute#operation"})
        return httpx.Response(400)

    def _operation(self, request, rest):
        op_name, _, action = rest.partition("/")
        if op_name not in self.operations or action != "wait" or request.method != "POST":
            return httpx.Response(404, json={"error": {"code": 404}})
        return httpx.Response(200, json=self.operations[op_name])


@pytest.fixture
def fake_backend():
    """Fresh fake backend."""
    return FakeBackend()


@pytest.fixture
def transport(fake_backend):
    """httpx transport routed to the fake backend."""
    return httpx.MockTransport(fake_backend.handler)


@pytest.fixture
def config():
    """Provisioner configuration pointing at the fake backend, without backoff delays."""
    return ProvisionerConfig(
        project_key="bv",
        jfrog=JFrogConfig(url="https://jfrog.test"),
        gcp=GcpConfig(project_id="demo-project", api_url="https://compute.test"),
        retry=RetryConfig(max_attempts=3, base_delay=0),
    )
