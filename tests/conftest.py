"""
Pytest configuration and shared fixtures.

Provides config isolation, an in-memory persistence API served through
``httpx.MockTransport``, and ready-made client and mirror instances.
"""

import asyncio
import json
from typing import Any

import httpx
import pytest

from eosdash.core.config import clear_cache
from eosdash.core.mirror import EntityMirror
from eosdash.core.notifications import NotificationQueue
from eosdash.core.remote import RemoteClient

API_BASE = "https://api.test/api/v1"
WEBHOOK_BASE = "https://api.test/hook"

ENV_VARS = (
    "EOSDASH_API_BASE",
    "EOSDASH_WEBHOOK_URL",
    "EOSDASH_TIMEOUT",
    "EOSDASH_NOTIFICATION_TTL",
)

COLLECTIONS = ("metrics", "rocks", "issues", "people", "todos", "meetings", "coreValues")


# ==============================================================================
# Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the real user config, .env files and env vars."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for var in ENV_VARS:
        # setenv first so teardown restores "unset" even if a test's .env loads it
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    monkeypatch.chdir(tmp_path)
    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Fake persistence API
# ==============================================================================


class FakeApi:
    """
    In-memory stand-in for the persistence API and the CRM webhook.

    Attributes:
        store: Collection name -> list of remote records
        vision: Remote V/TO document (None until saved)
        requests: Every request seen, in order
        webhook_calls: (kind, payload) for every webhook POST
        failures: (method, collection) -> error returned with success=false
        offline: Collections whose requests raise a connection error ("*" for all)
        gates: (method, collection) -> event the response waits for
        webhook_status: HTTP status the webhook answers with
        echo_overrides: Collection -> fields laid over the echo of a POST or PUT
    """

    def __init__(self) -> None:
        self.store: dict[str, list[dict[str, Any]]] = {name: [] for name in COLLECTIONS}
        self.vision: dict[str, Any] | None = None
        self.requests: list[httpx.Request] = []
        self.webhook_calls: list[tuple[str, Any]] = []
        self.failures: dict[tuple[str, str], str] = {}
        self.offline: set[str] = set()
        self.gates: dict[tuple[str, str], asyncio.Event] = {}
        self.webhook_status = 200
        self.echo_overrides: dict[str, dict[str, Any]] = {}

    def seed(self, collection: str, *records: dict[str, Any]) -> None:
        self.store[collection].extend(dict(r) for r in records)

    def gate(self, method: str, collection: str) -> asyncio.Event:
        """Hold responses for ``method collection`` until the returned event is set."""
        event = asyncio.Event()
        self.gates[(method, collection)] = event
        return event

    def api_requests(self, method: str | None = None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.url.path.startswith("/api/v1") and (method is None or r.method == method)
        ]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content) if request.content else None
        path = request.url.path

        if path.startswith("/hook/"):
            self.webhook_calls.append((path.rsplit("/", 1)[-1], body))
            return httpx.Response(self.webhook_status, json={"ok": True})

        parts = path[len("/api/v1") :].strip("/").split("/")
        collection = parts[0]
        item_id = parts[1] if len(parts) > 1 else None

        if collection in self.offline or "*" in self.offline:
            raise httpx.ConnectError("Connection refused", request=request)

        gate = self.gates.get((request.method, collection))
        if gate is not None:
            await gate.wait()

        error = self.failures.get((request.method, collection))
        if error is not None:
            return httpx.Response(400, json={"success": False, "error": error})

        echo = {**body, **self.echo_overrides.get(collection, {})} if body else body

        if collection == "vision":
            if request.method == "PUT":
                self.vision = body
                return _ok(echo)
            return _ok(self.vision)

        records = self.store.setdefault(collection, [])
        if request.method == "GET":
            return _ok(list(records))
        if request.method == "POST":
            records.append(body)
            return _ok(echo)
        if request.method == "PUT":
            self.store[collection] = [body if r.get("id") == item_id else r for r in records]
            return _ok(echo)
        if request.method == "DELETE":
            self.store[collection] = [r for r in records if r.get("id") != item_id]
            return _ok(None)
        return httpx.Response(405, json={"success": False, "error": "Method not allowed"})


def _ok(data: Any) -> httpx.Response:
    return httpx.Response(200, json={"success": True, "data": data})


# ==============================================================================
# Client and mirror fixtures
# ==============================================================================


@pytest.fixture
def fake_api():
    """Empty in-memory persistence API."""
    return FakeApi()


@pytest.fixture
def transport(fake_api):
    return httpx.MockTransport(fake_api)


@pytest.fixture
def client(transport):
    """Remote client wired to the fake API, with the webhook enabled."""
    return RemoteClient(API_BASE, WEBHOOK_BASE, transport=transport)


@pytest.fixture
def client_without_webhook(transport):
    return RemoteClient(API_BASE, None, transport=transport)


@pytest.fixture
def notifications():
    """Queue with a TTL long enough that nothing expires during a test."""
    return NotificationQueue(ttl=60.0)


@pytest.fixture
def mirror(client, notifications):
    return EntityMirror(client, notifications)


@pytest.fixture
def sample_person_remote():
    return {
        "id": "p1",
        "name": "Ann Lee",
        "role": "COO",
        "seat": "Integrator",
        "department": "Ops",
        "get_it": True,
        "want_it": True,
        "capacity": True,
        "created_at": "2026-01-05T09:30:00.000Z",
        "updated_at": "2026-01-05T09:30:00.000Z",
    }
