"""
Tests for RemoteClient.

Covers the response envelope, connectivity status, the in-flight counter and
the best-effort webhook.
"""

import asyncio

import httpx
import pytest

from eosdash.core.config import ApiConfig
from eosdash.core.exceptions import ConfigError
from eosdash.core.remote import ConnectionStatus, RemoteClient

from conftest import API_BASE, WEBHOOK_BASE


def make_client(handler, webhook_url=WEBHOOK_BASE):
    return RemoteClient(API_BASE, webhook_url, transport=httpx.MockTransport(handler))


class TestRemoteClientInit:
    """Test construction and configuration."""

    def test_initial_state(self, client):
        assert client.status is ConnectionStatus.DISCONNECTED
        assert client.busy is False
        assert client.in_flight == 0

    def test_trailing_slash_stripped(self):
        client = RemoteClient("https://api.test/api/v1/", "https://api.test/hook/")
        assert client.base_url == "https://api.test/api/v1"
        assert client.webhook_url == "https://api.test/hook"

    def test_rejects_non_http_url(self):
        with pytest.raises(ConfigError, match="base_url"):
            RemoteClient("ftp://api.test")

    def test_empty_webhook_disables_sync(self):
        assert RemoteClient(API_BASE, "").webhook_url is None

    def test_from_config(self):
        config = ApiConfig(base_url=API_BASE, webhook_url=None, timeout_seconds=5)
        client = RemoteClient.from_config(config)
        assert client.base_url == API_BASE
        assert client.webhook_url is None


class TestRemoteClientCall:
    """Test call() outcomes."""

    @pytest.mark.asyncio
    async def test_success_sets_connected(self, client, fake_api):
        fake_api.seed("rocks", {"id": "r1", "title": "Launch"})

        result = await client.call("/rocks")

        assert result.success is True
        assert result.data == [{"id": "r1", "title": "Launch"}]
        assert result.error is None
        assert client.status is ConnectionStatus.CONNECTED

    @pytest.mark.asyncio
    async def test_sends_json_body(self, client, fake_api):
        await client.call("/rocks", "POST", {"id": "r1", "title": "Launch"})

        request = fake_api.requests[-1]
        assert request.method == "POST"
        assert str(request.url) == f"{API_BASE}/rocks"
        assert request.headers["content-type"] == "application/json"
        assert fake_api.store["rocks"] == [{"id": "r1", "title": "Launch"}]

    @pytest.mark.asyncio
    async def test_server_rejection_keeps_status(self, client, fake_api):
        """Test success=false returns the error without touching status."""
        await client.call("/rocks")
        fake_api.failures[("POST", "rocks")] = "Duplicate id"

        result = await client.call("/rocks", "POST", {"id": "r1"})

        assert result.success is False
        assert result.error == "Duplicate id"
        assert client.status is ConnectionStatus.CONNECTED

    @pytest.mark.asyncio
    async def test_rejection_without_message(self):
        def handler(request):
            return httpx.Response(500, json={"success": False})

        result = await make_client(handler).call("/rocks")

        assert result.success is False
        assert result.error == "HTTP 500"

    @pytest.mark.asyncio
    async def test_network_error_sets_error_status(self, client, fake_api):
        fake_api.offline.add("*")

        result = await client.call("/rocks")

        assert result.success is False
        assert "Connection refused" in result.error
        assert client.status is ConnectionStatus.ERROR

    @pytest.mark.asyncio
    async def test_undecodable_body(self):
        def handler(request):
            return httpx.Response(502, text="<html>Bad gateway</html>")

        client = make_client(handler)
        result = await client.call("/rocks")

        assert result.success is False
        assert "HTTP 502" in result.error
        assert client.status is ConnectionStatus.ERROR

    @pytest.mark.asyncio
    async def test_non_object_envelope(self):
        def handler(request):
            return httpx.Response(200, json=[1, 2, 3])

        client = make_client(handler)
        result = await client.call("/rocks")

        assert result.success is False
        assert client.status is ConnectionStatus.ERROR

    @pytest.mark.asyncio
    async def test_unexpected_exception_never_escapes(self):
        def handler(request):
            raise RuntimeError("boom")

        client = make_client(handler)
        result = await client.call("/rocks")

        assert result.success is False
        assert "boom" in result.error
        assert client.status is ConnectionStatus.ERROR


class TestBusyFlag:
    """Test the in-flight counter behind ``busy``."""

    @pytest.mark.asyncio
    async def test_busy_while_outstanding(self, client, fake_api):
        release = fake_api.gate("GET", "rocks")

        task = asyncio.create_task(client.call("/rocks"))
        await asyncio.sleep(0.01)
        assert client.busy is True
        assert client.in_flight == 1

        release.set()
        await task
        assert client.busy is False

    @pytest.mark.asyncio
    async def test_short_call_does_not_clear_busy(self, client, fake_api):
        """Test busy stays true while a longer overlapping call is pending."""
        release = fake_api.gate("GET", "rocks")

        slow = asyncio.create_task(client.call("/rocks"))
        await asyncio.sleep(0.01)
        await client.call("/issues")

        assert client.busy is True
        assert client.in_flight == 1

        release.set()
        await slow
        assert client.busy is False
        assert client.in_flight == 0

    @pytest.mark.asyncio
    async def test_busy_cleared_after_failure(self, client, fake_api):
        fake_api.offline.add("*")
        await client.call("/rocks")
        assert client.busy is False


class TestNotify:
    """Test webhook posting."""

    @pytest.mark.asyncio
    async def test_posts_to_kind_path(self, client, fake_api):
        ok = await client.notify("rock", {"id": "r1"})

        assert ok is True
        assert fake_api.webhook_calls == [("rock", {"id": "r1"})]
        assert str(fake_api.requests[-1].url) == f"{WEBHOOK_BASE}/rock"

    @pytest.mark.asyncio
    async def test_non_2xx_is_failure(self, client, fake_api):
        fake_api.webhook_status = 503
        assert await client.notify("rock", {"id": "r1"}) is False

    @pytest.mark.asyncio
    async def test_network_failure_does_not_touch_status(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        client = make_client(handler)
        assert await client.notify("all", {}) is False
        assert client.status is ConnectionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_disabled_webhook(self, client_without_webhook, fake_api):
        assert await client_without_webhook.notify("rock", {}) is False
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, transport):
        async with RemoteClient(API_BASE, transport=transport) as client:
            await client.call("/rocks")
        assert client._http.is_closed
