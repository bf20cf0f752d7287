"""
Async client for the persistence API and the CRM webhook.

Every request goes through a single ``httpx.AsyncClient``. Failures never
escape :meth:`RemoteClient.call`: a network error, an undecodable body or an
envelope with ``success: false`` all come back as ``ApiResult(success=False)``.
The webhook side (:meth:`RemoteClient.notify`) is best-effort and only
reports a boolean.

Example:
    >>> async with RemoteClient("https://api.example.com/api/v1") as client:
    ...     result = await client.call("/metrics")
    ...     if result.success:
    ...         print(len(result.data))
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING, Any

import httpx

from eosdash.core.exceptions import ConfigError
from eosdash.core.remote.models import ApiResult, ConnectionStatus

if TYPE_CHECKING:
    from eosdash.core.config.models import ApiConfig

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _check_url(name: str, url: str) -> str:
    if not url.startswith(("http://", "https://")):
        raise ConfigError(f"{name} must be an http(s) URL, got {url!r}", url=url)
    return url.rstrip("/")


class RemoteClient:
    """
    HTTP client for the persistence API.

    Tracks two pieces of observable state:

    - ``status``: ``disconnected`` until the first call, ``connected`` after a
      confirmed call, ``error`` after a transport-level failure. A call the
      server rejects (``success: false``) leaves it unchanged.
    - ``busy``: true while any call is outstanding. Backed by an in-flight
      counter so a short call finishing does not hide a long one.

    Attributes:
        base_url: Persistence API base, without trailing slash
        webhook_url: CRM webhook base, or None to disable syncing
    """

    def __init__(
        self,
        base_url: str,
        webhook_url: str | None = None,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Persistence API base URL (e.g. ``https://host/api/v1``)
            webhook_url: CRM webhook base URL; None disables ``notify``
            timeout: Per-request timeout in seconds; None waits indefinitely
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)

        Raises:
            ConfigError: If a URL is not http(s)
        """
        self.base_url = _check_url("base_url", base_url)
        self.webhook_url = _check_url("webhook_url", webhook_url) if webhook_url else None
        self._http = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        self._status = ConnectionStatus.DISCONNECTED
        self._in_flight = 0

    @classmethod
    def from_config(
        cls,
        config: ApiConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> RemoteClient:
        """Build a client from the ``api`` section of the configuration."""
        return cls(
            config.base_url,
            config.webhook_url,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    @property
    def status(self) -> ConnectionStatus:
        """Connectivity status observed by the most recent call."""
        return self._status

    def set_status(self, status: ConnectionStatus) -> None:
        """Record an aggregate outcome (used after a bulk load)."""
        self._status = status

    @property
    def in_flight(self) -> int:
        """Number of API calls currently awaiting a response."""
        return self._in_flight

    @property
    def busy(self) -> bool:
        """True while at least one API call is outstanding."""
        return self._in_flight > 0

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
    ) -> ApiResult:
        """
        Issue a request against the persistence API.

        Args:
            endpoint: Path below the base URL, e.g. ``/rocks/42``
            method: HTTP method
            body: JSON-serializable request body, or None for no body

        Returns:
            ApiResult built from the response envelope. Never raises.
        """
        url = f"{self.base_url}{endpoint}"
        self._in_flight += 1
        try:
            logger.debug("API call: %s %s %s", method, url, body)
            try:
                response = await self._http.request(method, url, json=body)
            except httpx.HTTPError as e:
                logger.warning("API request failed: %s %s: %s", method, url, e)
                self._status = ConnectionStatus.ERROR
                return ApiResult(success=False, error=f"Network error: {e}")
            except Exception as e:
                logger.exception("Unexpected error calling %s %s", method, url)
                self._status = ConnectionStatus.ERROR
                return ApiResult(success=False, error=f"Unexpected error: {e}")

            try:
                payload = response.json()
            except ValueError as e:
                logger.warning(
                    "Undecodable response from %s %s (HTTP %s)", method, url, response.status_code
                )
                self._status = ConnectionStatus.ERROR
                return ApiResult(
                    success=False,
                    error=f"Invalid response (HTTP {response.status_code}): {e}",
                )

            logger.debug("API response: %s", payload)

            if not isinstance(payload, dict):
                self._status = ConnectionStatus.ERROR
                return ApiResult(
                    success=False,
                    error=f"Malformed response envelope (HTTP {response.status_code})",
                )

            if payload.get("success"):
                self._status = ConnectionStatus.CONNECTED
                return ApiResult(success=True, data=payload.get("data"))

            error = payload.get("error") or f"HTTP {response.status_code}"
            logger.error("API error: %s %s: %s", method, url, error)
            return ApiResult(success=False, error=str(error))
        finally:
            self._in_flight -= 1

    async def notify(self, kind: str, payload: Any) -> bool:
        """
        Post an entity to the CRM webhook at ``<webhook_url>/<kind>``.

        Best-effort: the outcome is only a boolean and never touches the
        connectivity status.

        Args:
            kind: Wire name of the entity kind, or ``all`` for a full sync
            payload: JSON-serializable body

        Returns:
            True when the webhook answered with a 2xx status
        """
        if self.webhook_url is None:
            logger.debug("No webhook configured; skipping %s sync", kind)
            return False

        url = f"{self.webhook_url}/{kind}"
        try:
            response = await self._http.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.warning("Webhook sync to %s failed: %s", url, e)
            return False
        except Exception:
            logger.exception("Unexpected error posting to webhook %s", url)
            return False

        if response.is_success:
            return True
        logger.warning("Webhook sync to %s returned HTTP %s", url, response.status_code)
        return False

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    async def __aenter__(self) -> RemoteClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
