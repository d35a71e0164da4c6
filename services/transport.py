"""Time-bounded JSON calls to the statistics backend."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from core import get_logger, SyncDefaults
from core.exceptions import ConfigurationAbsent, RemoteRejected, TransportFailure

logger = get_logger(__name__)


class RemoteTransport:
    """Single-attempt HTTP client for the stats REST API.

    Every request carries a hard total timeout; aiohttp cancels the request
    when it fires and the ``async with`` block returns the connection to the
    pool on every exit path. Retrying is not done here: the availability
    policy decides whether a call is made at all.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout_ms: int = SyncDefaults.REQUEST_TIMEOUT_MS,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.base_url = base_url.strip().rstrip("/")
        self.api_key = api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)
        self._session = session
        self._owns_session = session is None

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def call(
        self,
        path: str,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Perform one request and return the decoded JSON object.

        Args:
            path: Endpoint path such as ``/stats``
            method: HTTP method
            body: Optional JSON body

        Returns:
            Parsed JSON object from a 2xx response

        Raises:
            ConfigurationAbsent: If no base URL is configured
            RemoteRejected: If the status is not 2xx
            TransportFailure: On timeout, connection errors or a body that
                is not a JSON object
        """
        if not self.configured:
            raise ConfigurationAbsent("No backend URL configured")

        url = f"{self.base_url}{path}"
        session = self._get_session()
        try:
            async with session.request(
                method,
                url,
                json=body,
                headers=self._headers(),
                timeout=self.timeout,
            ) as response:
                if not 200 <= response.status < 300:
                    raise RemoteRejected(response.status, path)
                payload = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise TransportFailure(
                f"{method} {path} timed out after {self.timeout.total:.1f}s", e
            ) from e
        except aiohttp.ClientError as e:
            raise TransportFailure(f"{method} {path} failed: {e}", e) from e
        except ValueError as e:
            # JSONDecodeError from a 2xx response
            raise TransportFailure(f"{method} {path} returned invalid JSON", e) from e

        if not isinstance(payload, dict):
            raise TransportFailure(f"{method} {path} returned {type(payload).__name__}, expected object")

        logger.debug(f"{method} {path} -> {response.status}")
        return payload

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "RemoteTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
