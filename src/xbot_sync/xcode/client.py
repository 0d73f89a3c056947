"""Async Xcode Server API client using httpx.

Xcode Server exposes bots and their integrations over a JSON REST API
(default port 20343). Bots are CouchDB-style documents: deleting one
requires both its id and its current revision.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from xbot_sync.config import get_settings
from xbot_sync.logging import get_logger
from xbot_sync.schemas import BotConfiguration, BotRecord, Integration

from .exceptions import XcodeAuthenticationError, XcodeNotFoundError, XcodeServerError

logger = get_logger(__name__)


class XcodeBot:
    """A bot on an Xcode Server, bound to the client that fetched it."""

    def __init__(self, record: BotRecord, client: XcodeServerClient) -> None:
        self._record = record
        self._client = client

    @property
    def id(self) -> str:
        return self._record.id

    @property
    def rev(self) -> str:
        return self._record.rev

    @property
    def name(self) -> str:
        return self._record.name

    async def delete(self) -> None:
        """Delete this bot from the server."""
        await self._client.delete_bot(self.id, self.rev)

    async def integrate(self) -> Integration | None:
        """Queue a new integration of this bot."""
        return await self._client.start_integration(self.id)

    async def fetch_latest_integration(self) -> Integration | None:
        """Fetch the most recent integration, or None if it never ran."""
        return await self._client.latest_integration(self.id)

    def __repr__(self) -> str:
        return f"XcodeBot(id={self.id!r}, name={self.name!r})"


class XcodeServerClient:
    """Async Xcode Server API client.

    Usage:
        async with XcodeServerClient() as server:
            bots = await server.fetch_bots()
            for bot in bots:
                print(bot.name)
    """

    def __init__(
        self,
        base_url: str | None = None,
        user: str | None = None,
        password: str | None = None,
        *,
        verify_tls: bool | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Xcode Server client.

        Args:
            base_url: API root (e.g., "https://ci.local:20343/api").
                      Defaults to XCODE_SERVER_URL.
            user: Basic auth user. Defaults to XCODE_SERVER_USER.
            password: Basic auth password. Defaults to XCODE_SERVER_PASSWORD.
            verify_tls: Verify the server certificate. Defaults to
                        XCODE_SERVER_VERIFY_TLS.
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.xcode_server_url).rstrip("/")
        user = user if user is not None else settings.xcode_server_user
        password = password if password is not None else settings.xcode_server_password
        verify = settings.xcode_server_verify_tls if verify_tls is None else verify_tls

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            verify=verify,
            auth=httpx.BasicAuth(user, password) if user else None,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> XcodeServerClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Bots
    # -------------------------------------------------------------------------
    async def fetch_bots(self) -> list[XcodeBot]:
        """List every bot on the server.

        Bots that fail validation are skipped.
        """
        data = await self._request("GET", "/bots")
        bots: list[XcodeBot] = []
        for item in data.get("results", []):
            try:
                bots.append(XcodeBot(BotRecord.model_validate(item), self))
            except ValidationError:
                logger.debug("Skipping bot that failed validation: {}", item.get("name"))
                continue
        logger.debug("Fetched {} bots from {}", len(bots), self.base_url)
        return bots

    async def create_bot(self, config: BotConfiguration) -> XcodeBot:
        """Create a bot from a full configuration.

        Returns:
            The created bot

        Raises:
            XcodeServerError: If the server rejects the configuration
        """
        data = await self._request("POST", "/bots", body=config.to_payload())
        try:
            return XcodeBot(BotRecord.model_validate(data), self)
        except ValidationError as e:
            raise XcodeServerError(f"Unexpected create response for bot {config.name}") from e

    async def delete_bot(self, bot_id: str, rev: str) -> None:
        """Delete a bot by id and revision."""
        await self._request("DELETE", f"/bots/{bot_id}/{rev}")

    # -------------------------------------------------------------------------
    # Integrations
    # -------------------------------------------------------------------------
    async def start_integration(self, bot_id: str) -> Integration | None:
        """Queue an integration for a bot.

        Returns:
            The queued integration, or None if the server returned no body
        """
        data = await self._request("POST", f"/bots/{bot_id}/integrations")
        return Integration.model_validate(data) if data else None

    async def latest_integration(self, bot_id: str) -> Integration | None:
        """Fetch the most recent integration of a bot.

        Returns:
            The latest integration, or None if the bot never integrated
        """
        data = await self._request(
            "GET", f"/bots/{bot_id}/integrations", params={"last": 1}
        )
        results = data.get("results", [])
        if not results:
            return None
        return Integration.model_validate(results[0])

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------
    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make a request and return the decoded JSON body ({} when empty).

        Raises:
            XcodeServerError: On transport errors and non-2xx responses
        """
        try:
            response = await self._client.request(method, path, params=params, json=body)
        except httpx.RequestError as e:
            raise XcodeServerError(f"Cannot reach Xcode Server at {self.base_url}: {e}") from e

        if response.status_code >= 400:
            raise self._parse_error_response(method, path, response)

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise XcodeServerError(f"Invalid JSON from {method} {path}") from e
        return data if isinstance(data, dict) else {"results": data}

    def _parse_error_response(
        self,
        method: str,
        path: str,
        response: httpx.Response,
    ) -> XcodeServerError:
        """Convert an error response to our custom exceptions."""
        status = response.status_code
        message = f"Xcode Server error ({status}) for {method} {path}"

        if status in (401, 403):
            return XcodeAuthenticationError(message, status)
        elif status == 404:
            return XcodeNotFoundError(message, status)
        else:
            return XcodeServerError(message, status)
