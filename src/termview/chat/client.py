"""HTTP client for the chat platform's REST API.

Posts and edits channel messages on behalf of the bot. Only the two
calls termview needs are implemented.
"""

from __future__ import annotations

import logging

import httpx

from termview.domain.models import MessageRef

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://discord.com/api/v10"


class ChatClient:
    """Sends and edits chat messages through the bot REST API."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Create the HTTP client."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers={"Authorization": f"Bot {self._token}"},
            transport=self._transport,
        )
        logger.info("Chat client ready for %s", self._base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Chat client closed")

    async def send_message(
        self, channel_id: str, content: str, reply_to: str | None = None
    ) -> MessageRef:
        """Post a message, optionally as a reply, and return where it landed."""
        payload: dict = {"content": content}
        if reply_to is not None:
            payload["message_reference"] = {"message_id": reply_to, "channel_id": channel_id}
        resp = await self._request("POST", f"/channels/{channel_id}/messages", payload)
        try:
            message_id = str(resp.json()["id"])
        except (KeyError, ValueError) as e:
            raise ChatClientError(f"Unexpected response when posting to {channel_id}: {e}") from e
        logger.debug("Posted message %s in channel %s", message_id, channel_id)
        return MessageRef(channel_id=channel_id, message_id=message_id)

    async def edit_message(self, target: MessageRef, content: str) -> None:
        """Replace the content of an existing message."""
        await self._request(
            "PATCH",
            f"/channels/{target.channel_id}/messages/{target.message_id}",
            {"content": content},
        )
        logger.debug("Edited message %s", target.message_id)

    async def _request(self, method: str, path: str, payload: dict) -> httpx.Response:
        if self._client is None:
            raise ChatClientError("Chat client is not connected")
        try:
            resp = await self._client.request(method, path, json=payload)
            resp.raise_for_status()
            return resp
        except httpx.HTTPStatusError as e:
            raise ChatClientError(
                f"{method} {path} failed: {e}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise ChatClientError(f"{method} {path} failed: {e}") from e

    async def __aenter__(self) -> ChatClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


class ChatClientError(Exception):
    """Raised when a chat API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
