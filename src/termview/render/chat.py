"""Chat renderer: shows each frame by editing the terminal's chat message."""

from __future__ import annotations

import logging

from termview.chat.client import ChatClient, ChatClientError
from termview.domain.models import MessageRef
from termview.render.base import Renderer, RenderError

logger = logging.getLogger(__name__)


class ChatRenderer(Renderer):
    """Edits the chat message a terminal was attached to."""

    def __init__(self, client: ChatClient) -> None:
        self._client = client

    async def open(self) -> None:
        await self._client.connect()

    async def close(self) -> None:
        await self._client.disconnect()

    async def edit(self, target: MessageRef, text: str) -> None:
        try:
            await self._client.edit_message(target, text)
        except ChatClientError as e:
            raise RenderError(str(e), renderer="chat") from e
