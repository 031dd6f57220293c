"""Turns inbound chat messages into registry operations.

A message addresses a terminal when its second character is the
configured separator: ``a: new height=10`` talks to terminal ``a``.
Only authors holding one of the allowed roles are obeyed.
"""

from __future__ import annotations

import logging

from termview.chat.client import ChatClient, ChatClientError
from termview.domain.models import InboundMessage, NewTerminal, RemoveTerminal, RunCode
from termview.parser import DEFAULT_HEIGHT, MAX_HEIGHT, ParseError, parse
from termview.terminal.registry import SessionRegistry, TerminalNotFoundError
from termview.terminal.sink import render_frame

logger = logging.getLogger(__name__)


class CannotRespondError(Exception):
    """Raised when the bot cannot post the terminal's message."""

    def __init__(self) -> None:
        super().__init__("cannot respond to message. Missing permissions?")


class CommandDispatcher:
    """Applies chat commands from authorized users to the registry."""

    def __init__(
        self,
        registry: SessionRegistry,
        client: ChatClient,
        allowed_roles: list[str],
        separator: str = ":",
        default_height: int = DEFAULT_HEIGHT,
        max_height: int = MAX_HEIGHT,
    ) -> None:
        self._registry = registry
        self._client = client
        self._allowed_roles = set(allowed_roles)
        self._separator = separator
        self._default_height = default_height
        self._max_height = max_height

    def is_command(self, message: InboundMessage) -> bool:
        return len(message.content) >= 2 and message.content[1] == self._separator

    def is_authorized(self, message: InboundMessage) -> bool:
        return any(role in self._allowed_roles for role in message.roles)

    async def handle(self, message: InboundMessage) -> bool:
        """Apply a chat message if it is an authorized terminal command.

        Returns:
            True if the message was treated as a command.
        """
        if not self.is_command(message):
            return False
        if not self.is_authorized(message):
            logger.info("Ignoring command from unauthorized author %r", message.author)
            return False

        terminal_id = message.content[0]
        body = message.content[2:].strip()
        logger.info("Terminal %s <- %r", terminal_id, body[:80])

        try:
            await self.apply(message, terminal_id, body)
        except (ParseError, TerminalNotFoundError, CannotRespondError) as e:
            await self._respond_with_error(message.channel_id, e)
        return True

    async def apply(self, message: InboundMessage, terminal_id: str, body: str) -> None:
        """Parse a command body and run it against the registry.

        Raises:
            ParseError: If the body is malformed.
            TerminalNotFoundError: If the terminal does not exist.
            CannotRespondError: If the terminal message cannot be posted.
        """
        command = parse(body, default_height=self._default_height, max_height=self._max_height)

        if isinstance(command, NewTerminal):
            try:
                target = await self._client.send_message(
                    message.channel_id, render_frame(""), reply_to=message.message_id
                )
            except ChatClientError as e:
                logger.error("Cannot post terminal %s: %s", terminal_id, e)
                raise CannotRespondError() from e
            await self._registry.ensure(terminal_id, command.height, target)
        elif isinstance(command, RemoveTerminal):
            await self._registry.remove(terminal_id)
        elif isinstance(command, RunCode):
            await self._registry.submit(terminal_id, command.code)

    async def _respond_with_error(self, channel_id: str, error: Exception) -> None:
        logger.info("User error: %s", error)
        try:
            await self._client.send_message(channel_id, f"error: {error}")
        except ChatClientError as e:
            logger.error("Failed to present error in channel %s: %s", channel_id, e)
