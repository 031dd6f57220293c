"""Bounded, closable command channel between the registry and a session.

The registry only ever holds the sending side; the session is the single
receiver. Closing the channel tells the session that nobody will send to
it again, which it treats as an abrupt shutdown request.
"""

from __future__ import annotations

import asyncio
import logging

from termview.domain.models import RunCommand, TerminateCommand

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10

Command = RunCommand | TerminateCommand


class ChannelClosed(Exception):
    """Raised when sending to, or receiving from, a closed channel."""


class ControlChannel:
    """FIFO of session commands with an explicit close."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._queue: asyncio.Queue[Command] = asyncio.Queue(maxsize=capacity)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def send(self, command: Command) -> None:
        """Queue a command, waiting while the channel is full.

        Raises:
            ChannelClosed: If the channel was closed.
        """
        if self.closed:
            raise ChannelClosed("control channel is closed")
        await self._queue.put(command)

    def close(self) -> None:
        """Mark the channel closed. Already queued commands stay readable."""
        self._closed.set()

    async def receive(self) -> Command:
        """Wait for the next command.

        Commands queued before the channel was closed are still delivered.

        Raises:
            ChannelClosed: Once the channel is closed and drained.
        """
        if not self._queue.empty():
            return self._queue.get_nowait()
        if self.closed:
            raise ChannelClosed("control channel is closed")

        getter = asyncio.ensure_future(self._queue.get())
        closer = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({getter, closer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closer.cancel()
            if not getter.done():
                getter.cancel()
        if getter.done() and not getter.cancelled():
            return getter.result()
        raise ChannelClosed("control channel is closed")

    def __len__(self) -> int:
        return self._queue.qsize()
