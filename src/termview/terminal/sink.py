"""Single consumer of the shared session event queue.

Sessions push packets onto a bounded queue; the sink drains it, turns
window snapshots into chat-sized frames and hands them to a renderer.
The bounded queue is what slows a chatty session down when the
transport cannot keep up.
"""

from __future__ import annotations

import asyncio
import logging

from termview.domain.models import ClosedEvent, Packet, ReadyEvent, UpdateEvent
from termview.render.base import Renderer, RenderError

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_LIMIT = 2000
DEFAULT_QUEUE_SIZE = 10

FENCE = "```"


def render_frame(contents: str) -> str:
    """Wrap window contents in a fenced code block."""
    return f"{FENCE}\n{contents}\n{FENCE}"


def fit_frame(snapshot: str, limit: int = DEFAULT_MESSAGE_LIMIT) -> str:
    """Render a snapshot, dropping its oldest lines until it fits ``limit``.

    Only the rendered text is trimmed, never the window itself. If the
    newest line alone is too long, its tail is kept.
    """
    frame = render_frame(snapshot)
    if len(frame) <= limit:
        return frame

    budget = limit - len(render_frame(""))
    if budget <= 0:
        raise ValueError(f"message limit {limit} cannot hold an empty frame")

    kept: list[str] = []
    used = 0
    for line in reversed(snapshot.split("\n")):
        cost = len(line) + (1 if kept else 0)
        if used + cost > budget:
            if not kept:
                kept.append(line[len(line) - budget:])
            break
        kept.append(line)
        used += cost
    return render_frame("\n".join(reversed(kept)))


def create_event_queue(maxsize: int = DEFAULT_QUEUE_SIZE) -> asyncio.Queue[Packet]:
    return asyncio.Queue(maxsize=maxsize)


class EventSink:
    """Drains session packets into a renderer."""

    def __init__(
        self,
        events: asyncio.Queue[Packet],
        renderer: Renderer,
        message_limit: int = DEFAULT_MESSAGE_LIMIT,
    ) -> None:
        self._events = events
        self._renderer = renderer
        self._message_limit = message_limit
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def run(self) -> None:
        """Consume packets until cancelled."""
        self._running = True
        logger.info("Event sink started")
        try:
            while True:
                packet = await self._events.get()
                try:
                    await self.handle(packet)
                finally:
                    self._events.task_done()
        finally:
            self._running = False
            logger.info("Event sink stopped")

    async def drain(self) -> None:
        """Handle every packet currently queued, without waiting for more."""
        while not self._events.empty():
            packet = self._events.get_nowait()
            try:
                await self.handle(packet)
            finally:
                self._events.task_done()

    async def handle(self, packet: Packet) -> None:
        event = packet.event
        if isinstance(event, UpdateEvent):
            text = fit_frame(event.snapshot, self._message_limit)
            try:
                await self._renderer.edit(packet.target, text)
            except RenderError as e:
                logger.error("Frame update for terminal %s failed: %s", packet.terminal_id, e)
            return

        if isinstance(event, ReadyEvent):
            logger.info("Terminal %s finished its command", packet.terminal_id)
        elif isinstance(event, ClosedEvent):
            logger.info("Terminal %s closed, no further updates", packet.terminal_id)
        try:
            await self._renderer.notify(packet.terminal_id, packet.target, event)
        except RenderError as e:
            logger.error("Notification for terminal %s failed: %s", packet.terminal_id, e)
