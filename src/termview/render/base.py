"""Abstract base class for terminal frame output.

All render targets must conform to this interface, enabling the event
sink to swap between editing a chat message, writing frames to disk,
or capturing them in memory without changing any other code.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from termview.domain.models import ClosedEvent, MessageRef, ReadyEvent

logger = logging.getLogger(__name__)


class Renderer(ABC):
    """Abstract interface for showing terminal frames.

    Example usage::

        async with ChatRenderer(client) as renderer:
            await renderer.edit(target, "```\\nhello\\n```")
    """

    async def open(self) -> None:
        """Acquire resources. The default does nothing."""

    async def close(self) -> None:
        """Release resources. Must be safe to call multiple times."""

    @abstractmethod
    async def edit(self, target: MessageRef, text: str) -> None:
        """Replace the contents shown for ``target`` with ``text``.

        The text is already formatted and fits the transport limit.

        Raises:
            RenderError: If the frame could not be delivered.
        """
        ...

    async def notify(
        self, terminal_id: str, target: MessageRef, event: ReadyEvent | ClosedEvent
    ) -> None:
        """Observe a lifecycle event. The default only logs it."""
        logger.debug("Terminal %s: %s", terminal_id, event.kind)

    async def __aenter__(self) -> Renderer:
        await self.open()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()


class RenderError(Exception):
    """Raised when a frame cannot be rendered."""

    def __init__(self, message: str, renderer: str = "") -> None:
        super().__init__(message)
        self.renderer = renderer
