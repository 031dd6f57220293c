"""In-memory renderer that records everything it is given."""

from __future__ import annotations

from termview.domain.models import ClosedEvent, MessageRef, ReadyEvent
from termview.render.base import Renderer


class MemoryRenderer(Renderer):
    """Keeps every frame and lifecycle event, in order."""

    def __init__(self) -> None:
        self.frames: list[tuple[MessageRef, str]] = []
        self.events: list[tuple[str, str]] = []

    async def edit(self, target: MessageRef, text: str) -> None:
        self.frames.append((target, text))

    async def notify(
        self, terminal_id: str, target: MessageRef, event: ReadyEvent | ClosedEvent
    ) -> None:
        self.events.append((terminal_id, event.kind))

    def frames_for(self, target: MessageRef) -> list[str]:
        return [text for ref, text in self.frames if ref == target]

    def latest(self, target: MessageRef) -> str | None:
        frames = self.frames_for(target)
        return frames[-1] if frames else None
