"""File renderer.

Writes the latest frame of each message to ``<dir>/<channel>-<message>.txt``,
replacing the previous frame, so a terminal can be followed with
``watch cat`` when no chat transport is available.
"""

from __future__ import annotations

import logging
from pathlib import Path

from termview.domain.models import ClosedEvent, MessageRef, ReadyEvent
from termview.render.base import Renderer, RenderError

logger = logging.getLogger(__name__)


class FileRenderer(Renderer):
    """Mirrors each terminal message into a text file."""

    def __init__(self, output_dir: Path | str) -> None:
        self._output_dir = Path(output_dir)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def path_for(self, target: MessageRef) -> Path:
        return self._output_dir / f"{target.channel_id}-{target.message_id}.txt"

    async def open(self) -> None:
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RenderError(f"Cannot create {self._output_dir}: {e}", renderer="file") from e

    async def edit(self, target: MessageRef, text: str) -> None:
        path = self.path_for(target)
        tmp_path = path.with_suffix(".tmp")
        try:
            tmp_path.write_text(text + "\n", encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise RenderError(f"Cannot write frame to {path}: {e}", renderer="file") from e
        logger.debug("Wrote frame to %s", path)

    async def notify(
        self, terminal_id: str, target: MessageRef, event: ReadyEvent | ClosedEvent
    ) -> None:
        if isinstance(event, ClosedEvent):
            logger.info("Terminal %s closed, final frame in %s", terminal_id, self.path_for(target))
