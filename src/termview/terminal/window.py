"""Bounded scrollback buffer for a terminal session."""

from __future__ import annotations

from collections import deque


class Window:
    """Lines of output that adhere to a fixed height limit.

    Appending past the height evicts the oldest line, so the window
    always holds the most recent ``height`` lines in arrival order.
    """

    def __init__(self, height: int) -> None:
        if height <= 0:
            raise ValueError(f"window height must be positive, got {height}")
        self._height = height
        self._lines: deque[str] = deque(maxlen=height)

    @property
    def height(self) -> int:
        return self._height

    @property
    def lines(self) -> list[str]:
        """Copy of the current lines, oldest first."""
        return list(self._lines)

    def append(self, line: str) -> None:
        """Add a single line, evicting the oldest one when full.

        Raises:
            ValueError: If the line contains a newline.
        """
        if "\n" in line:
            raise ValueError("newline characters aren't allowed in a window line")
        self._lines.append(line)

    def extend(self, text: str) -> None:
        """Split text on newlines and append each piece."""
        for line in text.split("\n"):
            self.append(line)

    def snapshot(self) -> str:
        """Render the window as a single block of text."""
        return "\n".join(self._lines)

    def __len__(self) -> int:
        return len(self._lines)
