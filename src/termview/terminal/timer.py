"""Minimum-interval gate for terminal output updates.

Chat transports rate limit message edits, so a session only pushes a
new frame for ordinary output lines when the cooldown has elapsed.
"""

from __future__ import annotations

import math
import time

DEFAULT_COOLDOWN = 4.0


class CooldownTimer:
    """Remembers when it last fired and refuses to fire again too soon."""

    def __init__(self) -> None:
        # Primed in the past so the very first check always fires
        self._last_fired = -math.inf

    @property
    def last_fired(self) -> float:
        return self._last_fired

    def should_fire(self, now: float | None = None, cooldown: float = DEFAULT_COOLDOWN) -> bool:
        """Return True and reset if more than ``cooldown`` seconds have passed.

        Args:
            now: Current monotonic time. Defaults to ``time.monotonic()``.
            cooldown: Minimum number of seconds between two firings.
        """
        if now is None:
            now = time.monotonic()
        if now - self._last_fired > cooldown:
            self._last_fired = now
            return True
        return False
