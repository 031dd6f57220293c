"""Registry that multiplexes terminal sessions under unique IDs.

The ID -> handle map is the only state shared between sessions. Every
access to it is a single lookup, insert or removal under a lock; waiting
on sessions (the replacement grace period, shutdown) always happens with
the lock released.
"""

from __future__ import annotations

import asyncio
import logging

from termview.domain.models import MessageRef, Packet
from termview.execution.base import ShellExecutor
from termview.terminal.channel import DEFAULT_CAPACITY, ControlChannel
from termview.terminal.session import SessionHandle, TerminalSession
from termview.terminal.timer import DEFAULT_COOLDOWN

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = 2.0


class TerminalNotFoundError(Exception):
    """Raised when an operation names a terminal that does not exist."""

    def __init__(self, terminal_id: str) -> None:
        super().__init__(f"terminal `{terminal_id}` not found")
        self.terminal_id = terminal_id


class SessionRegistry:
    """Owns the terminal ID -> session handle map.

    Example usage::

        registry = SessionRegistry(LocalShell(), events)
        await registry.ensure("a", height=20, target=message_ref)
        await registry.submit("a", "ls -la")
        await registry.remove("a")
    """

    def __init__(
        self,
        executor: ShellExecutor,
        events: asyncio.Queue[Packet],
        cooldown: float = DEFAULT_COOLDOWN,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        command_buffer: int = DEFAULT_CAPACITY,
    ) -> None:
        self._executor = executor
        self._events = events
        self._cooldown = cooldown
        self._grace_period = grace_period
        self._command_buffer = command_buffer
        self._sessions: dict[str, SessionHandle] = {}
        self._lock = asyncio.Lock()

    @property
    def events(self) -> asyncio.Queue[Packet]:
        return self._events

    def terminal_ids(self) -> list[str]:
        return sorted(self._sessions)

    def get(self, terminal_id: str) -> SessionHandle | None:
        return self._sessions.get(terminal_id)

    async def ensure(self, terminal_id: str, height: int, target: MessageRef) -> SessionHandle:
        """Create the terminal, replacing a live one with the same ID.

        A live session is asked to terminate, then after a fixed grace
        period the new session is registered whether or not the old one
        finished. Its leftover work then runs untracked. A handle that a
        concurrent ``ensure`` registered in the meantime is closed, so at
        most one reachable session exists per ID.

        Raises:
            ValueError: If height is not positive.
        """
        async with self._lock:
            previous = self._sessions.get(terminal_id)

        if previous is not None:
            logger.info("Replacing terminal %s", terminal_id)
            await previous.terminate()
            await asyncio.sleep(self._grace_period)

        handle = self._start_session(terminal_id, height, target)

        async with self._lock:
            replaced = self._sessions.get(terminal_id)
            self._sessions[terminal_id] = handle

        if replaced is not None and replaced is not previous:
            # A concurrent ensure registered its own session while this one waited
            logger.info("Terminal %s was recreated concurrently, closing the displaced session", terminal_id)
            await replaced.terminate()
            replaced.close()
        elif replaced is not None and not replaced.finished:
            logger.warning(
                "Terminal %s refused to die in time, its process may now be running untracked",
                terminal_id,
            )
        return handle

    async def remove(self, terminal_id: str) -> None:
        """Close a terminal and forget it without waiting for shutdown.

        Raises:
            TerminalNotFoundError: If no such terminal exists.
        """
        async with self._lock:
            handle = self._sessions.pop(terminal_id, None)
        if handle is None:
            raise TerminalNotFoundError(terminal_id)

        await handle.terminate()
        handle.close()
        logger.info("Removed terminal %s", terminal_id)

    async def submit(self, terminal_id: str, command: str) -> None:
        """Queue a command line on a terminal.

        Raises:
            TerminalNotFoundError: If no such terminal exists.
        """
        async with self._lock:
            handle = self._sessions.get(terminal_id)
        if handle is None:
            raise TerminalNotFoundError(terminal_id)

        logger.info("Submitting to terminal %s: %s", terminal_id, command[:80])
        await handle.run(command)

    async def shutdown(self, timeout: float | None = None) -> None:
        """Terminate every session and wait for them to stop."""
        async with self._lock:
            handles = list(self._sessions.values())
            self._sessions.clear()

        for handle in handles:
            await handle.terminate()
            handle.close()
        for handle in handles:
            if not await handle.wait_closed(timeout):
                logger.warning("Terminal %s did not stop within %s s", handle.terminal_id, timeout)
        logger.info("Registry shut down (%d terminals)", len(handles))

    def _start_session(self, terminal_id: str, height: int, target: MessageRef) -> SessionHandle:
        channel = ControlChannel(self._command_buffer)
        session = TerminalSession(
            terminal_id=terminal_id,
            target=target,
            height=height,
            executor=self._executor,
            events=self._events,
            channel=channel,
            cooldown=self._cooldown,
        )
        task = asyncio.create_task(session.run(), name=f"terminal-{terminal_id}")
        task.add_done_callback(_log_session_failure)
        return SessionHandle(terminal_id, channel, task)

    def __contains__(self, terminal_id: object) -> bool:
        return terminal_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


def _log_session_failure(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error("Session task %s crashed", task.get_name(), exc_info=error)
