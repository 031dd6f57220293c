"""Per-terminal execution state machine.

A TerminalSession runs the commands of one terminal strictly one at a
time, in arrival order, streaming each command's output into a bounded
Window and pushing throttled snapshots onto the shared event queue.

Every loop iteration races two sources: the next control command and,
while a command runs, its next output line. A long-running command
therefore never stops the session from accepting further commands or a
termination request.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Callable

from termview.domain.models import (
    ClosedEvent,
    MessageRef,
    Packet,
    ReadyEvent,
    RunCommand,
    SessionState,
    TerminateCommand,
    UpdateEvent,
)
from termview.execution.base import ShellExecutor, ShellProcess, SpawnError
from termview.terminal.channel import ChannelClosed, Command, ControlChannel
from termview.terminal.timer import DEFAULT_COOLDOWN, CooldownTimer
from termview.terminal.window import Window

logger = logging.getLogger(__name__)

PROMPT_MARKER = " >>> "
CLOSED_MARKER = " <session closed> "
SPAWN_FAILED_MARKER = " <failed to start command> "

# How long a command may linger after closing its output before it is killed
EXIT_TIMEOUT = 5.0


class TerminalSession:
    """Drives the commands of a single terminal.

    The session exclusively owns its window, timer, pending queue and
    running process. It is reachable from outside only through its
    control channel; see SessionHandle.
    """

    def __init__(
        self,
        terminal_id: str,
        target: MessageRef,
        height: int,
        executor: ShellExecutor,
        events: asyncio.Queue[Packet],
        channel: ControlChannel,
        cooldown: float = DEFAULT_COOLDOWN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._terminal_id = terminal_id
        self._target = target
        self._window = Window(height)
        self._timer = CooldownTimer()
        self._executor = executor
        self._events = events
        self._channel = channel
        self._cooldown = cooldown
        self._clock = clock

        self._pending: deque[str] = deque()
        self._process: ShellProcess | None = None
        self._draining = False
        self._closed = False
        self._command_task: asyncio.Future[Command] | None = None
        self._line_task: asyncio.Future[str | None] | None = None

    @property
    def terminal_id(self) -> str:
        return self._terminal_id

    @property
    def target(self) -> MessageRef:
        return self._target

    @property
    def window(self) -> Window:
        return self._window

    @property
    def pending(self) -> list[str]:
        return list(self._pending)

    @property
    def state(self) -> SessionState:
        if self._closed:
            return SessionState.CLOSED
        if self._draining:
            return SessionState.DRAINING
        if self._process is not None:
            return SessionState.RUNNING
        return SessionState.IDLE

    async def run(self) -> None:
        """Process commands until the session is closed.

        Any process still alive when this returns, or when the task is
        cancelled, has been killed.
        """
        logger.info("Terminal %s started (height=%d)", self._terminal_id, self._window.height)
        try:
            await self._event_loop()
            await self._close()
        finally:
            self._release()
        logger.info("Terminal %s closed", self._terminal_id)

    async def _event_loop(self) -> None:
        while True:
            if self._process is None:
                if self._pending:
                    await self._start(self._pending.popleft())
                    continue
                if self._draining:
                    return

            if self._command_task is None:
                self._command_task = asyncio.ensure_future(self._channel.receive())
            waiters: set[asyncio.Future] = {self._command_task}
            if self._process is not None:
                if self._line_task is None:
                    self._line_task = asyncio.ensure_future(self._process.readline())
                waiters.add(self._line_task)

            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)

            if self._line_task is not None and self._line_task.done():
                line_task, self._line_task = self._line_task, None
                await self._on_output(line_task)

            if self._command_task.done():
                command_task, self._command_task = self._command_task, None
                try:
                    command = command_task.result()
                except ChannelClosed:
                    logger.info("Terminal %s: control channel closed", self._terminal_id)
                    return
                self._on_command(command)

    def _on_command(self, command: Command) -> None:
        if isinstance(command, RunCommand):
            if self._draining:
                logger.warning(
                    "Terminal %s is closing, refusing command: %s",
                    self._terminal_id, command.command[:80],
                )
                return
            self._pending.append(command.command)
            logger.debug(
                "Terminal %s queued command (%d pending)", self._terminal_id, len(self._pending)
            )
        elif isinstance(command, TerminateCommand):
            logger.info("Terminal %s draining before close", self._terminal_id)
            self._draining = True

    async def _start(self, command: str) -> None:
        """Spawn the next queued command."""
        logger.info("Terminal %s running: %s", self._terminal_id, command[:80])
        try:
            self._process = await self._executor.spawn(command)
        except SpawnError as e:
            logger.warning("Terminal %s: %s", self._terminal_id, e)
            self._window.append(SPAWN_FAILED_MARKER)
            self._window.append(PROMPT_MARKER)
            await self._emit(UpdateEvent(snapshot=self._window.snapshot()))
            await self._emit(ReadyEvent())

    async def _on_output(self, line_task: asyncio.Future[str | None]) -> None:
        try:
            line = line_task.result()
        except Exception:
            logger.exception("Terminal %s: reading output failed", self._terminal_id)
            if self._process is not None:
                self._process.kill()
            line = None

        if line is None:
            await self._finish_command()
            return

        self._window.extend(line)
        if self._timer.should_fire(self._clock(), self._cooldown):
            await self._emit(UpdateEvent(snapshot=self._window.snapshot()))

    async def _finish_command(self) -> None:
        """Reap the process and publish the final frame of the command."""
        process = self._process
        if process is None:
            return
        try:
            status = await asyncio.wait_for(process.wait(), timeout=EXIT_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning(
                "Terminal %s: pid %s closed its output but kept running, killing it",
                self._terminal_id, process.pid,
            )
            process.kill()
            status = await process.wait()
        self._process = None
        logger.info("Terminal %s: pid %s exited with status %s", self._terminal_id, process.pid, status)

        self._window.append(PROMPT_MARKER)
        await self._emit(UpdateEvent(snapshot=self._window.snapshot()))
        await self._emit(ReadyEvent())

    async def _close(self) -> None:
        if self._process is not None:
            process, self._process = self._process, None
            logger.warning("Terminal %s: killing pid %s on shutdown", self._terminal_id, process.pid)
            process.kill()
            await process.wait()

        self._window.append(CLOSED_MARKER)
        await self._emit(UpdateEvent(snapshot=self._window.snapshot()))
        await self._emit(ClosedEvent())

    def _release(self) -> None:
        for task in (self._command_task, self._line_task):
            if task is not None and not task.done():
                task.cancel()
        self._command_task = None
        self._line_task = None
        if self._process is not None:
            logger.warning(
                "Terminal %s: killing pid %s on abrupt shutdown", self._terminal_id, self._process.pid
            )
            self._process.kill()
            self._process = None
        self._closed = True

    async def _emit(self, event: UpdateEvent | ReadyEvent | ClosedEvent) -> None:
        # Blocks while the event queue is full
        await self._events.put(Packet(terminal_id=self._terminal_id, target=self._target, event=event))


class SessionHandle:
    """Send-only endpoint of a running session, held by the registry."""

    def __init__(self, terminal_id: str, channel: ControlChannel, task: asyncio.Task[None]) -> None:
        self._terminal_id = terminal_id
        self._channel = channel
        self._task = task

    @property
    def terminal_id(self) -> str:
        return self._terminal_id

    @property
    def finished(self) -> bool:
        """Whether the session task has stopped."""
        return self._task.done()

    async def run(self, command: str) -> None:
        """Queue a command line on the session.

        Raises:
            ChannelClosed: If the handle was already closed.
        """
        await self._channel.send(RunCommand(command=command))

    async def terminate(self) -> None:
        """Ask the session to drain and close."""
        try:
            await self._channel.send(TerminateCommand())
        except ChannelClosed:
            logger.debug("Terminal %s already closed its channel", self._terminal_id)

    def close(self) -> None:
        """Drop the sending side; the session kills any running process."""
        self._channel.close()

    async def wait_closed(self, timeout: float | None = None) -> bool:
        """Wait for the session to stop. Returns False on timeout."""
        done, _ = await asyncio.wait({self._task}, timeout=timeout)
        return bool(done)
