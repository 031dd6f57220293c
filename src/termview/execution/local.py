"""Local shell backend.

Runs each command line with ``<shell> -c`` in its own process group,
capturing stdout and stderr through a single merged pipe.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal

from termview.execution.base import ShellExecutor, ShellProcess, SpawnError

logger = logging.getLogger(__name__)

# StreamReader buffer limit; longer lines are dropped
DEFAULT_LINE_LIMIT = 1024 * 1024


class LocalProcess(ShellProcess):
    """A command running as a child of this process."""

    def __init__(self, process: asyncio.subprocess.Process, command: str) -> None:
        self._process = process
        self._command = command
        self._eof = False

    @property
    def pid(self) -> int | None:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    @property
    def command(self) -> str:
        return self._command

    async def readline(self) -> str | None:
        """Read one line of merged output.

        A line longer than the reader limit is discarded up to its
        newline and comes back as an empty string.
        """
        if self._eof or self._process.stdout is None:
            return None
        stdout = self._process.stdout
        dropping = False
        while True:
            try:
                data = await stdout.readuntil(b"\n")
            except asyncio.IncompleteReadError as e:
                # Output ended without a trailing newline
                data = e.partial
                if not data:
                    self._eof = True
                    return "" if dropping else None
            except asyncio.LimitOverrunError as e:
                await stdout.readexactly(e.consumed)
                dropping = True
                continue
            if dropping:
                logger.warning("Dropped over-long output line from pid %s", self.pid)
                return ""
            return data.decode("utf-8", errors="replace").rstrip("\r\n")

    def kill(self) -> None:
        """Send SIGKILL to the whole process group.

        Does nothing once the leader is reaped and the output is closed,
        since no member of the group is left.
        """
        if self._process.returncode is not None and self._eof:
            return
        try:
            os.killpg(self._process.pid, signal.SIGKILL)
            logger.debug("Killed process group %d", self._process.pid)
        except ProcessLookupError:
            pass
        except PermissionError as e:
            logger.warning("Cannot kill process group %d: %s", self._process.pid, e)

    async def wait(self) -> int:
        return await self._process.wait()


class LocalShell(ShellExecutor):
    """Spawns command lines through a local shell binary."""

    def __init__(self, shell: str = "bash", line_limit: int = DEFAULT_LINE_LIMIT) -> None:
        self._shell = shell
        self._line_limit = line_limit

    @property
    def shell(self) -> str:
        return self._shell

    async def spawn(self, command: str) -> LocalProcess:
        """Start ``command`` with stderr merged into stdout."""
        try:
            process = await asyncio.create_subprocess_exec(
                self._shell, "-c", command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                start_new_session=True,
                limit=self._line_limit,
            )
        except OSError as e:
            raise SpawnError(f"Failed to start {self._shell}: {e}", command=command) from e
        logger.info("Started pid %d: %s", process.pid, command[:80])
        return LocalProcess(process, command)
