"""Abstract base classes for shell command execution.

Terminal sessions only need a line-oriented view of a running command:
read the next line of merged output, kill it, and observe its exit
status. Backends implement that contract so sessions can run against a
local shell or a scripted fake in tests without any other change.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class ShellProcess(ABC):
    """Handle to one running command.

    Example usage::

        process = await executor.spawn("ls -la")
        async for line in process:
            print(line)
        status = await process.wait()
    """

    @property
    @abstractmethod
    def pid(self) -> int | None:
        """OS process ID, if the backend has one."""
        ...

    @property
    @abstractmethod
    def returncode(self) -> int | None:
        """Exit status once the process has exited, else None."""
        ...

    @abstractmethod
    async def readline(self) -> str | None:
        """Read the next line of combined stdout/stderr.

        Returns:
            The line without its trailing newline, or None once the
            output stream has reached end-of-input. Bytes that are not
            valid UTF-8 are replaced rather than raising.
        """
        ...

    @abstractmethod
    def kill(self) -> None:
        """Forcefully stop the process.

        Must be a harmless no-op when the process already exited.
        """
        ...

    @abstractmethod
    async def wait(self) -> int:
        """Wait for the process to exit and return its exit status."""
        ...

    async def __aiter__(self) -> AsyncIterator[str]:
        while True:
            line = await self.readline()
            if line is None:
                return
            yield line


class ShellExecutor(ABC):
    """Starts shell command lines."""

    @abstractmethod
    async def spawn(self, command: str) -> ShellProcess:
        """Start a command line and return its handle.

        Raises:
            SpawnError: If the command could not be started.
        """
        ...


class SpawnError(Exception):
    """Raised when a command cannot be started."""

    def __init__(self, message: str, command: str = "") -> None:
        super().__init__(message)
        self.command = command
