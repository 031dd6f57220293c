"""Shell execution backends for termview.

Public API:
    ShellExecutor -- Abstract command launcher
    ShellProcess -- Abstract handle to a running command
    LocalShell -- Runs commands through a local shell binary
"""

from termview.execution.base import ShellExecutor, ShellProcess, SpawnError
from termview.execution.local import LocalProcess, LocalShell

__all__ = ["LocalProcess", "LocalShell", "ShellExecutor", "ShellProcess", "SpawnError"]
