"""Domain models for termview.

This package contains the core data structures and enumerations used
throughout the system. All models use Pydantic v2 for validation.
"""

from termview.domain.models import (
    ChatCommand,
    ClosedEvent,
    InboundMessage,
    MessageRef,
    NewTerminal,
    Packet,
    ReadyEvent,
    RemoveTerminal,
    RunCode,
    RunCommand,
    SessionCommand,
    SessionEvent,
    SessionState,
    TerminateCommand,
    UpdateEvent,
)

__all__ = [
    "ChatCommand",
    "ClosedEvent",
    "InboundMessage",
    "MessageRef",
    "NewTerminal",
    "Packet",
    "ReadyEvent",
    "RemoveTerminal",
    "RunCode",
    "RunCommand",
    "SessionCommand",
    "SessionEvent",
    "SessionState",
    "TerminateCommand",
    "UpdateEvent",
]
