"""Core domain models for the termview system.

These models represent the data flowing between the chat front end and
the terminal sessions: parsed chat commands, control commands sent to a
session, events emitted by a session, and the packets that carry those
events to the renderer.
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SessionState(str, enum.Enum):
    """Lifecycle state of a terminal session."""

    IDLE = "idle"  # No process running, queue may be non-empty
    RUNNING = "running"  # One process active
    DRAINING = "draining"  # Terminate received, finishing queued work
    CLOSED = "closed"  # Terminal state, no further transitions


# ---------------------------------------------------------------------------
# Chat addressing
# ---------------------------------------------------------------------------


class MessageRef(BaseModel):
    """Points at the chat message a terminal renders into."""

    model_config = ConfigDict(frozen=True)

    channel_id: str = Field(description="Chat channel holding the message")
    message_id: str = Field(description="Identifier of the message to edit")


class InboundMessage(BaseModel):
    """A chat message delivered to the dispatcher by the transport."""

    model_config = ConfigDict(frozen=True)

    channel_id: str = Field(description="Channel the message was posted in")
    message_id: str = Field(description="Identifier of the posted message")
    content: str = Field(description="Raw message text")
    author: str = Field(default="", description="Display name of the author, for logging")
    roles: list[str] = Field(default_factory=list, description="Role IDs held by the author")


# ---------------------------------------------------------------------------
# Session control commands (discriminated union)
# ---------------------------------------------------------------------------


class RunCommand(BaseModel):
    """Queue a shell command line for execution."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["run"] = "run"
    command: str = Field(description="Command line handed to the shell")


class TerminateCommand(BaseModel):
    """Finish current work, drain the queue and close the session."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["terminate"] = "terminate"


SessionCommand = Annotated[
    Union[RunCommand, TerminateCommand],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Session events (discriminated union)
# ---------------------------------------------------------------------------


class UpdateEvent(BaseModel):
    """A new snapshot of the terminal window should be shown."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["update"] = "update"
    snapshot: str = Field(description="Window contents, lines joined by newlines")


class ReadyEvent(BaseModel):
    """A queued command finished."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["ready"] = "ready"


class ClosedEvent(BaseModel):
    """The session shut down; no further updates will follow."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["closed"] = "closed"


SessionEvent = Annotated[
    Union[UpdateEvent, ReadyEvent, ClosedEvent],
    Field(discriminator="kind"),
]


class Packet(BaseModel):
    """An event tagged with the terminal and message it belongs to."""

    model_config = ConfigDict(frozen=True)

    terminal_id: str
    target: MessageRef
    event: SessionEvent


# ---------------------------------------------------------------------------
# Parsed chat commands (discriminated union)
# ---------------------------------------------------------------------------


class NewTerminal(BaseModel):
    """`new [height=N] [private]` -- create or replace a terminal."""

    model_config = ConfigDict(frozen=True)

    action: Literal["new"] = "new"
    height: int = Field(gt=0, description="Number of output lines kept on screen")
    private: bool = Field(default=False)


class RemoveTerminal(BaseModel):
    """`remove` -- close a terminal and forget it."""

    model_config = ConfigDict(frozen=True)

    action: Literal["remove"] = "remove"


class RunCode(BaseModel):
    """`run <code>` or a backtick literal -- execute a command line."""

    model_config = ConfigDict(frozen=True)

    action: Literal["run"] = "run"
    code: str


ChatCommand = Annotated[
    Union[NewTerminal, RemoveTerminal, RunCode],
    Field(discriminator="action"),
]
