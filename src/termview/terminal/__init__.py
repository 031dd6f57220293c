"""Terminal sessions and their multiplexer.

Public API:
    Window -- Bounded scrollback buffer
    CooldownTimer -- Minimum-interval update gate
    TerminalSession -- Per-terminal execution state machine
    SessionRegistry -- Terminal ID -> session multiplexer
    EventSink -- Drains session events into a renderer
"""

from termview.terminal.channel import ChannelClosed, ControlChannel
from termview.terminal.registry import SessionRegistry, TerminalNotFoundError
from termview.terminal.session import SessionHandle, TerminalSession
from termview.terminal.sink import EventSink, create_event_queue, fit_frame, render_frame
from termview.terminal.timer import CooldownTimer
from termview.terminal.window import Window

__all__ = [
    "ChannelClosed",
    "ControlChannel",
    "CooldownTimer",
    "EventSink",
    "SessionHandle",
    "SessionRegistry",
    "TerminalNotFoundError",
    "TerminalSession",
    "Window",
    "create_event_queue",
    "fit_frame",
    "render_frame",
]
