"""Frame output module for termview.

Public API:
    Renderer -- Abstract base class
    RenderError -- Raised when a frame cannot be shown
    ChatRenderer -- Edits chat messages
    FileRenderer -- Mirrors frames into text files
    MemoryRenderer -- Records frames in memory
"""

from termview.render.base import Renderer, RenderError
from termview.render.file import FileRenderer
from termview.render.memory import MemoryRenderer

__all__ = ["ChatRenderer", "FileRenderer", "MemoryRenderer", "RenderError", "Renderer"]


def __getattr__(name: str) -> type:
    """Lazy import for the renderer that requires the HTTP stack."""
    if name == "ChatRenderer":
        from termview.render.chat import ChatRenderer
        return ChatRenderer
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
