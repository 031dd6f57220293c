"""Chat transport for termview.

Public API:
    ChatClient -- REST client posting and editing messages
    ChatClientError -- Raised when a chat API call fails
    CommandDispatcher -- Applies inbound chat commands to the registry
"""

from termview.chat.client import ChatClient, ChatClientError

__all__ = ["ChatClient", "ChatClientError", "CommandDispatcher"]


def __getattr__(name: str) -> type:
    """Lazy import so the client can be used without the terminal stack."""
    if name == "CommandDispatcher":
        from termview.chat.dispatcher import CommandDispatcher
        return CommandDispatcher
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
