"""termview -- chat threads as scrollback terminals.

Authorized chat users submit shell commands to named terminals; each
terminal runs its commands one at a time and streams a bounded,
rate-limited window of output back into a single chat message.
"""

__version__ = "0.1.0"
