"""Shared test fixtures for the termview test suite.

Provides common fixtures used across unit tests: a chat message
reference and a scripted shell executor.
"""

from __future__ import annotations

import pytest

from fakes import FakeShell
from termview.domain.models import MessageRef


@pytest.fixture
def target() -> MessageRef:
    """A chat message reference for a terminal."""
    return MessageRef(channel_id="100", message_id="200")


@pytest.fixture
def fake_shell() -> FakeShell:
    """A scripted shell: ``echo X`` prints X, nothing else prints anything."""
    return FakeShell()
