"""Tests for the SessionRegistry multiplexer."""

from __future__ import annotations

import asyncio
import logging
import time

import pytest

from fakes import FakeShell, collect_until_closed, kinds, wait_for
from termview.domain.models import MessageRef, UpdateEvent
from termview.execution.local import LocalShell
from termview.terminal.registry import SessionRegistry, TerminalNotFoundError
from termview.terminal.session import CLOSED_MARKER, PROMPT_MARKER


@pytest.fixture
def events() -> asyncio.Queue:
    return asyncio.Queue()


def live_session_tasks(terminal_id: str) -> list[asyncio.Task]:
    return [
        task
        for task in asyncio.all_tasks()
        if task.get_name() == f"terminal-{terminal_id}" and not task.done()
    ]


class TestLookup:
    @pytest.mark.asyncio
    async def test_ensure_registers_terminal(
        self, fake_shell: FakeShell, events: asyncio.Queue, target: MessageRef
    ) -> None:
        registry = SessionRegistry(fake_shell, events)
        handle = await registry.ensure("a", 5, target)

        assert "a" in registry
        assert len(registry) == 1
        assert registry.get("a") is handle
        assert registry.terminal_ids() == ["a"]
        await registry.shutdown(timeout=1.0)

    @pytest.mark.asyncio
    async def test_submit_unknown_terminal(self, fake_shell: FakeShell, events: asyncio.Queue) -> None:
        registry = SessionRegistry(fake_shell, events)
        with pytest.raises(TerminalNotFoundError, match="terminal `z` not found"):
            await registry.submit("z", "ls")
        assert fake_shell.spawned == []

    @pytest.mark.asyncio
    async def test_remove_unknown_terminal(self, fake_shell: FakeShell, events: asyncio.Queue) -> None:
        registry = SessionRegistry(fake_shell, events)
        with pytest.raises(TerminalNotFoundError) as exc_info:
            await registry.remove("z")
        assert exc_info.value.terminal_id == "z"

    @pytest.mark.asyncio
    async def test_invalid_height_is_not_registered(
        self, fake_shell: FakeShell, events: asyncio.Queue, target: MessageRef
    ) -> None:
        registry = SessionRegistry(fake_shell, events)
        with pytest.raises(ValueError):
            await registry.ensure("a", 0, target)
        assert "a" not in registry


class TestCommands:
    @pytest.mark.asyncio
    async def test_submit_runs_on_the_named_terminal(
        self, fake_shell: FakeShell, events: asyncio.Queue, target: MessageRef
    ) -> None:
        registry = SessionRegistry(fake_shell, events, cooldown=0.0)
        other = MessageRef(channel_id="100", message_id="201")
        await registry.ensure("a", 5, target)
        await registry.ensure("b", 5, other)

        await registry.submit("b", "echo hi")
        await registry.get("b").terminate()
        packets = await collect_until_closed(events, terminal_id="b")

        assert fake_shell.spawned == ["echo hi"]
        b_packets = [p for p in packets if p.terminal_id == "b"]
        assert all(p.target == other for p in b_packets)
        assert "ready" in kinds(b_packets)
        await registry.shutdown(timeout=1.0)

    @pytest.mark.asyncio
    async def test_remove_forgets_immediately_and_kills(
        self, events: asyncio.Queue, target: MessageRef
    ) -> None:
        shell = FakeShell(held={"sleep 100"})
        registry = SessionRegistry(shell, events)
        handle = await registry.ensure("a", 5, target)
        await registry.submit("a", "sleep 100")
        await wait_for(lambda: "sleep 100" in shell.processes)

        await registry.remove("a")
        assert "a" not in registry
        await collect_until_closed(events)
        assert await handle.wait_closed(timeout=1.0)
        assert shell.processes["sleep 100"].killed

        with pytest.raises(TerminalNotFoundError):
            await registry.submit("a", "ls")


class TestReplacement:
    @pytest.mark.asyncio
    async def test_replacing_idle_terminal(
        self,
        fake_shell: FakeShell,
        events: asyncio.Queue,
        target: MessageRef,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        registry = SessionRegistry(fake_shell, events, grace_period=0.2)
        old = await registry.ensure("a", 5, target)

        with caplog.at_level(logging.WARNING, logger="termview.terminal.registry"):
            new = await registry.ensure("a", 7, target)

        assert old.finished
        assert new is not old
        assert registry.get("a") is new
        assert len(registry) == 1
        assert "untracked" not in caplog.text
        await registry.shutdown(timeout=1.0)

    @pytest.mark.asyncio
    async def test_replacing_busy_terminal_warns(
        self, events: asyncio.Queue, target: MessageRef, caplog: pytest.LogCaptureFixture
    ) -> None:
        shell = FakeShell(held={"sleep 100"})
        registry = SessionRegistry(shell, events, grace_period=0.01)
        old = await registry.ensure("a", 5, target)
        await registry.submit("a", "sleep 100")
        await wait_for(lambda: "sleep 100" in shell.processes)

        with caplog.at_level(logging.WARNING, logger="termview.terminal.registry"):
            new = await registry.ensure("a", 5, target)

        assert "untracked" in caplog.text
        assert registry.get("a") is new
        assert len(registry) == 1
        # The old session keeps draining on its own
        assert not old.finished
        assert not shell.processes["sleep 100"].killed

        shell.processes["sleep 100"].release()
        assert await old.wait_closed(timeout=1.0)
        await registry.shutdown(timeout=1.0)

    @pytest.mark.asyncio
    async def test_concurrent_replacements_leave_one_session(
        self, fake_shell: FakeShell, events: asyncio.Queue, target: MessageRef
    ) -> None:
        registry = SessionRegistry(fake_shell, events, grace_period=0.05)
        old = await registry.ensure("a", 5, target)

        first, second = await asyncio.gather(
            registry.ensure("a", 5, target),
            registry.ensure("a", 5, target),
        )

        assert len(registry) == 1
        current = registry.get("a")
        assert current in (first, second)
        displaced = second if current is first else first
        assert await displaced.wait_closed(timeout=1.0)
        assert old.finished
        await wait_for(lambda: len(live_session_tasks("a")) == 1)
        assert not current.finished
        await registry.shutdown(timeout=1.0)

    @pytest.mark.parametrize("remove_first", [True, False])
    @pytest.mark.asyncio
    async def test_remove_overlapping_replacement(
        self, fake_shell: FakeShell, events: asyncio.Queue, target: MessageRef, remove_first: bool
    ) -> None:
        registry = SessionRegistry(fake_shell, events, grace_period=0.05)
        old = await registry.ensure("a", 5, target)

        operations = [registry.remove("a"), registry.ensure("a", 5, target)]
        if not remove_first:
            operations.reverse()
        await asyncio.gather(*operations)

        assert await old.wait_closed(timeout=1.0)
        assert len(registry) == 1
        await wait_for(lambda: len(live_session_tasks("a")) == 1)
        await registry.shutdown(timeout=1.0)
        assert live_session_tasks("a") == []


class TestShutdown:
    @pytest.mark.asyncio
    async def test_shutdown_stops_every_session(
        self, events: asyncio.Queue, target: MessageRef
    ) -> None:
        shell = FakeShell(held={"sleep 100"})
        registry = SessionRegistry(shell, events)
        first = await registry.ensure("a", 5, target)
        second = await registry.ensure("b", 5, target)
        await registry.submit("b", "sleep 100")
        await wait_for(lambda: "sleep 100" in shell.processes)

        await registry.shutdown(timeout=1.0)

        assert len(registry) == 0
        assert first.finished and second.finished
        assert shell.processes["sleep 100"].killed


class TestLocalShellEndToEnd:
    @pytest.mark.asyncio
    async def test_two_commands_in_a_three_line_window(self, target: MessageRef) -> None:
        events: asyncio.Queue = asyncio.Queue()
        registry = SessionRegistry(LocalShell(), events, cooldown=0.0)
        await registry.ensure("t", 3, target)

        await registry.submit("t", "echo one")
        await registry.submit("t", "echo two")
        await registry.get("t").terminate()
        packets = await collect_until_closed(events)

        assert kinds(packets).count("ready") == 2
        final = [p.event.snapshot for p in packets if isinstance(p.event, UpdateEvent)][-1]
        assert final == "\n".join(["two", PROMPT_MARKER, CLOSED_MARKER])
        await registry.shutdown(timeout=1.0)

    @pytest.mark.asyncio
    async def test_remove_kills_long_running_command(self, target: MessageRef) -> None:
        events: asyncio.Queue = asyncio.Queue()
        registry = SessionRegistry(LocalShell(), events)
        handle = await registry.ensure("t", 3, target)
        await registry.submit("t", "echo started; sleep 30")
        await asyncio.sleep(0.2)

        started = time.monotonic()
        await registry.remove("t")
        assert await handle.wait_closed(timeout=5.0)
        assert time.monotonic() - started < 5.0
