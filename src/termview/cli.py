"""Command-line interface for termview.

Provides the main entry point for running the chat endpoint server, or
running a local terminal without any chat transport for testing.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="termview",
        description="Chat threads as scrollback terminals",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/termview.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("serve", help="Start the inbound chat endpoint server")

    run_parser = subparsers.add_parser("run", help="Run commands in a local terminal")
    run_parser.add_argument(
        "commands", nargs="+",
        help="Command lines, executed one after another",
    )
    run_parser.add_argument(
        "-H", "--height", type=int, default=None,
        help="Number of output lines kept (default: terminal.default_height)",
    )
    run_parser.add_argument(
        "-o", "--output-dir", type=Path, default=Path("frames"),
        help="Directory the terminal frames are written to",
    )

    parse_parser = subparsers.add_parser("parse", help="Show how a command body is parsed")
    parse_parser.add_argument("text", help="Command body, e.g. 'new height=10'")

    return parser.parse_args(argv)


async def _run_local(settings, args) -> int:
    """Run the given commands in one terminal and print the final frame."""
    from termview.domain.models import MessageRef
    from termview.execution.local import LocalShell
    from termview.render.file import FileRenderer
    from termview.terminal.registry import SessionRegistry
    from termview.terminal.sink import EventSink, create_event_queue

    height = args.height or settings.terminal.default_height
    target = MessageRef(channel_id="local", message_id="0")

    events = create_event_queue(settings.sink.queue_size)
    registry = SessionRegistry(
        LocalShell(shell=settings.terminal.shell),
        events,
        cooldown=settings.terminal.cooldown,
        grace_period=settings.terminal.grace_period,
        command_buffer=settings.terminal.command_buffer,
    )
    renderer = FileRenderer(args.output_dir)

    async with renderer:
        sink = EventSink(events, renderer, message_limit=settings.chat.message_limit)
        sink_task = asyncio.create_task(sink.run())
        try:
            handle = await registry.ensure("local", height, target)
            for command in args.commands:
                await registry.submit("local", command)
            await handle.terminate()
            await handle.wait_closed()
            await events.join()
        finally:
            sink_task.cancel()
            try:
                await sink_task
            except asyncio.CancelledError:
                pass
            await registry.shutdown(timeout=1.0)

    frame_path = renderer.path_for(target)
    if frame_path.exists():
        print(frame_path.read_text(encoding="utf-8"), end="")
    return 0


def _parse_text(settings, text: str) -> int:
    from termview.parser import ParseError, parse

    try:
        command = parse(
            text,
            default_height=settings.terminal.default_height,
            max_height=settings.terminal.max_height,
        )
    except ParseError as e:
        print(f"error: {e}")
        return 1
    print(command.model_dump_json())
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the termview CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from termview.config.settings import load_settings
    from termview.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        if not settings.bot_token.get_secret_value():
            logger.error("No bot token configured (set DISCORD_TOKEN or TERMVIEW_BOT_TOKEN)")
            sys.exit(1)
        if not settings.chat.allowed_roles:
            logger.warning("No allowed roles configured, every command will be ignored")
        logger.info("Starting endpoint server")
        from termview.endpoint.server import serve
        serve(settings)

    elif args.command == "run":
        logger.info("Running %d command(s) locally", len(args.commands))
        sys.exit(asyncio.run(_run_local(settings, args)))

    elif args.command == "parse":
        sys.exit(_parse_text(settings, args.text))


if __name__ == "__main__":
    main()
