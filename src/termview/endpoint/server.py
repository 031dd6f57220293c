"""FastAPI HTTP server receiving chat messages.

The chat gateway (or a bridge forwarding its events) POSTs every channel
message to ``/messages``; terminal commands among them are dispatched to
the session registry. The app also owns the event sink task that pushes
terminal frames back into the chat.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel

from termview.chat.client import ChatClient
from termview.chat.dispatcher import CommandDispatcher
from termview.config.settings import Settings
from termview.domain.models import InboundMessage
from termview.execution.base import ShellExecutor
from termview.execution.local import LocalShell
from termview.render.base import Renderer
from termview.render.chat import ChatRenderer
from termview.terminal.registry import SessionRegistry
from termview.terminal.sink import EventSink, create_event_queue

logger = logging.getLogger(__name__)

# Seconds to wait for terminals to drain when the server stops
SHUTDOWN_TIMEOUT = 10.0


class EndpointStatus(BaseModel):
    status: str = "ok"
    terminals: int = 0
    sink_running: bool = False


class DispatchResult(BaseModel):
    status: str


def create_app(
    settings: Settings | None = None,
    client: ChatClient | None = None,
    renderer: Renderer | None = None,
    executor: ShellExecutor | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings()
    if client is None:
        client = ChatClient(
            token=settings.bot_token.get_secret_value(),
            base_url=settings.chat.api_base_url,
            timeout=settings.chat.http_timeout,
        )
    if renderer is None:
        renderer = ChatRenderer(client)
    if executor is None:
        executor = LocalShell(shell=settings.terminal.shell)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Startup
        events = create_event_queue(settings.sink.queue_size)
        registry = SessionRegistry(
            executor,
            events,
            cooldown=settings.terminal.cooldown,
            grace_period=settings.terminal.grace_period,
            command_buffer=settings.terminal.command_buffer,
        )
        sink = EventSink(events, renderer, message_limit=settings.chat.message_limit)
        app.state.registry = registry
        app.state.sink = sink
        app.state.dispatcher = CommandDispatcher(
            registry,
            client,
            allowed_roles=settings.chat.allowed_roles,
            separator=settings.chat.separator,
            default_height=settings.terminal.default_height,
            max_height=settings.terminal.max_height,
        )
        await client.connect()
        await renderer.open()
        app.state.sink_task = asyncio.create_task(sink.run(), name="event-sink")
        logger.info("Endpoint started")
        yield
        # Shutdown
        await registry.shutdown(timeout=SHUTDOWN_TIMEOUT)
        app.state.sink_task.cancel()
        try:
            await app.state.sink_task
        except asyncio.CancelledError:
            pass
        await renderer.close()
        await client.disconnect()
        logger.info("Endpoint stopped")

    app = FastAPI(
        title="termview Endpoint",
        description="Inbound chat message endpoint for termview",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health_check() -> EndpointStatus:
        return EndpointStatus(
            status="ok",
            terminals=len(app.state.registry),
            sink_running=app.state.sink.is_running,
        )

    @app.get("/terminals")
    async def list_terminals() -> dict[str, list[str]]:
        return {"terminals": app.state.registry.terminal_ids()}

    @app.post("/messages")
    async def receive_message(message: InboundMessage) -> DispatchResult:
        dispatcher: CommandDispatcher = app.state.dispatcher
        handled = await dispatcher.handle(message)
        return DispatchResult(status="handled" if handled else "ignored")

    return app


def serve(settings: Settings) -> None:
    """Run the endpoint server until interrupted."""
    app = create_app(settings)
    uvicorn.run(app, host=settings.endpoint.host, port=settings.endpoint.port)
