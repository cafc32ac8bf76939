"""Server instance: one tenant, one tool registry, many transports."""

from __future__ import annotations

import asyncio
import inspect
from contextlib import AbstractAsyncContextManager
from typing import Any, Callable, Dict, List, Optional, Protocol, Set, Tuple

from mcp import types as mcp_types
from mcp.server.lowlevel import Server

from .. import __version__
from ..external.errors import tool_not_found
from ..external.metrics import ATTACHED_TRANSPORTS, TOOL_CALLS
from ..tools import register_all_tools
from .context import context_scope, run_with_context
from .registry import ToolMetadata, ToolRegistry
from .session import SessionState
from .tenant import DEFAULT_CONTENTFUL_HOST, DEFAULT_ENVIRONMENT_ID, TenantContext


SERVER_NAME = "contentful-mcp-server"

StopCallback = Callable[[], Any]
ToolRegistration = Callable[[ToolRegistry, SessionState], None]


class ServerTransport(Protocol):
    """Anything that can hand the protocol session a stream pair.

    ``close()`` and ``dispose()`` are optional and looked up at runtime.
    """

    def open(self) -> AbstractAsyncContextManager[Tuple[Any, Any]]: ...


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ServerInstance:
    def __init__(
        self,
        context: TenantContext,
        *,
        register_tools: Optional[ToolRegistration] = None,
        name: str = SERVER_NAME,
        version: str = __version__,
    ):
        self._context = context
        self._state = SessionState()
        self._registry = ToolRegistry(context)
        (register_tools or register_all_tools)(self._registry, self._state)

        self._protocol = Server(name, version=version)
        self._install_protocol_handlers()

        self._transports: Set[Any] = set()
        self._sessions: Dict[Any, asyncio.Task] = {}
        self._stop_callbacks: List[StopCallback] = []

    @property
    def context(self) -> TenantContext:
        return self._context

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def protocol_server(self) -> Server:
        return self._protocol

    @property
    def transports(self) -> frozenset:
        return frozenset(self._transports)

    @property
    def initial_context_loaded(self) -> bool:
        return self._state.initial_context_loaded

    def _install_protocol_handlers(self) -> None:
        @self._protocol.list_tools()
        async def _list_tools() -> List[mcp_types.Tool]:
            return [
                mcp_types.Tool(name=t.name, description=t.description, inputSchema=t.input_schema)
                for t in self._registry.list_tools()
            ]

        @self._protocol.call_tool()
        async def _call_tool(name: str, arguments: Dict[str, Any]) -> Any:
            return await self.call_tool(name, arguments)

    # -- transports -------------------------------------------------------

    async def connect(self, transport: ServerTransport) -> None:
        """Attach ``transport`` and start a protocol session on it.

        The session task is created inside the tenant scope so everything it
        runs inherits this instance's context. Raises if the transport cannot
        be opened.
        """
        if transport in self._sessions:
            raise RuntimeError(f"{type(transport).__name__} is already connected")
        ready: asyncio.Future = asyncio.get_running_loop().create_future()
        with context_scope(self._context):
            task = asyncio.create_task(
                self._serve(transport, ready),
                name=f"mcp-session-{self._context.space_id}",
            )
        self._sessions[transport] = task
        await ready

        dispose = getattr(transport, "dispose", None)
        if callable(dispose):
            async def tracked_dispose() -> None:
                self._untrack(transport)
                await _maybe_await(dispose())

            transport.dispose = tracked_dispose

        self._context.logger.info("transport_connected", transport=type(transport).__name__)

    async def _serve(self, transport: ServerTransport, ready: asyncio.Future) -> None:
        try:
            async with transport.open() as (read_stream, write_stream):
                self._track(transport)
                ready.set_result(None)
                await self._protocol.run(
                    read_stream,
                    write_stream,
                    self._protocol.create_initialization_options(),
                    raise_exceptions=False,
                )
        except Exception as exc:
            if not ready.done():
                ready.set_exception(exc)
            else:
                self._context.logger.warning("protocol_session_failed", error=str(exc))
        finally:
            if not ready.done():
                ready.cancel()
            self._untrack(transport)
            if self._sessions.get(transport) is asyncio.current_task():
                del self._sessions[transport]

    def _track(self, transport: Any) -> None:
        if transport not in self._transports:
            self._transports.add(transport)
            ATTACHED_TRANSPORTS.inc()

    def _untrack(self, transport: Any) -> None:
        if transport in self._transports:
            self._transports.discard(transport)
            ATTACHED_TRANSPORTS.dec()

    async def _shutdown_transport(self, transport: Any) -> None:
        for step in ("close", "dispose"):
            method = getattr(transport, step, None)
            if not callable(method):
                continue
            try:
                await _maybe_await(method())
            except Exception as exc:
                self._context.logger.error(
                    f"transport_{step}_failed",
                    transport=type(transport).__name__,
                    error=str(exc),
                )

    async def _close_sessions(self) -> None:
        current = asyncio.current_task()
        tasks = [t for t in self._sessions.values() if t is not current]
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._sessions.clear()

    async def wait_closed(self) -> None:
        """Wait until every protocol session currently running has ended."""
        tasks = list(self._sessions.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # -- tools ------------------------------------------------------------

    async def list_tools(self) -> List[ToolMetadata]:
        return self._registry.list_tools()

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        handler = self._registry.get_tool_handler(name)
        if handler is None:
            TOOL_CALLS.labels(tool="unknown", result="not_found").inc()
            raise tool_not_found(name)
        try:
            result = await run_with_context(self._context, handler, arguments or {})
        except Exception:
            TOOL_CALLS.labels(tool=name, result="error").inc()
            raise
        TOOL_CALLS.labels(tool=name, result="success").inc()
        return result

    # -- lifecycle --------------------------------------------------------

    def on_stop(self, callback: StopCallback) -> Callable[[], None]:
        self._stop_callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._stop_callbacks:
                self._stop_callbacks.remove(callback)

        return unsubscribe

    async def stop(self) -> None:
        """Best-effort shutdown. Never raises; safe to call repeatedly."""
        transports = list(self._transports)
        if transports:
            await asyncio.gather(*(self._shutdown_transport(t) for t in transports))
        for transport in transports:
            self._untrack(transport)
        self._transports.clear()

        try:
            await run_with_context(self._context, self._close_sessions)
        except Exception as exc:
            self._context.logger.error("protocol_close_failed", error=str(exc))

        callbacks = list(self._stop_callbacks)
        self._stop_callbacks.clear()
        for callback in callbacks:
            try:
                await _maybe_await(callback())
            except Exception as exc:
                self._context.logger.error("stop_callback_failed", error=str(exc))

        self._state.reset()
        if transports:
            self._context.logger.info("server_stopped", transports=len(transports))


def create_mcp_server(
    *,
    access_token: str,
    space_id: str,
    environment_id: str = DEFAULT_ENVIRONMENT_ID,
    host: Optional[str] = None,
    logger: Any = None,
    register_tools: Optional[ToolRegistration] = None,
) -> ServerInstance:
    context = TenantContext(
        access_token=access_token,
        space_id=space_id,
        environment_id=environment_id or DEFAULT_ENVIRONMENT_ID,
        host=host or DEFAULT_CONTENTFUL_HOST,
        logger=logger,
    )
    return ServerInstance(context, register_tools=register_tools)
