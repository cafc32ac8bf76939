"""WebSocket adapter: serve a ServerInstance over a message-oriented socket.

Works with any socket exposing ``send``/``close`` and either an
``on``/``off`` (or ``remove_listener``) listener API or an
``add_event_listener``/``remove_event_listener`` one. Listeners may be
invoked by sync or async emitters; each returns the task it scheduled.
"""

from __future__ import annotations

import asyncio
import inspect
import math
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, List, Optional, Set

import anyio
import structlog
from mcp import types as mcp_types
from mcp.shared.message import SessionMessage
from pydantic import ValidationError

from .base import StreamTransport


logger = structlog.get_logger(__name__)

TransportDetach = Callable[[], Awaitable[None]]
Observer = Callable[..., Any]

# WHATWG readyState values
CONNECTING, OPEN, CLOSING, CLOSED = 0, 1, 2, 3


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def is_socket_open(socket: Any) -> bool:
    state = getattr(socket, "ready_state", None)
    if state is None:
        state = getattr(socket, "readyState", None)
    if state is None:
        return True
    return state in (CONNECTING, OPEN)


def add_socket_listener(socket: Any, event: str, listener: Callable[..., Any]) -> Callable[[], None]:
    """Subscribe ``listener`` and return a function that unsubscribes it."""
    on = getattr(socket, "on", None)
    if callable(on):
        on(event, listener)
        off = getattr(socket, "off", None) or getattr(socket, "remove_listener", None)

        def dispose() -> None:
            if callable(off):
                off(event, listener)

        return dispose

    add = getattr(socket, "add_event_listener", None)
    if callable(add):
        add(event, listener)

        def dispose() -> None:
            remove = getattr(socket, "remove_event_listener", None)
            if callable(remove):
                remove(event, listener)

        return dispose

    raise TypeError("Provided WebSocket does not expose an event listener API")


def _describe_error(error: Any) -> str:
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    message = getattr(error, "message", None)
    if message:
        return str(message)
    inner = getattr(error, "error", None)
    if isinstance(inner, BaseException):
        return str(inner)
    return str(error)


class WebSocketTransport(StreamTransport):
    """JSON-RPC text frames in and out of a socket."""

    def __init__(self, socket: Any, on_dispose: Optional[Callable[[], Awaitable[None]]] = None):
        super().__init__()
        self._socket = socket
        self._on_dispose = on_dispose
        self._inbound_writer, self._inbound_reader = anyio.create_memory_object_stream(math.inf)

    def feed(self, data: Any) -> None:
        """Queue one inbound frame for the protocol session."""
        if self._closed:
            return
        if isinstance(data, (bytes, bytearray)):
            data = data.decode("utf-8")
        try:
            item: Any = SessionMessage(mcp_types.JSONRPCMessage.model_validate_json(data))
        except ValidationError as exc:
            logger.warning("websocket_invalid_message", error=str(exc))
            item = exc
        try:
            self._inbound_writer.send_nowait(item)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            logger.debug("websocket_message_dropped", reason="transport_closed")

    @asynccontextmanager
    async def _streams(self):
        write_stream, outbound = anyio.create_memory_object_stream(math.inf)
        async with anyio.create_task_group() as tg:
            tg.start_soon(self._pump_outbound, outbound)
            try:
                yield self._inbound_reader, write_stream
            finally:
                write_stream.close()
                tg.cancel_scope.cancel()

    async def _pump_outbound(self, outbound) -> None:
        async with outbound:
            async for session_message in outbound:
                payload = session_message.message.model_dump_json(by_alias=True, exclude_none=True)
                try:
                    await _maybe_await(self._socket.send(payload))
                except Exception as exc:
                    logger.warning("websocket_send_failed", error=str(exc))

    async def close(self) -> None:
        self._inbound_writer.close()
        await super().close()

    async def dispose(self) -> None:
        if self._on_dispose is not None:
            await self._on_dispose()


class WebSocketBinding:
    """Listener bookkeeping and the single guarded teardown path."""

    def __init__(
        self,
        server: Any,
        socket: Any,
        *,
        auto_stop: bool = True,
        close_socket_on_detach: bool = True,
        logger: Any = None,
        on_close: Optional[Observer] = None,
        on_error: Optional[Observer] = None,
    ):
        self.server = server
        self.socket = socket
        self.auto_stop = auto_stop
        self.close_socket_on_detach = close_socket_on_detach
        self.on_close = on_close
        self.on_error = on_error
        context = getattr(server, "context", None)
        self.log = logger or getattr(context, "logger", None) or structlog.get_logger(__name__)

        self.transport = WebSocketTransport(socket, on_dispose=self.dispose)
        self._listener_disposers: List[Callable[[], None]] = []
        self._tasks: Set[asyncio.Task] = set()
        self._detached = False
        self._close_handled = False
        self._error_handled = False
        self._server_stopped = False

    @property
    def detached(self) -> bool:
        return self._detached

    def attach(self) -> None:
        disposers = []
        try:
            disposers.append(add_socket_listener(self.socket, "message", self._handle_message))
            disposers.append(add_socket_listener(self.socket, "close", self._handle_close))
            disposers.append(add_socket_listener(self.socket, "error", self._handle_error))
        except Exception:
            for dispose in disposers:
                dispose()
            raise
        self._listener_disposers = disposers

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # listeners ------------------------------------------------------------

    def _handle_message(self, event: Any = None) -> None:
        self.transport.feed(getattr(event, "data", event))

    def _handle_close(self, *args: Any) -> Optional[asyncio.Task]:
        if self._close_handled:
            return None
        self._close_handled = True
        return self._spawn(self._on_socket_close(*args))

    def _handle_error(self, error: Any = None, *args: Any) -> Optional[asyncio.Task]:
        if self._error_handled:
            return None
        self._error_handled = True
        return self._spawn(self._on_socket_error(error))

    # teardown -------------------------------------------------------------

    async def _on_socket_close(self, *args: Any) -> None:
        await self.cleanup(close_transport=True, close_socket=False)
        await self._notify(self.on_close, "on_close_callback_failed", *args)
        await self._stop_server()

    async def _on_socket_error(self, error: Any) -> None:
        self.log.error("websocket_error", error=_describe_error(error))
        await self._notify(self.on_error, "on_error_callback_failed", error)
        await self.cleanup(close_transport=True, close_socket=self.close_socket_on_detach)
        await self._stop_server()

    async def _notify(self, observer: Optional[Observer], failure_event: str, *args: Any) -> None:
        if observer is None:
            return
        try:
            await _maybe_await(observer(*args))
        except Exception as exc:
            self.log.error(failure_event, error=str(exc))

    async def _stop_server(self) -> None:
        if not self.auto_stop or self._server_stopped:
            return
        self._server_stopped = True
        try:
            await self.server.stop()
        except Exception as exc:
            self.log.error("server_stop_failed", error=str(exc))

    async def cleanup(self, *, close_transport: bool = True, close_socket: bool = True) -> None:
        if self._detached:
            return
        self._detached = True

        for dispose in self._listener_disposers:
            try:
                dispose()
            except Exception as exc:
                self.log.warning("socket_listener_dispose_failed", error=str(exc))
        self._listener_disposers = []

        if close_transport:
            try:
                await self.transport.close()
            except Exception as exc:
                self.log.warning("transport_close_failed", error=str(exc))

        if close_socket and is_socket_open(self.socket):
            try:
                await _maybe_await(self.socket.close())
            except Exception as exc:
                self.log.warning("socket_close_failed", error=str(exc))

    async def dispose(self) -> None:
        await self.cleanup(close_transport=False, close_socket=self.close_socket_on_detach)

    async def detach(self) -> None:
        await self.cleanup(close_transport=True, close_socket=self.close_socket_on_detach)


async def websocket_adapter(
    server: Any,
    socket: Any,
    *,
    auto_stop: bool = True,
    close_socket_on_detach: bool = True,
    logger: Any = None,
    on_close: Optional[Observer] = None,
    on_error: Optional[Observer] = None,
) -> TransportDetach:
    binding = WebSocketBinding(
        server,
        socket,
        auto_stop=auto_stop,
        close_socket_on_detach=close_socket_on_detach,
        logger=logger,
        on_close=on_close,
        on_error=on_error,
    )
    binding.attach()
    try:
        await server.connect(binding.transport)
    except Exception:
        await binding.cleanup(close_transport=True, close_socket=False)
        raise
    return binding.detach
