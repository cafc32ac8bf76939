"""
Event-style façade over a FastAPI/Starlette WebSocket.

Starlette sockets are pull based (``await receive_text()``). The socket
adapter expects push events, so ``run()`` drives the receive loop and
emits ``message``, ``close`` and ``error`` to subscribed listeners.
"""

from __future__ import annotations

import inspect
from collections import defaultdict
from typing import Any, Callable, DefaultDict, List, Optional

import structlog
from fastapi import WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState

from .websocket import CLOSED, CONNECTING, OPEN


logger = structlog.get_logger(__name__)


class StarletteSocket:
    def __init__(self, websocket: WebSocket, connection_id: Optional[str] = None):
        self._websocket = websocket
        self._listeners: DefaultDict[str, List[Callable[..., Any]]] = defaultdict(list)
        self.connection_id = connection_id

    @property
    def ready_state(self) -> int:
        client = self._websocket.client_state
        app = self._websocket.application_state
        if WebSocketState.DISCONNECTED in (client, app):
            return CLOSED
        if client == WebSocketState.CONNECTING or app == WebSocketState.CONNECTING:
            return CONNECTING
        return OPEN

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Callable[..., Any]) -> None:
        if listener in self._listeners[event]:
            self._listeners[event].remove(listener)

    async def _emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners[event]):
            result = listener(*args)
            if inspect.isawaitable(result):
                await result

    async def send(self, data: str) -> None:
        await self._websocket.send_text(data)

    async def close(self, code: int = 1000) -> None:
        if self.ready_state == OPEN:
            await self._websocket.close(code=code)

    async def run(self) -> None:
        """Pump inbound frames until the peer disconnects or receiving fails."""
        while True:
            try:
                data = await self._websocket.receive_text()
            except WebSocketDisconnect as exc:
                logger.info("websocket_disconnected", connection_id=self.connection_id, code=exc.code)
                await self._emit("close", exc.code)
                break
            except Exception as e:
                logger.error("websocket_receive_failed", connection_id=self.connection_id, error=str(e))
                await self._emit("error", e)
                break
            await self._emit("message", data)
