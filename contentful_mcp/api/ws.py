"""
MCP over WebSocket

One ServerInstance per connection. Credentials come from the query string
(``token``, ``spaceId``, ``environmentId``) layered on the default tenant.
"""

import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, WebSocket

from ..adapters.fastapi_socket import StarletteSocket
from ..adapters.websocket import websocket_adapter
from ..core.config import Settings, get_settings
from ..core.server import ServerInstance
from ..external.errors import ClassifiedError
from .tenant import resolve_tenant

logger = structlog.get_logger(__name__)

router = APIRouter()

POLICY_VIOLATION = 1008


@router.websocket("/mcp/ws")
async def mcp_websocket(
    websocket: WebSocket,
    token: Optional[str] = Query(default=None),
    space_id: Optional[str] = Query(default=None, alias="spaceId"),
    environment_id: Optional[str] = Query(default=None, alias="environmentId"),
    settings: Settings = Depends(get_settings),
):
    connection_id = str(uuid.uuid4())
    try:
        credentials = resolve_tenant(settings, token=token, space_id=space_id, environment_id=environment_id)
    except ClassifiedError as exc:
        logger.warning("mcp_websocket_rejected", connection_id=connection_id, error=exc.message)
        await websocket.close(code=POLICY_VIOLATION)
        return

    requested = websocket.scope.get("subprotocols") or []
    await websocket.accept(subprotocol="mcp" if "mcp" in requested else None)
    logger.info("mcp_websocket_connected", connection_id=connection_id, space_id=credentials.space_id)

    socket = StarletteSocket(websocket, connection_id)
    server = ServerInstance(credentials.to_context())
    try:
        detach = await websocket_adapter(server, socket)
        server.on_stop(detach)
        await socket.run()
    except Exception as e:
        logger.error("mcp_websocket_failed", connection_id=connection_id, error=str(e))
    finally:
        await server.stop()
        logger.info("mcp_websocket_cleanup", connection_id=connection_id)
