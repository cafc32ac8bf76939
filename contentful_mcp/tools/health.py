from __future__ import annotations

from datetime import datetime, timezone

from .. import __version__
from ..core.registry import ToolRegistry
from ..core.session import SessionState
from .base import BaseToolParams, success_response, tool_client


class PingParams(BaseToolParams):
    pass


async def ping(params: PingParams) -> dict:
    """Verify tenant credentials and Contentful connectivity by fetching the space."""
    async with tool_client() as client:
        space = await client.space.get(params.space_id)
    return success_response(
        "Ping successful",
        status="healthy",
        version=__version__,
        space={"id": space.get("sys", {}).get("id"), "name": space.get("name")},
        environment=params.environment_id or client.context.environment_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


def register_health_tools(registry: ToolRegistry, state: SessionState) -> None:
    registry.register(
        "ping",
        "Health check endpoint to verify tenant credentials and Contentful API connectivity. "
        "Returns space information and server version.",
        PingParams,
        ping,
    )
