from __future__ import annotations

from datetime import date
from functools import partial

from pydantic import BaseModel, ConfigDict

from ..core.context import get_current_context
from ..core.registry import ToolRegistry
from ..core.session import SessionState
from .base import success_response


INSTRUCTIONS = """You are connected to a Contentful space through the Contentful MCP server.
Use the tools to read, publish, unpublish and delete entries, assets, locales and AI actions.
Always confirm destructive operations (delete, unpublish) with the user before calling them.
Resource IDs are scoped to the space and environment below unless a tool call overrides them."""


class GetInitialContextParams(BaseModel):
    model_config = ConfigDict(extra="forbid")


async def get_initial_context(params: GetInitialContextParams, *, state: SessionState) -> dict:
    context = get_current_context()
    space = context.space_id if context else None
    environment = context.environment_id if context else None
    host = context.host if context else "api.contentful.com"

    config_info = (
        "Current Contentful Configuration:\n"
        f"  - Space ID: {space or 'Not provided'}\n"
        f"  - Environment ID: {environment or 'Not provided'}\n"
        f"  - API Host: {host}"
    )
    message = (
        f"{INSTRUCTIONS}\n\n"
        "This is the initial context for your Contentful instance:\n\n"
        f"<context>\n{config_info}\n</context>\n\n"
        f"<todaysDate>{date.today().strftime('%m/%d/%Y')}</todaysDate>"
    )

    state.mark_initial_context_loaded()
    return success_response(message, space_id=space, environment_id=environment, host=host)


def register_context_tools(registry: ToolRegistry, state: SessionState) -> None:
    registry.register(
        "get_initial_context",
        "IMPORTANT: Call this tool first. Returns usage instructions and the current space, "
        "environment and host configuration.",
        GetInitialContextParams,
        partial(get_initial_context, state=state),
    )
