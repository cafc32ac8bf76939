from __future__ import annotations

from pydantic import Field

from ..core.registry import ToolRegistry
from ..core.session import SessionState
from .base import BaseToolParams, success_response, tool_client


class LocaleParams(BaseToolParams):
    locale_id: str = Field(description="The ID of the locale")


async def get_locale(params: LocaleParams) -> dict:
    async with tool_client() as client:
        locale = await client.locale.get(params.locale_id, params.space_id, params.environment_id)
    return success_response("Locale retrieved successfully", locale=locale)


async def delete_locale(params: LocaleParams) -> dict:
    async with tool_client() as client:
        locale = await client.locale.get(params.locale_id, params.space_id, params.environment_id)
        await client.locale.delete(params.locale_id, params.space_id, params.environment_id)
    return success_response("Locale deleted successfully", locale=locale)


def register_locale_tools(registry: ToolRegistry, state: SessionState) -> None:
    registry.register("get_locale", "Retrieve a specific locale by its ID", LocaleParams, get_locale)
    registry.register(
        "delete_locale",
        "Delete a locale. The default locale cannot be deleted.",
        LocaleParams,
        delete_locale,
    )
