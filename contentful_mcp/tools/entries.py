from __future__ import annotations

from pydantic import Field

from ..core.registry import ToolRegistry
from ..core.session import SessionState
from .base import BaseToolParams, success_response, tool_client


class EntryParams(BaseToolParams):
    entry_id: str = Field(description="The ID of the entry")


async def get_entry(params: EntryParams) -> dict:
    async with tool_client() as client:
        entry = await client.entry.get(params.entry_id, params.space_id, params.environment_id)
    return success_response("Entry retrieved successfully", entry=entry)


async def delete_entry(params: EntryParams) -> dict:
    async with tool_client() as client:
        entry = await client.entry.get(params.entry_id, params.space_id, params.environment_id)
        await client.entry.delete(params.entry_id, params.space_id, params.environment_id)
    return success_response("Entry deleted successfully", entry=entry)


async def publish_entry(params: EntryParams) -> dict:
    async with tool_client() as client:
        entry = await client.entry.publish(params.entry_id, params.space_id, params.environment_id)
    return success_response(
        "Entry published successfully",
        entry_id=params.entry_id,
        version=entry.get("sys", {}).get("publishedVersion"),
    )


async def unpublish_entry(params: EntryParams) -> dict:
    async with tool_client() as client:
        entry = await client.entry.unpublish(params.entry_id, params.space_id, params.environment_id)
    return success_response(
        "Entry unpublished successfully",
        entry_id=params.entry_id,
        version=entry.get("sys", {}).get("version"),
    )


def register_entry_tools(registry: ToolRegistry, state: SessionState) -> None:
    registry.register("get_entry", "Retrieve an existing entry", EntryParams, get_entry)
    registry.register("delete_entry", "Delete a specific content entry", EntryParams, delete_entry)
    registry.register("publish_entry", "Publish an entry at its current version", EntryParams, publish_entry)
    registry.register("unpublish_entry", "Unpublish a published entry", EntryParams, unpublish_entry)
