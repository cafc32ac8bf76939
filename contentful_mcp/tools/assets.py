from __future__ import annotations

from pydantic import Field

from ..core.registry import ToolRegistry
from ..core.session import SessionState
from .base import BaseToolParams, success_response, tool_client


class AssetParams(BaseToolParams):
    asset_id: str = Field(description="The ID of the asset")


async def get_asset(params: AssetParams) -> dict:
    async with tool_client() as client:
        asset = await client.asset.get(params.asset_id, params.space_id, params.environment_id)
    return success_response("Asset retrieved successfully", asset=asset)


async def delete_asset(params: AssetParams) -> dict:
    async with tool_client() as client:
        asset = await client.asset.get(params.asset_id, params.space_id, params.environment_id)
        await client.asset.delete(params.asset_id, params.space_id, params.environment_id)
    return success_response("Asset deleted successfully", asset=asset)


async def publish_asset(params: AssetParams) -> dict:
    async with tool_client() as client:
        asset = await client.asset.publish(params.asset_id, params.space_id, params.environment_id)
    return success_response(
        "Asset published successfully",
        asset_id=params.asset_id,
        version=asset.get("sys", {}).get("publishedVersion"),
    )


async def unpublish_asset(params: AssetParams) -> dict:
    async with tool_client() as client:
        asset = await client.asset.unpublish(params.asset_id, params.space_id, params.environment_id)
    return success_response(
        "Asset unpublished successfully",
        asset_id=params.asset_id,
        version=asset.get("sys", {}).get("version"),
    )


def register_asset_tools(registry: ToolRegistry, state: SessionState) -> None:
    registry.register("get_asset", "Retrieve an asset", AssetParams, get_asset)
    registry.register("delete_asset", "Delete an asset", AssetParams, delete_asset)
    registry.register("publish_asset", "Publish an asset at its current version", AssetParams, publish_asset)
    registry.register("unpublish_asset", "Unpublish a published asset", AssetParams, unpublish_asset)
