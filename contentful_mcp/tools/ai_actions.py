from __future__ import annotations

from pydantic import Field

from ..core.registry import ToolRegistry
from ..core.session import SessionState
from .base import BaseToolParams, success_response, tool_client


class AIActionParams(BaseToolParams):
    ai_action_id: str = Field(description="The ID of the AI action")


class AIActionInvocationParams(AIActionParams):
    invocation_id: str = Field(description="The ID of the invocation")


async def get_ai_action(params: AIActionParams) -> dict:
    async with tool_client() as client:
        ai_action = await client.ai_action.get(params.ai_action_id, params.space_id)
    return success_response("AI action retrieved successfully", ai_action=ai_action)


async def delete_ai_action(params: AIActionParams) -> dict:
    async with tool_client() as client:
        await client.ai_action.delete(params.ai_action_id, params.space_id)
    return success_response("AI action deleted successfully", ai_action_id=params.ai_action_id)


async def publish_ai_action(params: AIActionParams) -> dict:
    # Failures propagate as classified errors, same as every other tool.
    async with tool_client() as client:
        ai_action = await client.ai_action.publish(params.ai_action_id, params.space_id)
    return success_response(
        "AI action published successfully",
        ai_action_id=params.ai_action_id,
        version=ai_action.get("sys", {}).get("publishedVersion"),
    )


async def unpublish_ai_action(params: AIActionParams) -> dict:
    async with tool_client() as client:
        await client.ai_action.unpublish(params.ai_action_id, params.space_id)
    return success_response("AI action unpublished successfully", ai_action_id=params.ai_action_id)


async def get_ai_action_invocation(params: AIActionInvocationParams) -> dict:
    async with tool_client() as client:
        invocation = await client.ai_action.get_invocation(
            params.ai_action_id, params.invocation_id, params.space_id, params.environment_id
        )
    return success_response("AI action invocation retrieved successfully", invocation=invocation)


def register_ai_action_tools(registry: ToolRegistry, state: SessionState) -> None:
    registry.register("get_ai_action", "Retrieve a specific AI action", AIActionParams, get_ai_action)
    registry.register("delete_ai_action", "Delete a specific AI action", AIActionParams, delete_ai_action)
    registry.register("publish_ai_action", "Publish an AI action", AIActionParams, publish_ai_action)
    registry.register("unpublish_ai_action", "Unpublish an AI action", AIActionParams, unpublish_ai_action)
    registry.register(
        "get_ai_action_invocation",
        "Retrieve the result of an AI action invocation",
        AIActionInvocationParams,
        get_ai_action_invocation,
    )
