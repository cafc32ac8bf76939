from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..core.config import get_settings
from ..core.context import require_current_context
from ..core.tenant import TenantContext
from ..external.client import ContentfulClient


class BaseToolParams(BaseModel):
    """Parameters every content tool accepts."""

    model_config = ConfigDict(extra="forbid")

    space_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("space_id", "spaceId"),
        description="Space ID (defaults to the session's space)",
    )
    environment_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("environment_id", "environmentId"),
        description="Environment ID (defaults to the session's environment)",
    )


def create_tool_client(context: TenantContext) -> ContentfulClient:
    settings = get_settings()
    return ContentfulClient(
        context,
        policy=settings.retry_policy(),
        timeout=settings.http_timeout_seconds,
    )


def tool_client() -> ContentfulClient:
    """Client for the tenant bound to the running call."""
    return create_tool_client(require_current_context())


def success_response(message: str, **data: Any) -> dict[str, Any]:
    return {"message": message, **data}
