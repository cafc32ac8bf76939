from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from .. import __version__
from ..core.tenant import TenantContext
from .errors import ClassifiedError, ErrorMeta
from .metrics import CONTENT_API_LATENCY, CONTENT_API_REQUESTS
from .retry import RetryPolicy, with_retry


CONTENTFUL_MEDIA_TYPE = "application/vnd.contentful.management.v1+json"


class ContentfulClient:
    """Contentful Management API client bound to one tenant.

    Every verb goes through ``request()`` which applies retry, error
    classification and metrics uniformly.
    """

    def __init__(
        self,
        context: TenantContext,
        *,
        policy: Optional[RetryPolicy] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.context = context
        self.policy = policy or RetryPolicy()
        self._client = httpx.AsyncClient(
            base_url=context.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {context.access_token}",
                "Content-Type": CONTENTFUL_MEDIA_TYPE,
                "X-Contentful-User-Agent-Tool": f"contentful-mcp/{__version__}",
            },
        )
        self.space = SpaceResource(self)
        self.entry = PublishableResource(self, "entry", "entries")
        self.asset = PublishableResource(self, "asset", "assets")
        self.locale = LocaleResource(self)
        self.ai_action = AIActionResource(self)

    async def __aenter__(self) -> "ContentfulClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def environment_path(self, space_id: Optional[str] = None, environment_id: Optional[str] = None) -> str:
        space = space_id or self.context.space_id
        environment = environment_id or self.context.environment_id
        return f"/spaces/{space}/environments/{environment}"

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> dict[str, Any]:
        response = await self._client.request(method, path, json=json, headers=headers)
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    async def request(
        self,
        method: str,
        path: str,
        *,
        action: str,
        resource: str,
        resource_id: Optional[str] = None,
        json: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> dict[str, Any]:
        meta = ErrorMeta(action=action, resource=resource, resource_id=resource_id)
        with CONTENT_API_LATENCY.labels(action=action).time():
            try:
                result = await with_retry(
                    lambda: self._send(method, path, json=json, headers=headers),
                    self.policy,
                    meta,
                )
            except ClassifiedError as e:
                CONTENT_API_REQUESTS.labels(action=action, result=e.kind).inc()
                raise
        CONTENT_API_REQUESTS.labels(action=action, result="ok").inc()
        return result


class _Resource:
    def __init__(self, client: ContentfulClient):
        self._client = client


class SpaceResource(_Resource):
    async def get(self, space_id: Optional[str] = None) -> dict[str, Any]:
        space = space_id or self._client.context.space_id
        return await self._client.request("GET", f"/spaces/{space}", action="get", resource="space", resource_id=space)


class PublishableResource(_Resource):
    """Entries and assets share the same verb set and URL shape."""

    def __init__(self, client: ContentfulClient, kind: str, collection: str):
        super().__init__(client)
        self.kind = kind
        self.collection = collection

    def _path(self, resource_id: str, space_id: Optional[str], environment_id: Optional[str]) -> str:
        return f"{self._client.environment_path(space_id, environment_id)}/{self.collection}/{resource_id}"

    async def get(self, resource_id: str, space_id: Optional[str] = None, environment_id: Optional[str] = None):
        return await self._client.request(
            "GET", self._path(resource_id, space_id, environment_id),
            action="get", resource=self.kind, resource_id=resource_id,
        )

    async def delete(self, resource_id: str, space_id: Optional[str] = None, environment_id: Optional[str] = None):
        return await self._client.request(
            "DELETE", self._path(resource_id, space_id, environment_id),
            action="delete", resource=self.kind, resource_id=resource_id,
        )

    async def publish(self, resource_id: str, space_id: Optional[str] = None, environment_id: Optional[str] = None):
        current = await self.get(resource_id, space_id, environment_id)
        version = current.get("sys", {}).get("version")
        return await self._client.request(
            "PUT", f"{self._path(resource_id, space_id, environment_id)}/published",
            action="publish", resource=self.kind, resource_id=resource_id,
            headers={"X-Contentful-Version": str(version)},
        )

    async def unpublish(self, resource_id: str, space_id: Optional[str] = None, environment_id: Optional[str] = None):
        return await self._client.request(
            "DELETE", f"{self._path(resource_id, space_id, environment_id)}/published",
            action="unpublish", resource=self.kind, resource_id=resource_id,
        )


class LocaleResource(_Resource):
    def _path(self, locale_id: str, space_id: Optional[str], environment_id: Optional[str]) -> str:
        return f"{self._client.environment_path(space_id, environment_id)}/locales/{locale_id}"

    async def get(self, locale_id: str, space_id: Optional[str] = None, environment_id: Optional[str] = None):
        return await self._client.request(
            "GET", self._path(locale_id, space_id, environment_id),
            action="get", resource="locale", resource_id=locale_id,
        )

    async def delete(self, locale_id: str, space_id: Optional[str] = None, environment_id: Optional[str] = None):
        return await self._client.request(
            "DELETE", self._path(locale_id, space_id, environment_id),
            action="delete", resource="locale", resource_id=locale_id,
        )


class AIActionResource(_Resource):
    """AI actions live at space level; invocations are per environment."""

    def _path(self, ai_action_id: str, space_id: Optional[str]) -> str:
        space = space_id or self._client.context.space_id
        return f"/spaces/{space}/ai/actions/{ai_action_id}"

    async def get(self, ai_action_id: str, space_id: Optional[str] = None):
        return await self._client.request(
            "GET", self._path(ai_action_id, space_id),
            action="get", resource="ai_action", resource_id=ai_action_id,
        )

    async def delete(self, ai_action_id: str, space_id: Optional[str] = None):
        return await self._client.request(
            "DELETE", self._path(ai_action_id, space_id),
            action="delete", resource="ai_action", resource_id=ai_action_id,
        )

    async def publish(self, ai_action_id: str, space_id: Optional[str] = None):
        current = await self.get(ai_action_id, space_id)
        version = current.get("sys", {}).get("version")
        return await self._client.request(
            "PUT", f"{self._path(ai_action_id, space_id)}/published",
            action="publish", resource="ai_action", resource_id=ai_action_id,
            headers={"X-Contentful-Version": str(version)},
        )

    async def unpublish(self, ai_action_id: str, space_id: Optional[str] = None):
        return await self._client.request(
            "DELETE", f"{self._path(ai_action_id, space_id)}/published",
            action="unpublish", resource="ai_action", resource_id=ai_action_id,
        )

    async def get_invocation(
        self,
        ai_action_id: str,
        invocation_id: str,
        space_id: Optional[str] = None,
        environment_id: Optional[str] = None,
    ):
        path = (
            f"{self._client.environment_path(space_id, environment_id)}"
            f"/ai/actions/{ai_action_id}/invocations/{invocation_id}"
        )
        return await self._client.request(
            "GET", path,
            action="get", resource="ai_action_invocation", resource_id=invocation_id,
        )
