from __future__ import annotations

from typing import Callable

import httpx
import pytest

from contentful_mcp.core.tenant import TenantContext
from contentful_mcp.external.client import ContentfulClient
from contentful_mcp.tools import base as tools_base
from helpers import FAST_POLICY, make_context


@pytest.fixture
def tenant_context() -> TenantContext:
    return make_context()


@pytest.fixture
def contentful_api(monkeypatch) -> Callable[[Callable[[httpx.Request], httpx.Response]], list]:
    """Route tool clients to an httpx.MockTransport handler; returns seen requests."""

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> list:
        seen: list[httpx.Request] = []

        def recording(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        monkeypatch.setattr(
            tools_base,
            "create_tool_client",
            lambda context: ContentfulClient(context, policy=FAST_POLICY, transport=httpx.MockTransport(recording)),
        )
        return seen

    return install
