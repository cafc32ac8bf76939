from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from contentful_mcp.adapters.base import StreamTransport
from contentful_mcp.core.tenant import TenantContext
from contentful_mcp.external.retry import RetryPolicy


FAST_POLICY = RetryPolicy(max_attempts=3, base_delay_ms=1, max_delay_ms=2, jitter_ratio=0)


def make_context(
    space_id: str = "space-1",
    environment_id: str = "master",
    token: str = "CFPAT-test-token-0001",
) -> TenantContext:
    return TenantContext(access_token=token, space_id=space_id, environment_id=environment_id)


class MemoryTransport(StreamTransport):
    """Transport over a pre-built stream pair (see mcp.shared.memory)."""

    def __init__(self, read_stream: Any, write_stream: Any):
        super().__init__()
        self._pair = (read_stream, write_stream)
        self.dispose_calls = 0

    @asynccontextmanager
    async def _streams(self):
        yield self._pair

    async def dispose(self) -> None:
        self.dispose_calls += 1
