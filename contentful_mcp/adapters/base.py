from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Tuple

import anyio


class StreamTransport:
    """Protocol-level transport handing the MCP session a stream pair.

    Subclasses provide ``_streams()``; ``close()`` cancels the session that
    is using the pair, whichever task it runs in.
    """

    def __init__(self) -> None:
        self._cancel_scope: Optional[anyio.CancelScope] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _streams(self):
        raise NotImplementedError

    @asynccontextmanager
    async def open(self) -> AsyncIterator[Tuple[Any, Any]]:
        if self._closed:
            raise RuntimeError(f"{type(self).__name__} is closed")
        with anyio.CancelScope() as scope:
            self._cancel_scope = scope
            async with self._streams() as streams:
                yield streams

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._cancel_scope is not None:
            self._cancel_scope.cancel()
