"""stdio adapter: serve a ServerInstance over caller-owned text streams."""

from __future__ import annotations

from typing import IO, Any, Awaitable, Callable, Optional

import anyio
from mcp.server.stdio import stdio_server

from .base import StreamTransport


TransportDetach = Callable[[], Awaitable[None]]


def _as_async_file(stream: Any) -> Optional[anyio.AsyncFile]:
    if stream is None or isinstance(stream, anyio.AsyncFile):
        return stream
    return anyio.wrap_file(stream)


class StdioTransport(StreamTransport):
    """Line-delimited JSON-RPC over stdin/stdout (or caller-supplied streams).

    The underlying streams belong to the caller; closing this transport
    ends the protocol session but never closes them.
    """

    def __init__(self, stdin: Optional[IO[str]] = None, stdout: Optional[IO[str]] = None):
        super().__init__()
        self._stdin = _as_async_file(stdin)
        self._stdout = _as_async_file(stdout)

    def _streams(self):
        return stdio_server(stdin=self._stdin, stdout=self._stdout)

    async def dispose(self) -> None:
        """No-op: process streams are owned by the caller."""


async def stdio_adapter(
    server: Any,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
) -> TransportDetach:
    transport = StdioTransport(stdin=stdin, stdout=stdout)
    await server.connect(transport)

    async def detach() -> None:
        await transport.close()

    return detach
