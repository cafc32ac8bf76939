import asyncio
import io
from contextlib import asynccontextmanager

import anyio
import pytest

from contentful_mcp.adapters import streams as streams_module
from contentful_mcp.adapters.streams import StdioTransport, stdio_adapter
from contentful_mcp.core.server import ServerInstance
from helpers import make_context


@pytest.fixture
def fake_stdio(monkeypatch):
    """Replace mcp's stdio_server with in-memory streams; records what it was given."""
    opened = []

    @asynccontextmanager
    async def fake_stdio_server(stdin=None, stdout=None):
        read_writer, read_stream = anyio.create_memory_object_stream(10)
        write_stream, write_reader = anyio.create_memory_object_stream(10)
        opened.append({"stdin": stdin, "stdout": stdout})
        async with read_writer, read_stream, write_stream, write_reader:
            yield read_stream, write_stream

    monkeypatch.setattr(streams_module, "stdio_server", fake_stdio_server)
    return opened


def _empty_registry(registry, state):
    return None


@pytest.mark.asyncio
async def test_stdio_adapter_attaches_transport(fake_stdio):
    server = ServerInstance(make_context(), register_tools=_empty_registry)
    await stdio_adapter(server)

    (transport,) = server.transports
    assert isinstance(transport, StdioTransport)
    assert fake_stdio == [{"stdin": None, "stdout": None}]
    await server.stop()
    assert server.transports == frozenset()


@pytest.mark.asyncio
async def test_detach_closes_protocol_transport_but_not_caller_streams(fake_stdio):
    stdin, stdout = io.StringIO(), io.StringIO()
    server = ServerInstance(make_context(), register_tools=_empty_registry)

    detach = await stdio_adapter(server, stdin=stdin, stdout=stdout)
    (transport,) = server.transports
    assert isinstance(fake_stdio[0]["stdin"], anyio.AsyncFile)

    await detach()
    await asyncio.wait_for(server.wait_closed(), timeout=2)

    assert transport.closed is True
    assert server.transports == frozenset()
    assert stdin.closed is False
    assert stdout.closed is False
    await server.stop()


@pytest.mark.asyncio
async def test_dispose_is_a_noop():
    stdout = io.StringIO()
    transport = StdioTransport(stdout=stdout)
    await transport.dispose()
    assert transport.closed is False
    assert stdout.closed is False
