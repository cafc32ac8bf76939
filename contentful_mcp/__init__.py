"""
Contentful MCP server

Multi-tenant MCP session runtime exposing the Contentful Management API as
tools over stdio, WebSocket and a JSON-RPC HTTP façade.
"""

__version__ = "1.0.0"

from .adapters import StdioTransport, WebSocketTransport, stdio_adapter, websocket_adapter
from .core.context import get_current_context, require_current_context, run_with_context
from .core.registry import ToolMetadata, ToolRegistry
from .core.server import ServerInstance, create_mcp_server
from .core.tenant import TenantContext, TenantCredentials
from .external.errors import ClassifiedError, classify
from .external.retry import RetryPolicy, with_retry

__all__ = [
    "__version__",
    "ClassifiedError",
    "RetryPolicy",
    "ServerInstance",
    "StdioTransport",
    "TenantContext",
    "TenantCredentials",
    "ToolMetadata",
    "ToolRegistry",
    "WebSocketTransport",
    "classify",
    "create_mcp_server",
    "get_current_context",
    "require_current_context",
    "run_with_context",
    "stdio_adapter",
    "websocket_adapter",
    "with_retry",
]
