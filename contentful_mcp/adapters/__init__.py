"""
Transport adapters
"""

from .base import StreamTransport
from .streams import StdioTransport, stdio_adapter
from .websocket import WebSocketTransport, websocket_adapter

__all__ = [
    "StreamTransport",
    "StdioTransport",
    "stdio_adapter",
    "WebSocketTransport",
    "websocket_adapter",
]
