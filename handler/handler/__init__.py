"""handler — JSON-RPC over HTTP request handling."""

from handler.dispatcher import DispatchContext, RequestDispatcher, handle_request
from handler.registry import MethodRegistry
from handler.transport import StarletteTransport, Transport

__all__ = [
    "RequestDispatcher",
    "DispatchContext",
    "handle_request",
    "MethodRegistry",
    "Transport",
    "StarletteTransport",
]
