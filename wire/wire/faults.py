"""Fault taxonomy for the request lifecycle.

Everything except ``InvalidConfiguration`` is an ``RpcFault`` and is turned
into a single error response by the dispatcher.  The wire only ever carries
``message``; ``code`` exists for log lines.
"""

from __future__ import annotations

# ── Standard error codes (JSON-RPC 2.0 §5.1) ────────────────────────
PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603

# Implementation-defined server errors (-32000 to -32099)
PAYLOAD_TOO_LARGE = -32001
REQUEST_TIMEOUT = -32002
TRANSPORT_FAILED = -32003


class InvalidConfiguration(Exception):
    """Caller programming error, raised before any I/O happens."""


class RpcFault(Exception):
    """Base class for faults that become an error response."""

    code: int = INTERNAL_ERROR
    message: str = "Runtime error"
    status: int = 500

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ParseError(RpcFault):
    code = PARSE_ERROR
    message = "Parse error"


class MethodNotFound(RpcFault):
    code = METHOD_NOT_FOUND
    message = "Invalid request method"


class RpcRuntimeError(RpcFault):
    """A handler raised while being dispatched.

    Outside debug mode the original exception text never reaches the wire.
    """

    code = INTERNAL_ERROR
    message = "Runtime error"

    @classmethod
    def from_exception(cls, exc: BaseException, debug: bool) -> "RpcRuntimeError":
        if debug:
            return cls(str(exc) or type(exc).__name__)
        return cls()


class PayloadTooLarge(RpcFault):
    code = PAYLOAD_TOO_LARGE
    message = "Payload too large"


class RequestTimeout(RpcFault):
    code = REQUEST_TIMEOUT
    message = "Request timeout"


class TransportError(RpcFault):
    """The request body could not be read from the transport."""

    code = TRANSPORT_FAILED
    message = "Transport error"
