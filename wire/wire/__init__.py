"""wire — JSON-RPC wire-format models and fault taxonomy."""

from wire.faults import (
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    InvalidConfiguration,
    MethodNotFound,
    ParseError,
    PayloadTooLarge,
    RequestTimeout,
    RpcFault,
    RpcRuntimeError,
    TransportError,
)
from wire.jsonrpc import (
    JSONRPC_1,
    JSONRPC_2,
    Envelope,
    ResponseEnvelope,
    decode_envelope,
)

__all__ = [
    "Envelope",
    "ResponseEnvelope",
    "decode_envelope",
    "JSONRPC_1",
    "JSONRPC_2",
    "InvalidConfiguration",
    "RpcFault",
    "ParseError",
    "MethodNotFound",
    "RpcRuntimeError",
    "PayloadTooLarge",
    "RequestTimeout",
    "TransportError",
    "PARSE_ERROR",
    "METHOD_NOT_FOUND",
    "INTERNAL_ERROR",
]
