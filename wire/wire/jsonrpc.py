"""JSON-RPC 1.0 / 2.0 wire-format models.

Pure data — no I/O, no business logic.  The handler decodes requests with
these and the caller encodes them.

Responses always carry exactly ``result``, ``error`` and ``id``; ``error`` is
a plain message string, not a JSON-RPC 2.0 error object.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from wire.faults import ParseError

JSONRPC_1 = "1.0"
JSONRPC_2 = "2.0"

# Compact separators, same as Starlette's JSONResponse
_SEPARATORS = (",", ":")


# ── Models ───────────────────────────────────────────────────────────
@dataclass(slots=True, frozen=True)
class Envelope:
    """Decoded JSON-RPC request.

    ``has_id`` records whether the ``id`` key was present at all.  A request
    without it is a notification and never gets a response body; an explicit
    ``"id": null`` still does.
    """

    method: str | None
    params: Any = None
    id: Any = None
    has_id: bool = False
    jsonrpc: str = JSONRPC_2

    @property
    def is_notification(self) -> bool:
        return not self.has_id

    # -- Convenience ---------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.jsonrpc != JSONRPC_1:
            d["jsonrpc"] = self.jsonrpc
        d["method"] = self.method
        if self.params is not None:
            d["params"] = self.params
        if self.has_id:
            d["id"] = self.id
        return d

    @classmethod
    def from_dict(cls, raw: Any) -> "Envelope":
        """Build an envelope from decoded JSON — raises ``ParseError`` on bad input.

        A missing or non-string ``method`` is *not* an error here; the
        dispatcher reports it against the recovered id.
        """
        if not isinstance(raw, dict):
            raise ParseError()
        method = raw.get("method")
        if not isinstance(method, str):
            method = None
        version = raw.get("jsonrpc")
        if not isinstance(version, str):
            version = JSONRPC_1
        return cls(
            method=method,
            params=raw.get("params"),
            id=raw.get("id"),
            has_id="id" in raw,
            jsonrpc=version,
        )


def decode_envelope(text: str) -> Envelope:
    """Parse a complete request body into an ``Envelope``."""
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise ParseError() from exc
    return Envelope.from_dict(raw)


@dataclass(slots=True, frozen=True)
class ResponseEnvelope:
    """Outbound response; ``result`` and ``error`` are mutually exclusive."""

    id: Any
    result: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {"result": self.result, "error": self.error, "id": self.id}

    def to_json(self) -> str:
        """Serialise compactly; raises ``TypeError`` for non-JSON results."""
        return json.dumps(self.to_dict(), separators=_SEPARATORS, ensure_ascii=False)

    # -- Factories -----------------------------------------------------
    @classmethod
    def success(cls, req_id: Any, result: Any) -> "ResponseEnvelope":
        return cls(id=req_id, result=result)

    @classmethod
    def fail(cls, req_id: Any, message: str) -> "ResponseEnvelope":
        return cls(id=req_id, error=message)

    @classmethod
    def from_dict(cls, raw: Any) -> "ResponseEnvelope":
        if not isinstance(raw, dict) or "id" not in raw:
            raise ValueError("response must be a JSON object with an 'id'")
        error = raw.get("error")
        return cls(
            id=raw["id"],
            result=None if error is not None else raw.get("result"),
            error=None if error is None else str(error),
        )
