"""Transport seam between the dispatcher and one HTTP exchange.

* ``Transport``          — what the dispatcher needs: text in, status + body out.
* ``StarletteTransport`` — adapter over a single Starlette ``Request``.
"""

from __future__ import annotations

import codecs
from collections.abc import AsyncIterator, Mapping
from typing import Protocol, runtime_checkable

from starlette.requests import Request
from starlette.responses import Response


@runtime_checkable
class Transport(Protocol):
    def receive(self) -> AsyncIterator[str]:
        """Yield decoded text chunks until end-of-stream."""
        ...

    def write_head(self, status: int, headers: Mapping[str, str] | None = None) -> None:
        ...

    def end(self, body: str = "") -> None:
        """Write the final body and close the exchange."""
        ...


class StarletteTransport:
    """Collects the dispatcher's output into a Starlette ``Response``.

    The endpoint returns ``transport.response`` once the dispatcher is done.
    """

    def __init__(self, request: Request, encoding: str = "utf-8") -> None:
        self.request = request
        self.encoding = encoding
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self.response: Response | None = None

    @property
    def closed(self) -> bool:
        return self.response is not None

    async def receive(self) -> AsyncIterator[str]:
        # Multi-byte characters may straddle chunk boundaries
        decoder = codecs.getincrementaldecoder(self.encoding)()
        async for chunk in self.request.stream():
            text = decoder.decode(chunk)
            if text:
                yield text
        tail = decoder.decode(b"", final=True)
        if tail:
            yield tail

    def write_head(self, status: int, headers: Mapping[str, str] | None = None) -> None:
        if self.closed:
            raise RuntimeError("transport already closed")
        self.status_code = status
        self.headers.update(headers or {})

    def end(self, body: str = "") -> None:
        if self.closed:
            raise RuntimeError("transport already closed")
        self.response = Response(
            content=body.encode(self.encoding),
            status_code=self.status_code,
            headers=self.headers,
        )
