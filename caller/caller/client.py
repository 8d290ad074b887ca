"""Caller — thin JSON-RPC consumer for the handler's HTTP surface.

* ``call(method, params)``   → result, or ``RpcError``
* ``notify(method, params)`` → fire-and-forget, no response body expected

Uses ``httpx.AsyncClient`` with connection pooling.
**Never** imports from ``handler/``.

Run directly for a quick demo::

    python -m caller.client
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from wire.jsonrpc import JSONRPC_2, Envelope, ResponseEnvelope

log = logging.getLogger(__name__)


class RpcError(Exception):
    """Raised when the handler answers with an error."""

    def __init__(self, message: str, status: int, id: Any = None) -> None:
        self.message = message
        self.status = status
        self.id = id
        super().__init__(f"[{status}] {message}")


class RpcClient:
    """Thin async client that talks JSON-RPC over HTTP.

    Parameters
    ----------
    base_url : str
        Handler server origin, e.g. ``http://127.0.0.1:8000``.
    timeout : float
        Default request timeout in seconds.
    max_retries : int
        Max connection-level retries.
    path : str
        Endpoint path the envelopes are POSTed to.
    version : str
        ``"2.0"`` or ``"1.0"``; 1.0 envelopes omit the ``jsonrpc`` field.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        timeout: float = 30.0,
        max_retries: int = 3,
        path: str = "/",
        version: str = JSONRPC_2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.path = path
        self.version = version
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    # -- Lifecycle -----------------------------------------------------

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # -- Internal helpers ----------------------------------------------

    def _get_retrier(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=0.5, max=10),
            retry=retry_if_exception_type((httpx.NetworkError, httpx.TimeoutException)),
            reraise=True,
        )

    async def _post(self, envelope: Envelope) -> httpx.Response:
        payload = envelope.to_dict()
        async for attempt in self._get_retrier():
            with attempt:
                resp = await self._client.post(self.path, json=payload)
        return resp

    # -- RPC -----------------------------------------------------------

    async def call(self, method: str, params: Any = None, id: Any = None) -> Any:
        """Send a request and return its result.

        Raises ``RpcError`` if the handler answers with an error.
        """
        req_id = uuid.uuid4().hex if id is None else id
        envelope = Envelope(
            method=method, params=params, id=req_id, has_id=True, jsonrpc=self.version
        )
        log.debug("rpc → %s(id=%s)", method, req_id)

        resp = await self._post(envelope)
        if not resp.content:
            if resp.is_error:
                raise RpcError("empty error response", resp.status_code, req_id)
            return None

        try:
            data = ResponseEnvelope.from_dict(resp.json())
        except ValueError as exc:
            raise RpcError(f"malformed response: {exc}", resp.status_code, req_id) from exc
        if data.error is not None:
            raise RpcError(data.error, resp.status_code, data.id)
        return data.result

    async def notify(self, method: str, params: Any = None) -> None:
        """Send a notification; the handler never answers with a body."""
        envelope = Envelope(method=method, params=params, jsonrpc=self.version)
        log.debug("rpc → %s(notification)", method)

        resp = await self._post(envelope)
        if resp.is_error:
            raise RpcError("notification failed", resp.status_code)


# ── Demo entrypoint ──────────────────────────────────────────────────


async def _demo() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    async with RpcClient() as client:
        print("── insert ──")
        result = await client.call("insert", ["value", "value"])
        print(f"  result: {result}")

        try:
            await client.call("insert", ["value", "other"])
        except RpcError as exc:
            print(f"  error: {exc.message}")

        print("── add ──")
        result = await client.call("add", [17, 25])
        print(f"  result: {result}")

        print("── notify ──")
        await client.notify("echo", ["nobody listens"])
        print("── done ──")


if __name__ == "__main__":
    import anyio

    anyio.run(_demo)
