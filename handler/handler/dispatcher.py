"""Request lifecycle for one JSON-RPC exchange.

* ``DispatchContext``   — per-request state handed to method handlers, which
  finish the exchange with ``respond`` or ``fail``.
* ``RequestDispatcher`` — accumulate → parse → dispatch → respond, strictly
  in that order, with every fault turned into exactly one response.

A handler may also return a non-``None`` value instead of calling
``respond``, or return ``None`` and finish the context later from another
task; the dispatcher then waits up to ``response_timeout`` seconds.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any

import anyio
from starlette.requests import ClientDisconnect

from handler.registry import HandlerFn
from handler.transport import Transport
from wire.faults import (
    InvalidConfiguration,
    MethodNotFound,
    ParseError,
    PayloadTooLarge,
    RequestTimeout,
    RpcFault,
    RpcRuntimeError,
    TransportError,
)
from wire.jsonrpc import Envelope, ResponseEnvelope, decode_envelope

log = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}
DEFAULT_RESPONSE_TIMEOUT = 30.0  # seconds


class DispatchContext:
    """State of one request; never shared between requests.

    ``respond`` and ``fail`` finalise the exchange.  Only the first call
    counts: later calls log a warning, write nothing and return ``False``.
    """

    def __init__(self, transport: Transport, debug: bool = False) -> None:
        self.transport = transport
        self.debug = debug
        self.envelope: Envelope | None = None
        self.id: Any = None
        self.has_id = False
        self.responded = False
        self._finished: anyio.Event | None = None

    @property
    def is_notification(self) -> bool:
        return not self.has_id

    def bind(self, envelope: Envelope) -> None:
        self.envelope = envelope
        self.has_id = envelope.has_id
        if envelope.has_id:
            self.id = envelope.id

    # -- Public API ----------------------------------------------------

    def respond(self, result: Any) -> bool:
        """Send a success response.  Returns True if a body was written.

        A result that cannot be encoded as JSON is answered with a runtime
        error instead, whether ``respond`` runs inside the handler or later.
        """
        if self.responded:
            return self._finalize(200, ResponseEnvelope.success(self.id, result))
        try:
            body = ResponseEnvelope.success(self.id, result).to_json() if self.has_id else ""
        except (TypeError, ValueError) as exc:
            log.exception("cannot encode result for id=%r", self.id)
            return self.fail(RpcRuntimeError.from_exception(exc, self.debug).message)
        return self._write(200, body)

    def fail(self, error: Any, status: int = 500) -> bool:
        """Send an error response.  Returns True if a body was written."""
        message = RpcRuntimeError.message if error is None else str(error)
        return self._finalize(status, ResponseEnvelope.fail(self.id, message))

    async def wait(self) -> None:
        """Block until ``respond`` or ``fail`` has been called."""
        if self.responded:
            return
        if self._finished is None:
            self._finished = anyio.Event()
        await self._finished.wait()

    # -- Internals -----------------------------------------------------

    def _finalize(self, status: int, response: ResponseEnvelope) -> bool:
        if self.responded:
            log.warning(
                "response for id=%r already sent; dropping %s",
                self.id,
                "result" if response.ok else f"error {response.error!r}",
            )
            return False
        return self._write(status, response.to_json() if self.has_id else "")

    def _write(self, status: int, body: str) -> bool:
        self.responded = True
        try:
            self.transport.write_head(status, JSON_HEADERS if body else None)
            self.transport.end(body)
        except Exception:
            log.exception("transport failed while sending response for id=%r", self.id)
            return False
        finally:
            if self._finished is not None:
                self._finished.set()
        return bool(body)


class RequestDispatcher:
    """Turns one inbound body into at most one outbound response.

    Parameters
    ----------
    transport : Transport
        The exchange to read from and write to.
    methods : Mapping
        Method name → handler.  Shared read-only across requests.
    debug : bool
        Put handler exception text on the wire instead of ``"Runtime error"``.
    max_body_size : int | None
        Reject bodies larger than this many UTF-8 bytes.
    read_timeout : float | None
        Seconds allowed for receiving the whole body.
    response_timeout : float | None
        Seconds to wait for a handler that finishes the context later.
    """

    def __init__(
        self,
        transport: Transport,
        methods: Mapping[str, HandlerFn],
        debug: bool = False,
        *,
        max_body_size: int | None = None,
        read_timeout: float | None = None,
        response_timeout: float | None = DEFAULT_RESPONSE_TIMEOUT,
    ) -> None:
        if transport is None or not isinstance(transport, Transport):
            raise InvalidConfiguration("transport must provide receive(), write_head() and end()")
        if not isinstance(methods, Mapping):
            raise InvalidConfiguration(
                f"methods must be a mapping of name → handler, got {type(methods).__name__}"
            )
        for name, value in (
            ("max_body_size", max_body_size),
            ("read_timeout", read_timeout),
            ("response_timeout", response_timeout),
        ):
            if value is not None and value <= 0:
                raise InvalidConfiguration(f"{name} must be positive, got {value!r}")

        self.methods = methods
        self.max_body_size = max_body_size
        self.read_timeout = read_timeout
        self.response_timeout = response_timeout
        self.context = DispatchContext(transport, debug=bool(debug))

    async def handle(self) -> DispatchContext:
        """Run the whole lifecycle.  Protocol and handler faults never escape."""
        ctx = self.context
        try:
            body = await self._accumulate()
            envelope = decode_envelope(body)
            ctx.bind(envelope)
            log.info("rpc ← %s(id=%r)", envelope.method, envelope.id)
            handler = self._lookup(envelope.method)
            await self._invoke(handler, envelope)
        except RpcFault as fault:
            log.info("rpc fault [%d] %s (id=%r)", fault.code, fault.message, ctx.id)
            ctx.fail(fault.message, fault.status)
        return ctx

    # -- Lifecycle steps -----------------------------------------------

    async def _accumulate(self) -> str:
        chunks: list[str] = []
        size = 0
        try:
            with anyio.fail_after(self.read_timeout):
                async for chunk in self.context.transport.receive():
                    if self.max_body_size is not None:
                        size += len(chunk.encode("utf-8"))
                        if size > self.max_body_size:
                            raise PayloadTooLarge()
                    chunks.append(chunk)
        except TimeoutError as exc:
            raise RequestTimeout() from exc
        except UnicodeDecodeError as exc:
            raise ParseError() from exc
        except RpcFault:
            raise
        except ClientDisconnect as exc:
            log.info("client disconnected before the body was read")
            raise TransportError() from exc
        except Exception as exc:
            log.exception("failed to read request body")
            raise TransportError() from exc
        return "".join(chunks)

    def _lookup(self, method: str | None) -> HandlerFn:
        if method is None or method not in self.methods:
            raise MethodNotFound()
        fn = self.methods[method]
        if not callable(fn):
            raise MethodNotFound()
        return fn

    async def _invoke(self, handler: HandlerFn, envelope: Envelope) -> None:
        ctx = self.context
        try:
            result = handler(ctx, envelope.params)
            if inspect.isawaitable(result):
                result = await result
            if not ctx.responded and result is not None:
                ctx.respond(result)
        except Exception as exc:
            log.exception("handler error for %s", envelope.method)
            raise RpcRuntimeError.from_exception(exc, ctx.debug) from exc

        if ctx.responded:
            return
        with anyio.move_on_after(self.response_timeout):
            await ctx.wait()
        if not ctx.responded:
            log.warning("handler for %s never responded", envelope.method)
            raise RequestTimeout()


async def handle_request(
    transport: Transport,
    methods: Mapping[str, HandlerFn],
    debug: bool = False,
    **limits: Any,
) -> DispatchContext:
    """Build a ``RequestDispatcher`` and run it to completion."""
    return await RequestDispatcher(transport, methods, debug, **limits).handle()
