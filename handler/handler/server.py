"""HTTP surface — Starlette ASGI app.

``POST /`` runs one JSON-RPC exchange through ``RequestDispatcher``;
``GET /`` answers with a plain greeting.

Run directly::

    python -m handler.server --port 8000 --debug
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Mapping
from dataclasses import replace

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route

from handler.config import Settings
from handler.dispatcher import RequestDispatcher
from handler.handlers import registry
from handler.registry import HandlerFn
from handler.transport import StarletteTransport

log = logging.getLogger(__name__)

GREETING = "Hello world!"


# ── Endpoints ────────────────────────────────────────────────────────


async def rpc_endpoint(request: Request) -> Response:
    """Handle a JSON-RPC POST to ``/``."""
    state = request.app.state
    transport = StarletteTransport(request)
    dispatcher = RequestDispatcher(
        transport,
        state.methods,
        state.settings.debug,
        **state.settings.dispatcher_limits(),
    )
    await dispatcher.handle()
    if transport.response is None:
        # Writing the response itself failed; the dispatcher logged it
        return Response(status_code=500)
    return transport.response


async def greeting_endpoint(request: Request) -> PlainTextResponse:
    return PlainTextResponse(GREETING)


# ── App factory ──────────────────────────────────────────────────────


def create_app(
    methods: Mapping[str, HandlerFn] | None = None,
    settings: Settings | None = None,
) -> Starlette:
    app = Starlette(
        debug=False,
        routes=[
            Route("/", rpc_endpoint, methods=["POST"]),
            Route("/", greeting_endpoint, methods=["GET"]),
        ],
    )
    app.state.methods = registry if methods is None else methods
    app.state.settings = settings or Settings()
    return app


app = create_app()


# ── Runnable entrypoint ──────────────────────────────────────────────


def main(argv: list[str] | None = None) -> None:
    import uvicorn

    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="JSON-RPC over HTTP demo server")
    parser.add_argument("--host", type=str, default=settings.host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="Bind port")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.debug,
        help="Expose handler exception text in error responses",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        help="Logging level",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    settings = replace(
        settings,
        host=args.host,
        port=args.port,
        debug=args.debug,
        log_level=args.log_level.upper(),
    )
    log.info("serving %d methods on %s:%d", len(registry), settings.host, settings.port)
    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
