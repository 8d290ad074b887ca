"""Demo RPC methods.

All methods are registered on the module-level ``registry`` which the
server imports.  They show both handler styles: finishing the context
explicitly, and returning a result.
"""

from __future__ import annotations

import logging
from numbers import Number

from handler.dispatcher import DispatchContext
from handler.registry import MethodRegistry

log = logging.getLogger(__name__)

registry = MethodRegistry()


@registry.method("insert")
def insert(rpc: DispatchContext, params: list) -> None:
    """Succeed when the first two params are equal."""
    if params[0] != params[1]:
        rpc.fail("Params doesn't match!")
    else:
        rpc.respond("Params are OK!")


@registry.method("echo")
async def echo(rpc: DispatchContext, params):
    """Return params unchanged."""
    return params


@registry.method("add")
def add(rpc: DispatchContext, params: list) -> None:
    """Add positional numbers."""
    if not all(isinstance(p, Number) and not isinstance(p, bool) for p in params or []):
        rpc.fail("add expects numeric params")
        return
    rpc.respond(sum(params or []))
