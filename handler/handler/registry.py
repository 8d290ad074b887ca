"""Method registry.

Handlers register themselves via the ``@registry.method`` decorator.
The registry maps JSON-RPC method names to callables — nothing more.  It is
a read-only ``Mapping`` as far as the dispatcher is concerned, so a plain
``dict`` works just as well.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Union

from wire.faults import InvalidConfiguration

if TYPE_CHECKING:
    from handler.dispatcher import DispatchContext

log = logging.getLogger(__name__)

# Type alias for an RPC handler: (context, params) -> optional result
HandlerFn = Callable[["DispatchContext", Any], Union[Any, Awaitable[Any]]]


class MethodRegistry(Mapping[str, HandlerFn]):
    """A simple method → handler mapping.

    Usage::

        registry = MethodRegistry()

        @registry.method("insert")
        def insert(rpc, params):
            if params[0] != params[1]:
                rpc.fail("Params doesn't match!")
            else:
                rpc.respond("Params are OK!")
    """

    def __init__(self, methods: Mapping[str, HandlerFn] | None = None) -> None:
        self._handlers: dict[str, HandlerFn] = {}
        for name, fn in (methods or {}).items():
            self.add(name, fn)

    # -- Registration --------------------------------------------------
    def add(self, name: str, fn: HandlerFn) -> HandlerFn:
        if not isinstance(name, str) or not name:
            raise InvalidConfiguration(f"method name must be a non-empty string, got {name!r}")
        if not callable(fn):
            raise InvalidConfiguration(f"handler for {name!r} is not callable")
        if name in self._handlers:
            log.warning("overwriting handler for %r", name)
        self._handlers[name] = fn
        log.debug("registered handler %r → %s", name, getattr(fn, "__qualname__", fn))
        return fn

    def method(self, name: str) -> Callable[[HandlerFn], HandlerFn]:
        """Decorator that registers *fn* under *name*."""

        def decorator(fn: HandlerFn) -> HandlerFn:
            return self.add(name, fn)

        return decorator

    # -- Mapping protocol ----------------------------------------------
    def __getitem__(self, name: str) -> HandlerFn:
        return self._handlers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    # -- Introspection -------------------------------------------------
    @property
    def methods(self) -> list[str]:
        return list(self._handlers.keys())
