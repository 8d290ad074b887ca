"""Server settings, read from the environment (and ``.env``)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from dotenv import load_dotenv

from wire.faults import InvalidConfiguration

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(slots=True, frozen=True)
class Settings:
    """Knobs for the HTTP surface and the dispatcher limits.

    A limit of ``0`` disables it.
    """

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    max_body_size: int = 1024 * 1024  # bytes
    read_timeout: float = 30.0  # seconds
    response_timeout: float = 30.0  # seconds
    log_level: str = "INFO"

    def dispatcher_limits(self) -> dict[str, Any]:
        """Keyword arguments for ``RequestDispatcher``."""
        return {
            "max_body_size": self.max_body_size or None,
            "read_timeout": self.read_timeout or None,
            "response_timeout": self.response_timeout or None,
        }

    @classmethod
    def from_env(cls, env_file: str | os.PathLike[str] | None = None) -> "Settings":
        load_dotenv(env_file or os.path.join(Path.cwd(), ".env"))
        defaults = cls()
        return cls(
            host=os.getenv("RPC_HOST", defaults.host),
            port=_read("RPC_PORT", int, defaults.port),
            debug=_read("RPC_DEBUG", _parse_bool, defaults.debug),
            max_body_size=_read("RPC_MAX_BODY_SIZE", int, defaults.max_body_size),
            read_timeout=_read("RPC_READ_TIMEOUT", float, defaults.read_timeout),
            response_timeout=_read("RPC_RESPONSE_TIMEOUT", float, defaults.response_timeout),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        )


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _read(name: str, convert: Callable[[str], Any], default: Any) -> Any:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = convert(raw)
    except ValueError as exc:
        raise InvalidConfiguration(f"{name}={raw!r}: {exc}") from exc
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
        raise InvalidConfiguration(f"{name} must not be negative, got {raw!r}")
    return value
