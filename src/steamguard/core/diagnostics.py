"""
Internal diagnostics for non-fatal conditions.

Components call ``warn``/``debug`` with a component name, a short message and
structured fields. Output is one JSON line per record on stderr and is only
produced when ``core.internal_logging_enabled`` is set. These helpers never
raise.
"""

from __future__ import annotations

import sys
import time
from typing import Any, Callable

import orjson

# Cached at first use; tests reset this to None for isolation.
_internal_logging_enabled: bool | None = None

Writer = Callable[[bytes], None]


def _default_writer(line: bytes) -> None:
    buf = sys.stderr.buffer if hasattr(sys.stderr, "buffer") else None
    if buf is not None:
        buf.write(line + b"\n")
        buf.flush()
    else:  # pragma: no cover - text-only stderr replacements
        sys.stderr.write(line.decode("utf-8") + "\n")


_writer: Writer = _default_writer


def is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(Settings().core.internal_logging_enabled)
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def set_writer(writer: Writer | None) -> None:
    """Route diagnostics elsewhere; ``None`` restores stderr."""
    global _writer
    _writer = writer or _default_writer


def _emit(level: str, component: str, message: str, fields: dict[str, Any]) -> None:
    if not is_enabled():
        return
    record = {
        "timestamp": time.time(),
        "level": level,
        "component": component,
        "message": message,
        **fields,
    }
    try:
        _writer(orjson.dumps(record, default=str))
    except Exception:
        return


def warn(component: str, message: str, **fields: Any) -> None:
    _emit("WARN", component, message, fields)


def debug(component: str, message: str, **fields: Any) -> None:
    _emit("DEBUG", component, message, fields)
