# addonlens/core/logging/formatters.py
from __future__ import annotations

import json
import logging
from typing import Any

from addonlens.core.errors import AddonIndexError
from .context import getLogContext

__all__ = ["JsonFormatter", "DevFormatter"]

# Context keys shown on the console, outermost first
CONSOLE_CONTEXT_KEYS: tuple[str, ...] = ("projectRoot", "addonRoot", "kind")



def _exceptionPayload(formatter: logging.Formatter, record: logging.LogRecord) -> dict[str, Any] | None:
    if not record.exc_info:
        return None
    _excType, excValue, _tb = record.exc_info
    payload: dict[str, Any] = {
        "type": type(excValue).__name__ if excValue is not None else "Error",
        "message": str(excValue),
        "stack": formatter.formatException(record.exc_info),
    }
    # Manifest and layout errors carry the offending file
    if isinstance(excValue, AddonIndexError) and excValue.path:
        payload["path"] = excValue.path
    return payload



class JsonFormatter(logging.Formatter):
    """One JSON object per line, for the rotating log file."""
    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "ts": int(record.created * 1000),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
            "ctx": getLogContext() or {},
            "thread": record.threadName,
        }
        exc = _exceptionPayload(self, record)
        if exc is not None:
            base["exc"] = exc
        return json.dumps(base, ensure_ascii=False, separators=(",", ":"), default=str)



class DevFormatter(logging.Formatter):
    """
    Console lines as `LEVEL: [logger] message [projectRoot | addonRoot | kind]`,
    with whatever part of the resolution context is set.
    """
    def format(self, record: logging.LogRecord) -> str:
        ctx = getLogContext() or {}
        shown = [str(ctx[key]) for key in CONSOLE_CONTEXT_KEYS if ctx.get(key)]
        ctxStr = f" [{' | '.join(shown)}]" if shown else ""

        msg = record.getMessage()
        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)
        if record.stack_info:
            msg += "\n" + self.formatStack(record.stack_info)
        return f"{record.levelname}: [{record.name}] {msg}{ctxStr}"
