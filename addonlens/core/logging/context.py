from __future__ import annotations
import contextvars

# Per-resolution log context (projectRoot, addonRoot, kind, ...)
_logContextVar: contextvars.ContextVar[dict[str, object] | None] = contextvars.ContextVar("addonlens.logctx", default=None)

def setLogContext(**kvs):
    """Set or update per-log context values. None values are ignored."""
    current = dict(_logContextVar.get() or {})
    for key, value in kvs.items():
        if value is not None:
            current[key] = value
    _logContextVar.set(current)

def clearLogContext():
    """Clear context once a resolution pass is done."""
    _logContextVar.set(None)

def getLogContext():
    """Return current context dict or None."""
    return _logContextVar.get()
