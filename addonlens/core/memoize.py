# addonlens/core/memoize.py
from __future__ import annotations
import functools
import inspect
import json
import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from addonlens.core.time import nowMonotonicMs

logger = logging.getLogger(__name__)

__all__ = ["CacheEntry", "CacheStats", "MemoizedFunction", "memoize", "cacheKeyFor"]

T = TypeVar("T")



@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    value: T
    # Absolute monotonic deadline in milliseconds
    expiresAtMs: int

    def isLive(self, nowMs: int) -> bool:
        return nowMs < self.expiresAtMs



@dataclass(frozen=True, slots=True)
class CacheStats:
    hits: int
    misses: int
    size: int



def _keyPart(value: Any) -> Any:
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    if isinstance(value, (set, frozenset)):
        return sorted(_keyPart(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_keyPart(item) for item in value]
    return value



def cacheKeyFor(args: tuple[Any, ...], keyArity: int) -> str:
    """
    Stable string key built from the first `keyArity` argument values.

    Positions the caller did not pass count as null, so f("a") and f("a", None)
    share an entry. Anything json cannot encode falls back to str().
    """
    leading = list(args[:keyArity])
    leading.extend([None] * (keyArity - len(leading)))
    return json.dumps([_keyPart(arg) for arg in leading], sort_keys=True, default=str)



def _keyParameterNames(fn: Callable[..., Any], keyArity: int) -> tuple[str, ...] | None:
    """
    Names of the first `keyArity` positional parameters of `fn`, so keyword
    calls land on the same key as positional ones. None when the leading
    positions are a *args pack or the signature cannot be read; the key is
    then taken from positional arguments only.
    """
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return None
    names: list[str] = []
    for param in params:
        if len(names) == keyArity:
            break
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            names.append(param.name)
    return tuple(names)



class MemoizedFunction(Generic[T]):
    """
    Time-boxed cache around a pure function.

    Only the table is guarded by the lock. The wrapped function runs outside of
    it, so two threads missing on the same key both compute; the later write
    replaces an equal value.
    """

    def __init__(
        self,
        fn: Callable[..., T],
        *,
        keyArity: int,
        ttlMs: int,
        clock: Callable[[], int] = nowMonotonicMs,
    ) -> None:
        if keyArity < 0:
            raise ValueError(f"keyArity must be >= 0, got {keyArity}")
        if ttlMs <= 0:
            raise ValueError(f"ttlMs must be > 0, got {ttlMs}")
        self._fn = fn
        self.keyArity = int(keyArity)
        self._keyParams = _keyParameterNames(fn, self.keyArity)
        self._signature = inspect.signature(fn) if self._keyParams is not None else None
        self.ttlMs = int(ttlMs)
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        functools.update_wrapper(self, fn)

    def _keyFor(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
        if self._signature is None or self._keyParams is None:
            return cacheKeyFor(args, self.keyArity)
        # Raises TypeError for arguments fn would reject anyway
        bound = self._signature.bind_partial(*args, **kwargs)
        leading = tuple(bound.arguments.get(name) for name in self._keyParams)
        return cacheKeyFor(leading, self.keyArity)

    def __call__(self, *args: Any, **kwargs: Any) -> T:
        key = self._keyFor(args, kwargs)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.isLive(now):
                self._hits += 1
                return entry.value
            if entry is not None:
                # Expired; drop it now rather than waiting for the overwrite
                del self._entries[key]
            self._misses += 1

        value = self._fn(*args, **kwargs)

        with self._lock:
            self._entries[key] = CacheEntry(value=value, expiresAtMs=self._clock() + self.ttlMs)
        return value

    # ----- Maintenance -----

    def delete(self, *args: Any, **kwargs: Any) -> bool:
        """Drops the entry for these leading arguments. Returns True if one existed."""
        key = self._keyFor(args, kwargs)
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))

    def __repr__(self) -> str:
        name = getattr(self._fn, "__qualname__", repr(self._fn))
        return f"MemoizedFunction({name}, keyArity={self.keyArity}, ttlMs={self.ttlMs})"



def memoize(
    fn: Callable[..., T],
    *,
    keyArity: int,
    ttlMs: int,
    clock: Callable[[], int] = nowMonotonicMs,
) -> MemoizedFunction[T]:
    """
    Wraps `fn` in a MemoizedFunction.

    Meant to be applied where resolvers are composed (see AddonIndex), so the
    undecorated function stays available for tests and recursive calls.
    """
    logger.debug("memoize %s keyArity=%d ttlMs=%d", getattr(fn, "__qualname__", fn), keyArity, ttlMs)
    return MemoizedFunction(fn, keyArity=keyArity, ttlMs=ttlMs, clock=clock)
