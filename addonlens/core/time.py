from __future__ import annotations
import time

__all__ = ["nowMonotonicMs"]



def nowMonotonicMs() -> int:
    """
    Returns the current monotonic time in milliseconds.

    Used for cache expiry, so wall-clock jumps never revive or kill entries.
    """
    return int(time.monotonic() * 1000)
