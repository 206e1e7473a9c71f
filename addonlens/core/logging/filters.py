# addonlens/core/logging/filters.py
from __future__ import annotations
import logging
import re
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field

__all__ = ["RecurringSuppressFilter", "collapsePaths"]

MAX_KEY_LEN = 512

# Quoted file system paths inside a message: '/a/b/package.json', "C:\x\y"
_QUOTED_PATH_RE = re.compile(r"""(['"])(?:[A-Za-z]:)?[\\/][^'"]*\1""")

SuppressKey = tuple[str, int, str]



def collapsePaths(record: logging.LogRecord) -> str:
    """
    Message text with quoted paths replaced by <path>, whitespace squashed.

    "Ignoring manifest: Cannot parse '/w/node_modules/a/package.json'" and the
    same warning for node_modules/b share one key.
    """
    try:
        msg = record.getMessage()
    except (TypeError, ValueError):
        msg = str(record.msg)
    norm = " ".join(_QUOTED_PATH_RE.sub("<path>", msg).split())
    if len(norm) > MAX_KEY_LEN:
        norm = norm[:MAX_KEY_LEN] + "..."
    return norm



@dataclass
class _Window:
    stamps: deque[float] = field(default_factory=deque)
    suppressed: int = 0

    def slide(self, now: float, windowSeconds: int) -> None:
        limit = now - windowSeconds
        while self.stamps and self.stamps[0] < limit:
            self.stamps.popleft()



class RecurringSuppressFilter(logging.Filter):
    """
    Lets at most `maxPerWindow` records with the same key through per sliding
    `windowSeconds`. The first record passed after a suppression streak is
    followed by one summary with the dropped count.

    Walking a large node_modules tree that holds many broken manifests would
    otherwise print one warning per package, per project that depends on it.

    Key = (logger name, levelno, normalize(record)); the default normalizer
    collapses quoted paths, so floods of one warning across packages count
    together.
    """
    def __init__(
            self,
            *,
            windowSeconds: int = 60,
            maxPerWindow: int = 5,
            summaryLevel: int = logging.INFO,
            normalize: Callable[[logging.LogRecord], str] = collapsePaths,
            clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__()
        self.windowSeconds = max(1, int(windowSeconds))
        self.maxPerWindow = max(1, int(maxPerWindow))
        self.summaryLevel = int(summaryLevel)
        self.normalize = normalize
        self._clock = clock
        self._windows: dict[SuppressKey, _Window] = {}
        self._lock = threading.Lock()

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "_noRecurringSuppress", False):
            return True

        key: SuppressKey = (record.name, record.levelno, self.normalize(record))
        now = self._clock()

        with self._lock:
            window = self._windows.setdefault(key, _Window())
            window.slide(now, self.windowSeconds)
            window.stamps.append(now)
            if len(window.stamps) > self.maxPerWindow:
                window.suppressed += 1
                return False
            dropped, window.suppressed = window.suppressed, 0

        # Outside the lock: the summary passes through this filter again
        if dropped:
            logging.getLogger(key[0]).log(
                self.summaryLevel,
                "Suppressed %d repeated logs: %s",
                dropped,
                key[2],
                extra={"_noRecurringSuppress": True},
            )
        return True
