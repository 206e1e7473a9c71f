# addonlens/scan/walk.py
from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Iterable
from os import PathLike

logger = logging.getLogger(__name__)

__all__ = ["SCRIPT_EXTENSIONS", "safeWalk"]


SCRIPT_EXTENSIONS: tuple[str, ...] = (".js", ".ts")



def _isIgnored(name: str, ignore: Iterable[str]) -> bool:
    # Hidden entries are never listed
    if name.startswith("."):
        return True
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in ignore)



def safeWalk(
    entry: str | PathLike[str] | None,
    extensions: Iterable[str],
    ignore: Iterable[str] = (),
) -> list[str]:
    """
    Files below `entry` whose extension is one of `extensions`, as sorted
    '/'-separated paths relative to `entry`.

    A missing (or empty) entry gives []. Symlinked directories are not
    followed. `ignore` holds fnmatch patterns tested against every directory
    and file name on the way down.
    """
    if not entry:
        return []
    base = os.fspath(entry)
    if not os.path.isdir(base):
        return []

    wanted = tuple(ext.lower() for ext in extensions)
    patterns = tuple(ignore)
    found: list[str] = []

    def onError(err: OSError) -> None:
        logger.debug("Skipping unreadable '%s': %s", err.filename, err)

    for dirPath, dirNames, fileNames in os.walk(base, onerror=onError, followlinks=False):
        dirNames[:] = [name for name in dirNames if not _isIgnored(name, patterns)]
        relDir = os.path.relpath(dirPath, base)
        for fileName in fileNames:
            if _isIgnored(fileName, patterns):
                continue
            if not fileName.lower().endswith(wanted):
                continue
            relPath = fileName if relDir == os.curdir else os.path.join(relDir, fileName)
            found.append(relPath.replace(os.sep, "/"))

    found.sort()
    return found
