from __future__ import annotations
import os
from os import PathLike

__all__ = [
    "normalizeRoot",
    "normalizedPath",
    "isRootStartingWithFilePath",
]



def normalizeRoot(path: str | PathLike[str]) -> str:
    """
    Absolute, normalized form of `path` used as an addon root identity.

    Symlinks are deliberately left alone: a linked package keeps the path it
    was found under, so node_modules/<name> stays node_modules/<name>.
    """
    return os.path.normpath(os.path.abspath(os.fspath(path)))



def normalizedPath(filePath: str) -> str:
    """Returns `filePath` with Windows separators turned into '/'."""
    if "\\" in filePath:
        return filePath.replace("\\", "/")
    return filePath



def isRootStartingWithFilePath(rootPath: str, filePath: str) -> bool:
    """
    Returns True if `filePath` lives under `rootPath`, comparing whole path
    segments. A plain startswith() would wrongly accept 'foo/bar/biz-bar' for
    the root 'foo/bar/biz'.
    """
    fileParts = normalizedPath(filePath).split("/")
    rootParts = normalizedPath(rootPath).rstrip("/").split("/")
    if len(rootParts) > len(fileParts):
        return False
    return all(fileParts[idx] == item for idx, item in enumerate(rootParts))
