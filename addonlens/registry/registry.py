# addonlens/registry/registry.py
from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import TypeAlias

from addonlens.core.paths import isRootStartingWithFilePath

logger = logging.getLogger(__name__)

__all__ = [
    "ArtifactKind",
    "RegistryKey",
    "ArtifactRegistry",
    "normalizeMatchNaming",
]



class ArtifactKind(str, Enum):
    COMPONENT = "component"
    ROUTE_PATH = "routePath"
    HELPER = "helper"
    MODIFIER = "modifier"
    MODEL = "model"
    SERVICE = "service"
    TRANSFORM = "transform"

    @classmethod
    def coerce(cls, value: "ArtifactKind | str") -> "ArtifactKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown artifact kind '{value}'") from None


RegistryKey: TypeAlias = tuple[str, ArtifactKind]



class ArtifactRegistry:
    """
    Maps (name, kind) to the set of files contributing that artifact.

    Entries only grow: paths are merged in, never removed. Each path set keeps
    insertion order and holds every path once. Thread safe for concurrent
    writers via internal RLock.
    """
    def __init__(self) -> None:
        # (name, kind) -> insertion-ordered path set
        self._entries: dict[RegistryKey, dict[str, None]] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        name, kind = key
        try:
            kind = ArtifactKind.coerce(kind)
        except ValueError:
            return False
        with self._lock:
            return (name, kind) in self._entries

    def __repr__(self) -> str:
        return f"ArtifactRegistry(entries={len(self)})"

    # ----- Writes -----

    def addEntry(
        self,
        name: str,
        kind: ArtifactKind | str,
        paths: str | os.PathLike[str] | Iterable[str | os.PathLike[str]],
    ) -> None:
        artifactKind = ArtifactKind.coerce(kind)
        # A lone path is one path, not an iterable of characters
        if isinstance(paths, (str, os.PathLike)):
            paths = [paths]
        with self._lock:
            bucket = self._entries.setdefault((name, artifactKind), {})
            for path in paths:
                bucket.setdefault(os.fspath(path), None)

    def merge(self, other: "ArtifactRegistry") -> None:
        """Adds every entry of `other`; `other` is left untouched."""
        if other is self:
            return
        for (name, kind), paths in other.snapshot().items():
            self.addEntry(name, kind, paths)

    # ----- Reads -----

    def get(self, name: str, kind: ArtifactKind | str) -> list[str]:
        artifactKind = ArtifactKind.coerce(kind)
        with self._lock:
            return list(self._entries.get((name, artifactKind), ()))

    def names(self, kind: ArtifactKind | str) -> list[str]:
        artifactKind = ArtifactKind.coerce(kind)
        with self._lock:
            return sorted(name for name, entryKind in self._entries if entryKind is artifactKind)

    def forRoot(self, root: str | os.PathLike[str]) -> dict[RegistryKey, list[str]]:
        """
        Entries with at least one path under `root`, each restricted to those
        paths. "foo/bar" does not own "foo/bar-baz/x.js".
        """
        rootPath = os.fspath(root)
        out: dict[RegistryKey, list[str]] = {}
        for key, paths in self.snapshot().items():
            owned = [path for path in paths if isRootStartingWithFilePath(rootPath, path)]
            if owned:
                out[key] = owned
        return out

    def snapshot(self) -> dict[RegistryKey, list[str]]:
        with self._lock:
            return {key: list(paths) for key, paths in self._entries.items()}



def normalizeMatchNaming(item: Mapping[str, str]) -> dict[str, str]:
    """
    Maps a project path match ({name, type}) onto registry naming.

    Templates, controllers and routes all feed the routePath kind with dotted
    names; templates under components/ are components.
    """
    name = item["name"]
    itemType = item["type"]

    if itemType == "template":
        if name.startswith("components/"):
            return {"name": name.split("/", 1)[1], "type": ArtifactKind.COMPONENT.value}
        return {"name": name.replace("/", "."), "type": ArtifactKind.ROUTE_PATH.value}
    if itemType in ("controller", "route"):
        return {"name": name.replace("/", "."), "type": ArtifactKind.ROUTE_PATH.value}

    return {"name": name, "type": itemType}
