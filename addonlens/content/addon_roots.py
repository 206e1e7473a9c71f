# addonlens/content/addon_roots.py
from __future__ import annotations

import logging
import os
from os import PathLike

from addonlens.content.package_meta import (
    ENTRY_MODULE_FILE,
    MANIFEST_FILE,
    PackageDescriptor,
    dependencyNames,
    hasExtensionConfig,
    isEmberAddon,
    readPackageJson,
)
from addonlens.core.paths import normalizeRoot

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_PACKAGES_FOLDER",
    "RootAccumulator",
    "resolvePackageRoot",
    "isProjectAddonRoot",
    "isExtensionAddonRoot",
    "getProjectAddonsRoots",
]


DEFAULT_PACKAGES_FOLDER = "node_modules"

# Insertion-ordered set of normalized addon roots, shared by reference
# through one traversal. Membership doubles as the "visited" check.
RootAccumulator = dict[str, None]



def resolvePackageRoot(
    root: str | PathLike[str],
    addonName: str,
    packagesFolderName: str = DEFAULT_PACKAGES_FOLDER,
) -> str | None:
    """
    Locate the installed directory of `addonName` as seen from `root`.

    Walks from `root` up to the filesystem root. At each level
    `<level>/<packagesFolderName>/<addonName>` is tried first, then
    `<level>/<addonName>` (linked or sibling checkouts). The first directory
    holding a package.json wins; None when no level has one.
    """
    current = normalizeRoot(root)
    while True:
        maybePath = os.path.join(current, packagesFolderName, addonName)
        if os.path.isfile(os.path.join(maybePath, MANIFEST_FILE)):
            return maybePath
        linkedPath = os.path.join(current, addonName)
        if os.path.isfile(os.path.join(linkedPath, MANIFEST_FILE)):
            return linkedPath

        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent



def isProjectAddonRoot(root: str | PathLike[str]) -> bool:
    """A readable manifest flagged as an addon, plus an index.js entry module."""
    pack = readPackageJson(root)
    hasIndexJs = os.path.isfile(os.path.join(os.fspath(root), ENTRY_MODULE_FILE))
    return isEmberAddon(pack) and hasIndexJs



def isExtensionAddonRoot(root: str | PathLike[str]) -> bool:
    """True when the manifest at `root` carries the language-server extension block."""
    return hasExtensionConfig(readPackageJson(root))



def _effectivePackage(root: str) -> PackageDescriptor:
    pack = readPackageJson(root)
    maybeRoot = pack.emberAddon.projectRoot if pack.emberAddon is not None else None

    # A workspace root can point at the real project (monorepo layout)
    if not isEmberAddon(pack) and maybeRoot:
        newRoot = os.path.join(root, maybeRoot)
        logger.debug("Using projectRoot override '%s' for '%s'", newRoot, root)
        pack = readPackageJson(newRoot)
    return pack



def getProjectAddonsRoots(
    root: str | PathLike[str],
    resolved: RootAccumulator | None = None,
    packagesFolderName: str = DEFAULT_PACKAGES_FOLDER,
) -> list[str]:
    """
    Every addon root reachable from `root` through declared dependencies.

    `resolved` is the traversal accumulator. Leave it out for a fresh
    resolution; recursive calls (and the in-repo resolver) pass the same dict
    so every root is visited once and cycles stop at the first repeat.

    On the initial call (empty accumulator) production, peer and development
    dependencies are followed. Once anything has been accumulated only
    production and peer dependencies are, and a non-addon package
    contributes nothing.

    Returns the accumulated roots in discovery order; callers sort.
    """
    accumulator: RootAccumulator = resolved if resolved is not None else {}
    rootPath = normalizeRoot(root)
    isRecursive = bool(accumulator)

    pack = _effectivePackage(rootPath)
    if isRecursive and not isEmberAddon(pack):
        return list(accumulator)

    for name in dependencyNames(pack, includeDev=not isRecursive):
        located = resolvePackageRoot(rootPath, name, packagesFolderName)
        if located is None:
            continue
        candidate = normalizeRoot(located)
        if candidate in accumulator:
            continue

        packInfo = readPackageJson(candidate)
        # Unrelated packages are not descended into
        if not isEmberAddon(packInfo) and not hasExtensionConfig(packInfo):
            continue

        accumulator[candidate] = None
        getProjectAddonsRoots(candidate, accumulator, packagesFolderName)

    return list(accumulator)
