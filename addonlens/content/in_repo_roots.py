# addonlens/content/in_repo_roots.py
from __future__ import annotations

import logging
import os
from os import PathLike

from addonlens.content.addon_roots import (
    DEFAULT_PACKAGES_FOLDER,
    RootAccumulator,
    getProjectAddonsRoots,
    isProjectAddonRoot,
)
from addonlens.content.layout import isModuleUnificationApp
from addonlens.content.package_meta import (
    MANIFEST_FILE,
    hasExtensionConfig,
    isEmberAddon,
    readPackageJson,
)
from addonlens.core.paths import normalizeRoot

logger = logging.getLogger(__name__)

__all__ = [
    "IN_REPO_PACKAGES_DIR",
    "getRecursiveInRepoAddonRoots",
    "getProjectInRepoAddonsRoots",
]


IN_REPO_PACKAGES_DIR = "packages"



def _packageDirsUnder(base: str) -> list[str]:
    """Directories below `base` that hold a package.json, node_modules excluded."""
    found: list[str] = []
    for dirPath, dirNames, fileNames in os.walk(base):
        dirNames[:] = sorted(name for name in dirNames if name != "node_modules")
        if dirPath != base and MANIFEST_FILE in fileNames:
            found.append(dirPath)
    return found



def getRecursiveInRepoAddonRoots(root: str | PathLike[str], resolved: RootAccumulator | None = None) -> list[str]:
    """
    Follows `ember-addon.paths` declarations from `root`, recursively.

    Each declared path (relative to its declaring package) that is a valid
    addon root is added once and then has its own `paths` followed. On
    recursive calls a declaring package that is not an addon contributes
    nothing. Returns the accumulated roots, sorted.
    """
    accumulator: RootAccumulator = resolved if resolved is not None else {}
    rootPath = normalizeRoot(root)
    packageData = readPackageJson(rootPath)

    if accumulator and not isEmberAddon(packageData):
        return sorted(accumulator)

    emberAddonPaths = packageData.emberAddon.paths if packageData.emberAddon is not None else ()
    for relativePath in emberAddonPaths:
        packageRoot = normalizeRoot(os.path.join(rootPath, relativePath))
        if packageRoot in accumulator:
            continue
        if not isProjectAddonRoot(packageRoot):
            logger.debug("Declared in-repo addon '%s' is not an addon root", packageRoot)
            continue

        packInfo = readPackageJson(packageRoot)
        if not isEmberAddon(packInfo) and not hasExtensionConfig(packInfo):
            continue

        accumulator[packageRoot] = None
        getRecursiveInRepoAddonRoots(packageRoot, accumulator)

    return sorted(accumulator)



def getProjectInRepoAddonsRoots(
    root: str | PathLike[str],
    packagesFolderName: str = DEFAULT_PACKAGES_FOLDER,
) -> list[str]:
    """
    In-repo addons of a project.

    Module-unification projects keep them under packages/, and each of those
    also pulls in its own dependency-declared addons. Other projects declare
    them through `ember-addon.paths`.
    """
    rootPath = normalizeRoot(root)
    roots: RootAccumulator = {}

    if isModuleUnificationApp(rootPath):
        for packageRoot in _packageDirsUnder(os.path.join(rootPath, IN_REPO_PACKAGES_DIR)):
            validRoot = normalizeRoot(packageRoot)
            if validRoot in roots or not isProjectAddonRoot(validRoot):
                continue
            roots[validRoot] = None
            getProjectAddonsRoots(validRoot, roots, packagesFolderName)
        return sorted(roots)

    return getRecursiveInRepoAddonRoots(rootPath, roots)
