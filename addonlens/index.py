# addonlens/index.py
from __future__ import annotations

import contextvars
import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from os import PathLike

from addonlens.app.settings import settings, settingsInt
from addonlens.content.addon_roots import (
    DEFAULT_PACKAGES_FOLDER,
    getProjectAddonsRoots,
    isExtensionAddonRoot,
    isProjectAddonRoot,
)
from addonlens.content.in_repo_roots import getProjectInRepoAddonsRoots
from addonlens.content.layout import ProjectLayout, detectProjectLayout
from addonlens.content.package_meta import addonVersion, readPackageJson
from addonlens.core.logging import clearLogContext, setLogContext
from addonlens.core.memoize import MemoizedFunction, memoize
from addonlens.core.paths import normalizeRoot
from addonlens.core.time import nowMonotonicMs
from addonlens.registry.registry import ArtifactKind, ArtifactRegistry, RegistryKey
from addonlens.scan.collections import (
    ArtifactDescriptor,
    Project,
    findAddonItemsForProject,
    findAppItemsForProject,
    findByGlob,
    findTestsForProject,
    scanCollection,
)

logger = logging.getLogger(__name__)

__all__ = ["SCAN_ORDER", "AddonIndex"]


# Order in which one addon root's artifacts are listed
SCAN_ORDER: tuple[ArtifactKind, ...] = (
    ArtifactKind.COMPONENT,
    ArtifactKind.ROUTE_PATH,
    ArtifactKind.HELPER,
    ArtifactKind.MODEL,
    ArtifactKind.TRANSFORM,
    ArtifactKind.SERVICE,
    ArtifactKind.MODIFIER,
)



class AddonIndex:
    """
    Addon discovery and artifact listing for projects, with cached resolution.

    Owns one ArtifactRegistry that every scan writes into. Resolver results
    are cached per index: layout facts for `cache.shortTtlMs`, dependency
    graphs and listings for `cache.longTtlMs`.
    """

    def __init__(
        self,
        registry: ArtifactRegistry | None = None,
        *,
        shortTtlMs: int | None = None,
        longTtlMs: int | None = None,
        packagesFolderName: str | None = None,
        maxWorkers: int | None = None,
        clock: Callable[[], int] = nowMonotonicMs,
    ) -> None:
        self.registry = registry if registry is not None else ArtifactRegistry()
        self.shortTtlMs = shortTtlMs if shortTtlMs is not None else settingsInt("cache.shortTtlMs", 60_000)
        self.longTtlMs = longTtlMs if longTtlMs is not None else settingsInt("cache.longTtlMs", 600_000)
        self.packagesFolderName = packagesFolderName or settings("addons.packagesFolderName", DEFAULT_PACKAGES_FOLDER)
        self.maxWorkers = max(1, maxWorkers if maxWorkers is not None else settingsInt("scan.maxWorkers", 1))

        # ----- Cached resolvers -----
        self.layoutFor: MemoizedFunction[ProjectLayout] = memoize(
            detectProjectLayout, keyArity=1, ttlMs=self.shortTtlMs, clock=clock,
        )
        self.projectAddonsRoots: MemoizedFunction[list[str]] = memoize(
            self._resolveAddonsRoots, keyArity=1, ttlMs=self.longTtlMs, clock=clock,
        )
        self.projectInRepoAddonsRoots: MemoizedFunction[list[str]] = memoize(
            self._resolveInRepoAddonsRoots, keyArity=1, ttlMs=self.longTtlMs, clock=clock,
        )
        self.isAddonRoot: MemoizedFunction[bool] = memoize(
            isProjectAddonRoot, keyArity=1, ttlMs=self.longTtlMs, clock=clock,
        )
        # textPrefix is part of the key; includeModules and disableInit are not
        self.getProjectAddonsInfo: MemoizedFunction[list[ArtifactDescriptor] | None] = memoize(
            self._getProjectAddonsInfo, keyArity=2, ttlMs=self.longTtlMs, clock=clock,
        )

    def __repr__(self) -> str:
        return (
            f"AddonIndex(registry={self.registry!r}, shortTtlMs={self.shortTtlMs}, "
            f"longTtlMs={self.longTtlMs}, maxWorkers={self.maxWorkers})"
        )

    # ----- Resolution -----

    def _resolveAddonsRoots(self, root: str | PathLike[str]) -> list[str]:
        return getProjectAddonsRoots(root, None, self.packagesFolderName)

    def _resolveInRepoAddonsRoots(self, root: str | PathLike[str]) -> list[str]:
        return getProjectInRepoAddonsRoots(root, self.packagesFolderName)

    def addonRoots(self, root: str | PathLike[str]) -> list[str]:
        """Dependency and in-repo addon roots of `root`, deduplicated and sorted."""
        rootPath = normalizeRoot(root)
        found = dict.fromkeys(self.projectAddonsRoots(rootPath))
        found.update(dict.fromkeys(self.projectInRepoAddonsRoots(rootPath)))
        return sorted(found)

    def extensionRoots(self, root: str | PathLike[str]) -> list[str]:
        """Addon roots that ship a language-server extension config block."""
        return [addonRoot for addonRoot in self.addonRoots(root) if isExtensionAddonRoot(addonRoot)]

    # ----- Listing -----

    def scanAddonRoot(self, addonRoot: str | PathLike[str]) -> list[ArtifactDescriptor]:
        """Every artifact kind of one root, with the layout detected for it."""
        # addonRoot/kind stay local to this scan; the caller's context is inherited
        return contextvars.copy_context().run(self._scanAddonRoot, addonRoot)

    def _scanAddonRoot(self, addonRoot: str | PathLike[str]) -> list[ArtifactDescriptor]:
        setLogContext(addonRoot=normalizeRoot(addonRoot))
        layout = self.layoutFor(normalizeRoot(addonRoot))
        items: list[ArtifactDescriptor] = []
        for kind in SCAN_ORDER:
            setLogContext(kind=kind.value)
            items.extend(scanCollection(addonRoot, layout, kind, self.registry))
        logger.debug("Scanned '%s' (%s): %d artifacts", addonRoot, layout.kind.value, len(items))
        return items

    def _listableRoots(self, roots: Sequence[str]) -> list[str]:
        listable: list[str] = []
        for addonRoot in roots:
            version = addonVersion(readPackageJson(addonRoot))
            if version is None:
                continue
            if version != 1:
                logger.debug("Skipping v%d addon '%s'", version, addonRoot)
                continue
            listable.append(addonRoot)
        return listable

    def _getProjectAddonsInfo(
        self,
        root: str | PathLike[str],
        textPrefix: str | None = None,
        includeModules: Sequence[str] | None = None,
        disableInit: bool = False,
    ) -> list[ArtifactDescriptor] | None:
        """
        With `textPrefix`: namespaced lookup through findByGlob.
        With `disableInit`: None, nothing is resolved.
        Otherwise: artifacts of every v1 addon root of the project, each
        descriptor once, in root order.
        """
        if textPrefix:
            return findByGlob(root, textPrefix, includeModules)
        if disableInit:
            return None

        rootPath = normalizeRoot(root)
        setLogContext(projectRoot=rootPath)
        try:
            roots = self._listableRoots(self.addonRoots(rootPath))
            if self.maxWorkers > 1 and len(roots) > 1:
                # Workers start with an empty context; hand each one a copy of ours
                contexts = [contextvars.copy_context() for _ in roots]
                with ThreadPoolExecutor(max_workers=self.maxWorkers, thread_name_prefix="addonlens-scan") as pool:
                    perRoot = list(pool.map(lambda ctx, addonRoot: ctx.run(self.scanAddonRoot, addonRoot), contexts, roots))
            else:
                perRoot = [self.scanAddonRoot(addonRoot) for addonRoot in roots]

            merged: dict[ArtifactDescriptor, None] = {}
            for items in perRoot:
                merged.update(dict.fromkeys(items))
            logger.info("Indexed %d addon roots of '%s': %d artifacts", len(roots), rootPath, len(merged))
            return list(merged)
        finally:
            clearLogContext()

    def collectProjectArtifacts(self, project: Project) -> dict[RegistryKey, list[str]]:
        """
        Registers the project's own app/, addon/ and tests/ files as the
        project classifies them. Returns the registry entries under its root.
        """
        setLogContext(projectRoot=project.root)
        try:
            findAppItemsForProject(project, self.registry)
            findAddonItemsForProject(project, self.registry)
            findTestsForProject(project, self.registry)
        finally:
            clearLogContext()
        return self.registry.forRoot(normalizeRoot(project.root))

    # ----- Maintenance -----

    def clearCaches(self) -> None:
        for cached in (
            self.layoutFor,
            self.projectAddonsRoots,
            self.projectInRepoAddonsRoots,
            self.isAddonRoot,
            self.getProjectAddonsInfo,
        ):
            cached.clear()
