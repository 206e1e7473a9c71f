# addonlens/scan/collections.py
from __future__ import annotations

import glob
import logging
import os
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import IntEnum
from os import PathLike
from typing import Protocol

from addonlens.app.settings import settings
from addonlens.content.layout import LayoutKind, ProjectLayout
from addonlens.content.package_meta import getModuleNameFromIndexJs, hasDep, readPackageJson
from addonlens.core.paths import normalizedPath, normalizeRoot
from addonlens.registry.registry import ArtifactKind, ArtifactRegistry, normalizeMatchNaming
from addonlens.scan.naming import normalizeRoutePath, normalizeToClassicComponent, pureComponentName
from addonlens.scan.walk import SCRIPT_EXTENSIONS, safeWalk

logger = logging.getLogger(__name__)

__all__ = [
    "ItemKind",
    "ArtifactDescriptor",
    "Project",
    "listComponents",
    "listPodsComponents",
    "listMUComponents",
    "listRoutes",
    "listCollection",
    "listHelpers",
    "listModels",
    "listServices",
    "listTransforms",
    "listModifiers",
    "builtinModifiers",
    "listGlimmerXComponents",
    "hasNamespaceSupport",
    "findByGlob",
    "findAppItemsForProject",
    "findAddonItemsForProject",
    "findTestsForProject",
    "scanCollection",
]


COMPONENT_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".hbs")
# Classic app/components may also co-locate styles
APP_COMPONENT_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".hbs", ".css", ".less", ".scss")
TEMPLATE_EXTENSIONS: tuple[str, ...] = (".hbs",)
PROJECT_ITEM_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".css", ".less", ".sass", ".hbs")
GLIMMERX_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".jsx", ".hbs")

_ROUTE_TEMPLATE_SKIP_ENDINGS: tuple[str, ...] = ("-loading", "-error", "/loading", "/error")



class ItemKind(IntEnum):
    """UI classification, numbered like LSP CompletionItemKind."""
    METHOD = 2
    FUNCTION = 3
    CLASS = 7
    FILE = 17



@dataclass(frozen=True, slots=True)
class ArtifactDescriptor:
    kind: ItemKind
    label: str
    detail: str

    def toDict(self) -> dict[str, object]:
        return {"kind": int(self.kind), "label": self.label, "detail": self.detail}



class Project(Protocol):
    """What the project scanners need from a project object."""
    root: str

    def matchPathToType(self, path: str) -> Mapping[str, str] | None: ...



# (collection folder under app/, descriptor kind, descriptor detail)
_COLLECTIONS: dict[ArtifactKind, tuple[str, ItemKind, str]] = {
    ArtifactKind.HELPER: ("helpers", ItemKind.FUNCTION, "helper"),
    ArtifactKind.MODIFIER: ("modifiers", ItemKind.FUNCTION, "modifier"),
    ArtifactKind.MODEL: ("models", ItemKind.CLASS, "model"),
    ArtifactKind.SERVICE: ("services", ItemKind.CLASS, "service"),
    ArtifactKind.TRANSFORM: ("transforms", ItemKind.FUNCTION, "transform"),
}



def _joinRelative(entry: str, relPath: str) -> str:
    return os.path.join(entry, *relPath.split("/"))



def _registerComponents(entry: str, relPaths: Sequence[str], registry: ArtifactRegistry) -> list[ArtifactDescriptor]:
    items: list[ArtifactDescriptor] = []
    for relPath in relPaths:
        label = pureComponentName(relPath)
        registry.addEntry(label, ArtifactKind.COMPONENT, [_joinRelative(entry, relPath)])
        items.append(ArtifactDescriptor(ItemKind.CLASS, label, "component"))
    return items



# ------------------------------------------------------------------ #
# Components
# ------------------------------------------------------------------ #

def listComponents(root: str | PathLike[str], registry: ArtifactRegistry) -> list[ArtifactDescriptor]:
    """Classic component folders of an app or v1 addon."""
    rootPath = normalizeRoot(root)
    scriptEntry = os.path.join(rootPath, "app", "components")
    templateEntry = os.path.join(rootPath, "app", "templates", "components")
    addonComponents = os.path.join(rootPath, "addon", "components")
    addonTemplates = os.path.join(rootPath, "addon", "templates", "components")

    items: list[ArtifactDescriptor] = []
    items += _registerComponents(scriptEntry, safeWalk(scriptEntry, APP_COMPONENT_EXTENSIONS), registry)
    items += _registerComponents(templateEntry, safeWalk(templateEntry, TEMPLATE_EXTENSIONS), registry)
    items += _registerComponents(addonComponents, safeWalk(addonComponents, COMPONENT_EXTENSIONS), registry)
    items += _registerComponents(addonTemplates, safeWalk(addonTemplates, COMPONENT_EXTENSIONS), registry)
    return items



def listPodsComponents(root: str | PathLike[str], podModulePrefix: str, registry: ArtifactRegistry) -> list[ArtifactDescriptor]:
    entryPath = os.path.join(normalizeRoot(root), "app", podModulePrefix, "components")
    return _registerComponents(entryPath, safeWalk(entryPath, APP_COMPONENT_EXTENSIONS), registry)



def listMUComponents(root: str | PathLike[str], registry: ArtifactRegistry) -> list[ArtifactDescriptor]:
    entryPath = os.path.join(normalizeRoot(root), "src", "ui", "components")
    return _registerComponents(entryPath, safeWalk(entryPath, COMPONENT_EXTENSIONS), registry)



# ------------------------------------------------------------------ #
# Routes
# ------------------------------------------------------------------ #

def _isRouteTemplate(relPath: str) -> bool:
    if relPath.startswith("components/"):
        return False
    stem = relPath[: -len(".hbs")] if relPath.endswith(".hbs") else relPath
    return not stem.endswith(_ROUTE_TEMPLATE_SKIP_ENDINGS)



def _routeLabel(relPath: str) -> str:
    return normalizeRoutePath(os.path.splitext(relPath)[0])



def listRoutes(root: str | PathLike[str], registry: ArtifactRegistry) -> list[ArtifactDescriptor]:
    """
    Route names from app/templates and app/routes. Controllers are registered
    under the same names but produce no descriptor of their own.
    """
    rootPath = normalizeRoot(root)
    scriptEntry = os.path.join(rootPath, "app", "routes")
    templateEntry = os.path.join(rootPath, "app", "templates")
    controllersEntry = os.path.join(rootPath, "app", "controllers")

    templatePaths = [p for p in safeWalk(templateEntry, TEMPLATE_EXTENSIONS) if _isRouteTemplate(p)]
    items: list[ArtifactDescriptor] = []

    for entry, relPaths, describe in (
        (templateEntry, templatePaths, True),
        (scriptEntry, safeWalk(scriptEntry, SCRIPT_EXTENSIONS), True),
        (controllersEntry, safeWalk(controllersEntry, SCRIPT_EXTENSIONS), False),
    ):
        for relPath in relPaths:
            label = _routeLabel(relPath)
            registry.addEntry(label, ArtifactKind.ROUTE_PATH, [_joinRelative(entry, relPath)])
            if describe:
                items.append(ArtifactDescriptor(ItemKind.FILE, label, "route"))

    return items



# ------------------------------------------------------------------ #
# Flat collections
# ------------------------------------------------------------------ #

def listCollection(
    root: str | PathLike[str],
    prefix: str,
    collectionName: str,
    kind: ItemKind,
    detail: str,
    registry: ArtifactRegistry,
) -> list[ArtifactDescriptor]:
    entry = os.path.join(normalizeRoot(root), prefix, collectionName)
    artifactKind = ArtifactKind.coerce(detail)
    items: list[ArtifactDescriptor] = []
    for relPath in safeWalk(entry, SCRIPT_EXTENSIONS):
        label = pureComponentName(relPath)
        registry.addEntry(label, artifactKind, [_joinRelative(entry, relPath)])
        items.append(ArtifactDescriptor(kind, label, detail))
    return items



def _listAppCollection(root: str | PathLike[str], artifactKind: ArtifactKind, registry: ArtifactRegistry) -> list[ArtifactDescriptor]:
    collectionName, kind, detail = _COLLECTIONS[artifactKind]
    return listCollection(root, "app", collectionName, kind, detail, registry)



def listHelpers(root: str | PathLike[str], registry: ArtifactRegistry) -> list[ArtifactDescriptor]:
    return _listAppCollection(root, ArtifactKind.HELPER, registry)



def listModels(root: str | PathLike[str], registry: ArtifactRegistry) -> list[ArtifactDescriptor]:
    return _listAppCollection(root, ArtifactKind.MODEL, registry)



def listServices(root: str | PathLike[str], registry: ArtifactRegistry) -> list[ArtifactDescriptor]:
    return _listAppCollection(root, ArtifactKind.SERVICE, registry)



def listTransforms(root: str | PathLike[str], registry: ArtifactRegistry) -> list[ArtifactDescriptor]:
    return _listAppCollection(root, ArtifactKind.TRANSFORM, registry)



def listModifiers(root: str | PathLike[str], registry: ArtifactRegistry) -> list[ArtifactDescriptor]:
    return _listAppCollection(root, ArtifactKind.MODIFIER, registry)



def builtinModifiers() -> list[ArtifactDescriptor]:
    return [ArtifactDescriptor(ItemKind.METHOD, "action", "modifier")]



def listGlimmerXComponents(root: str | PathLike[str], ignore: Iterable[str] | None = None) -> list[ArtifactDescriptor]:
    """
    GlimmerX components are classes in capitalized files anywhere in the
    project; test files are not components. Nothing is registered.
    """
    if ignore is None:
        ignore = settings("scan.glimmerXIgnore", [])
    items: list[ArtifactDescriptor] = []
    for relPath in safeWalk(normalizeRoot(root), GLIMMERX_EXTENSIONS, ignore):
        fileName = relPath.rsplit("/", 1)[-1]
        name = fileName[: fileName.rfind(".")]
        if not name or name[0] != name[0].upper():
            continue
        if name.endswith(("-test", ".test")):
            continue
        items.append(ArtifactDescriptor(ItemKind.CLASS, name, "component"))
    return items



# ------------------------------------------------------------------ #
# Namespaced lookup (lib/ and engines/ in-repo addons)
# ------------------------------------------------------------------ #

def hasNamespaceSupport(root: str | PathLike[str]) -> bool:
    return hasDep(readPackageJson(root), settings("addons.namespacingDependency", ""))



def _globAll(patterns: Iterable[str], *, skipModules: bool) -> list[str]:
    found: dict[str, None] = {}
    for pattern in patterns:
        for match in sorted(glob.glob(pattern, recursive=True)):
            posixMatch = normalizedPath(match)
            if skipModules and "/node_modules/" in posixMatch:
                continue
            if os.path.isfile(match):
                found.setdefault(posixMatch, None)
    return list(found)



def _componentLabel(filePath: str) -> str:
    templateSplit = filePath.split("/templates/components/", 1)
    if len(templateSplit) > 1:
        return pureComponentName(templateSplit[1])
    componentSplit = filePath.split("/components/", 1)
    if len(componentSplit) > 1:
        return pureComponentName(componentSplit[1])
    return ""



def findByGlob(
    root: str | PathLike[str],
    textPrefix: str,
    includeModules: Sequence[str] | None = None,
) -> list[ArtifactDescriptor]:
    """
    Components of lib/ and engines/ in-repo addons matching a typed prefix.

    With the namespacing dependency installed the prefix selects the addon
    folder and labels become "<addonModuleName>$<component>". When the in-repo
    folders give nothing, the `includeModules` scopes under node_modules are
    searched the same way.
    """
    rootPath = normalizedPath(normalizeRoot(root))
    isNameSpaced = hasNamespaceSupport(rootPath)
    prefixData = glob.escape(normalizeToClassicComponent(textPrefix.split("$")[0]))
    bases = [f"{glob.escape(rootPath)}/{folder}" for folder in ("lib", "engines")]
    componentDirs = ("addon/templates/components", "addon/components")

    def patternsUnder(baseDirs: Iterable[str]) -> list[str]:
        out: list[str] = []
        for base in baseDirs:
            for componentDir in componentDirs:
                for ext in ("js", "hbs"):
                    if isNameSpaced:
                        out.append(f"{base}/{prefixData}*/{componentDir}/**/*.{ext}")
                    else:
                        out.append(f"{base}/**/{componentDir}/**/{prefixData}*.{ext}")
        return out

    paths = _globAll(patternsUnder(bases), skipModules=True)

    if not paths and includeModules:
        moduleBases = [f"{glob.escape(rootPath)}/node_modules/{glob.escape(module)}" for module in includeModules]
        if isNameSpaced:
            # Scoped packages: node_modules/<scope>/*<prefix>*/addon/...
            paths = _globAll(
                [
                    f"{base}/*{prefixData}*/{componentDir}/**/*.{ext}"
                    for base in moduleBases
                    for componentDir in componentDirs
                    for ext in ("js", "hbs")
                ],
                skipModules=False,
            )
        else:
            paths = _globAll(patternsUnder(moduleBases), skipModules=False)

    items: list[ArtifactDescriptor] = []
    for filePath in paths:
        label = _componentLabel(filePath)
        if isNameSpaced:
            addonRoot = filePath.split("/addon/", 1)[0]
            info = readPackageJson(addonRoot)
            if info.name:
                # Folder names and module names of an addon can differ
                addonName = getModuleNameFromIndexJs(addonRoot) or info.name.split("/")[-1]
                label = f"{addonName}${label}"
        items.append(ArtifactDescriptor(ItemKind.CLASS, label, "component"))

    logger.debug("findByGlob(%s, %r) matched %d files", rootPath, textPrefix, len(paths))
    return items



# ------------------------------------------------------------------ #
# Project-driven registration
# ------------------------------------------------------------------ #

def findRegistryItemsForProject(
    project: Project,
    prefix: str,
    extensions: Iterable[str],
    registry: ArtifactRegistry,
) -> None:
    entry = os.path.join(normalizeRoot(project.root), prefix)
    for relPath in safeWalk(entry, extensions):
        fullPath = _joinRelative(entry, relPath)
        item = project.matchPathToType(fullPath)
        if not item:
            continue
        normalizedItem = normalizeMatchNaming(item)
        try:
            kind = ArtifactKind.coerce(normalizedItem["type"])
        except ValueError:
            logger.debug("Not registering '%s': no registry kind for type '%s'", fullPath, normalizedItem["type"])
            continue
        registry.addEntry(normalizedItem["name"], kind, [fullPath])



def findTestsForProject(project: Project, registry: ArtifactRegistry) -> None:
    findRegistryItemsForProject(project, "tests", SCRIPT_EXTENSIONS, registry)



def findAppItemsForProject(project: Project, registry: ArtifactRegistry) -> None:
    findRegistryItemsForProject(project, "app", PROJECT_ITEM_EXTENSIONS, registry)



def findAddonItemsForProject(project: Project, registry: ArtifactRegistry) -> None:
    findRegistryItemsForProject(project, "addon", PROJECT_ITEM_EXTENSIONS, registry)



# ------------------------------------------------------------------ #
# Dispatch
# ------------------------------------------------------------------ #

def scanCollection(
    root: str | PathLike[str],
    layout: ProjectLayout,
    kind: ArtifactKind | str,
    registry: ArtifactRegistry,
) -> list[ArtifactDescriptor]:
    """
    Lists one artifact kind under `root`, registering every file found.

    Components follow the layout: module unification reads src/ui/components
    only, pods read the classic folders plus app/<podPrefix>/components.
    """
    artifactKind = ArtifactKind.coerce(kind)

    if artifactKind is ArtifactKind.COMPONENT:
        if layout.kind is LayoutKind.MODULE_UNIFICATION:
            return listMUComponents(root, registry)
        items = listComponents(root, registry)
        if layout.kind is LayoutKind.POD and layout.podModulePrefix:
            items += listPodsComponents(root, layout.podModulePrefix, registry)
        return items

    if artifactKind is ArtifactKind.ROUTE_PATH:
        return listRoutes(root, registry)

    return _listAppCollection(root, artifactKind, registry)
