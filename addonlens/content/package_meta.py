# addonlens/content/package_meta.py
from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from os import PathLike
from typing import Any

import json5
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from addonlens.core.errors import ManifestError, ManifestNotFoundError, ManifestParseError
from addonlens.semver.semver import parseSemVer

logger = logging.getLogger(__name__)

__all__ = [
    "MANIFEST_FILE",
    "ENTRY_MODULE_FILE",
    "ADDON_KEYWORD",
    "ADDON_CONFIG_KEY",
    "EXTENSION_CONFIG_KEY",
    "AddonConfig",
    "PackageDescriptor",
    "EMPTY_PACKAGE",
    "readPackageJson",
    "isEmberAddon",
    "hasExtensionConfig",
    "addonVersion",
    "hasDep",
    "dependencyNames",
    "dependencyVersion",
    "isGlimmerXProject",
    "isGlimmerNativeProject",
    "getModuleNameFromIndexJs",
]



MANIFEST_FILE = "package.json"
ENTRY_MODULE_FILE = "index.js"
ADDON_KEYWORD = "ember-addon"
ADDON_CONFIG_KEY = "ember-addon"
EXTENSION_CONFIG_KEY = "ember-language-server"

_GLIMMERX_DEPS: tuple[str, ...] = ("@glimmerx/core", "glimmer-lite-core")
_GLIMMER_NATIVE_DEP = "glimmer-native"

# Matches  `moduleName: 'my-addon'`  (or `moduleName = 'my-addon'`) on one line
_MODULE_NAME_RE = re.compile(r"(.*) moduleName(.*) '(.*)'(.*)", re.IGNORECASE)



# ------------------------------------------------------------------ #
# Coercion helpers (one bad field must not sink a whole manifest)
# ------------------------------------------------------------------ #

def _stringTuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(item for item in value if isinstance(item, str))



def _stringMap(value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    out: dict[str, str] = {}
    for key, version in value.items():
        if not isinstance(key, str) or not key:
            continue
        out[key] = version if isinstance(version, str) else str(version)
    return out



class AddonConfig(BaseModel):
    """The `ember-addon` block of a manifest."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    version: int | None = None
    projectRoot: str | None = None
    paths: tuple[str, ...] = ()
    before: tuple[str, ...] = ()
    after: tuple[str, ...] = ()

    @field_validator("version", mode="before")
    @classmethod
    def _coerceVersion(cls, value: Any) -> int | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        # json5 reads `2.0` as a float; node compares it equal to 2
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return None

    @field_validator("projectRoot", mode="before")
    @classmethod
    def _coerceProjectRoot(cls, value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @field_validator("paths", "before", "after", mode="before")
    @classmethod
    def _coerceStrings(cls, value: Any) -> tuple[str, ...]:
        return _stringTuple(value)



class PackageDescriptor(BaseModel):
    """
    Immutable snapshot of a package.json read at one point in time.

    Field names follow the manifest; the two dashed keys are aliased.
    """
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str | None = None
    keywords: tuple[str, ...] = ()
    dependencies: dict[str, str] = Field(default_factory=dict)
    peerDependencies: dict[str, str] = Field(default_factory=dict)
    devDependencies: dict[str, str] = Field(default_factory=dict)
    workspaces: tuple[str, ...] = ()
    emberAddon: AddonConfig | None = Field(default=None, alias=ADDON_CONFIG_KEY)
    extensionConfig: dict[str, Any] | None = Field(default=None, alias=EXTENSION_CONFIG_KEY)

    @field_validator("name", mode="before")
    @classmethod
    def _coerceName(cls, value: Any) -> str | None:
        return value if isinstance(value, str) and value else None

    @field_validator("keywords", mode="before")
    @classmethod
    def _coerceKeywords(cls, value: Any) -> tuple[str, ...]:
        return _stringTuple(value)

    @field_validator("dependencies", "peerDependencies", "devDependencies", mode="before")
    @classmethod
    def _coerceDeps(cls, value: Any) -> dict[str, str]:
        return _stringMap(value)

    @field_validator("workspaces", mode="before")
    @classmethod
    def _coerceWorkspaces(cls, value: Any) -> tuple[str, ...]:
        # npm/yarn also accept {"packages": [...], "nohoist": [...]}
        if isinstance(value, Mapping):
            value = value.get("packages")
        return _stringTuple(value)

    @field_validator("emberAddon", mode="before")
    @classmethod
    def _coerceAddonConfig(cls, value: Any) -> Any:
        return value if isinstance(value, Mapping) else None

    @field_validator("extensionConfig", mode="before")
    @classmethod
    def _coerceExtensionConfig(cls, value: Any) -> Any:
        # Only runs when the key is present, and presence is the marker, so
        # null and non-object blobs become an empty config
        return dict(value) if isinstance(value, Mapping) else {}

    @property
    def isEmpty(self) -> bool:
        return self == EMPTY_PACKAGE



EMPTY_PACKAGE = PackageDescriptor()



# ------------------------------------------------------------------ #
# Reading
# ------------------------------------------------------------------ #

def _loadManifestObject(directory: str) -> Mapping[str, Any]:
    manifestPath = os.path.join(directory, MANIFEST_FILE)
    try:
        with open(manifestPath, "r", encoding="utf-8") as fh:
            text = fh.read()
    except (FileNotFoundError, NotADirectoryError) as err:
        raise ManifestNotFoundError(f"No {MANIFEST_FILE} in '{directory}'", path=manifestPath) from err
    except (OSError, UnicodeDecodeError) as err:
        raise ManifestNotFoundError(f"Cannot read '{manifestPath}': {err}", path=manifestPath) from err

    try:
        raw = json5.loads(text)
    except ValueError as err:
        raise ManifestParseError(f"Cannot parse '{manifestPath}': {err}", path=manifestPath) from err

    if not isinstance(raw, Mapping):
        raise ManifestParseError(
            f"'{manifestPath}' must contain an object, got {type(raw).__name__}",
            path=manifestPath,
        )
    return raw



def readPackageJson(directory: str | PathLike[str]) -> PackageDescriptor:
    """
    Returns the PackageDescriptor for `<directory>/package.json`.

    Never raises: a missing, unreadable or malformed manifest yields
    EMPTY_PACKAGE, which every eligibility check treats as "not an addon".
    """
    directory = os.fspath(directory)
    try:
        raw = _loadManifestObject(directory)
        return PackageDescriptor.model_validate(raw)
    except ManifestNotFoundError as err:
        logger.debug("%s", err)
    except ManifestError as err:
        logger.warning("Ignoring manifest: %s", err)
    except ValidationError as err:
        logger.warning("Ignoring manifest in '%s': %s", directory, err)
    return EMPTY_PACKAGE



# ------------------------------------------------------------------ #
# Queries over a descriptor
# ------------------------------------------------------------------ #

def isEmberAddon(info: PackageDescriptor) -> bool:
    return ADDON_KEYWORD in info.keywords



def hasExtensionConfig(info: PackageDescriptor) -> bool:
    return info.extensionConfig is not None



def addonVersion(info: PackageDescriptor) -> int | None:
    """None for non-addons, 2 for `ember-addon.version == 2`, otherwise 1."""
    if not isEmberAddon(info):
        return None
    if info.emberAddon is not None and info.emberAddon.version == 2:
        return 2
    return 1



def hasDep(info: PackageDescriptor, depName: str) -> bool:
    return bool(
        info.dependencies.get(depName)
        or info.devDependencies.get(depName)
        or info.peerDependencies.get(depName)
    )



def dependencyNames(info: PackageDescriptor, *, includeDev: bool) -> list[str]:
    """Production + peer names, plus development names when `includeDev`."""
    names = [*info.dependencies.keys(), *info.peerDependencies.keys()]
    if includeDev:
        names.extend(info.devDependencies.keys())
    return names



def dependencyVersion(info: PackageDescriptor, depName: str) -> str | None:
    """
    Pinned version of `depName` as "M.m.p", looking at production, then
    development, then peer dependencies.

    Only exact pins ("3.20.0", "=v3.20.0", "3.20.0-beta.1") count; ranges such
    as "^3.20.0" or tags such as "latest" give None, as does an undeclared
    dependency. Prerelease and build tags are dropped.
    """
    if not hasDep(info, depName):
        return None
    declared = (
        info.dependencies.get(depName)
        or info.devDependencies.get(depName)
        or info.peerDependencies.get(depName)
        or ""
    )
    try:
        version = parseSemVer(declared)
    except ValueError:
        return None
    return f"{version.major}.{version.minor}.{version.patch}"



def isGlimmerXProject(info: PackageDescriptor) -> bool:
    return any(hasDep(info, dep) for dep in _GLIMMERX_DEPS)



def isGlimmerNativeProject(info: PackageDescriptor) -> bool:
    return hasDep(info, _GLIMMER_NATIVE_DEP)



def getModuleNameFromIndexJs(directory: str | PathLike[str]) -> str:
    """
    Returns the `moduleName` an addon declares in its index.js, or "" when the
    file is missing or declares none. The folder name of an addon can differ
    from its module name.
    """
    entryPath = os.path.join(os.fspath(directory), ENTRY_MODULE_FILE)
    try:
        with open(entryPath, "r", encoding="utf-8") as fh:
            data = fh.read()
    except (OSError, UnicodeDecodeError) as err:
        logger.debug("Cannot read '%s': %s", entryPath, err)
        return ""
    mtch = _MODULE_NAME_RE.search(data)
    return mtch.group(3) if mtch else ""
