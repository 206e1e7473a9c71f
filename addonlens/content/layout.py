# addonlens/content/layout.py
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from os import PathLike

from addonlens.core.errors import LayoutConfigError

logger = logging.getLogger(__name__)

__all__ = [
    "LayoutKind",
    "ProjectLayout",
    "CLASSIC_LAYOUT",
    "MODULE_UNIFICATION_LAYOUT",
    "isModuleUnificationApp",
    "getPodModulePrefix",
    "detectProjectLayout",
]


ENVIRONMENT_CONFIG = os.path.join("config", "environment.js")

# podModulePrefix: 'app/pods'   |   podModulePrefix = "pods"   |   "podModulePrefix": `x`
_POD_PREFIX_RE = re.compile(r"""["']?podModulePrefix["']?\s*[:=]\s*(["'`])(?P<value>.*?)\1""")



class LayoutKind(Enum):
    CLASSIC = "classic"
    POD = "pod"
    MODULE_UNIFICATION = "moduleUnification"



@dataclass(frozen=True, slots=True)
class ProjectLayout:
    """
    Directory convention of one project or addon root. Computed once per root
    and handed to every scanner.
    """
    kind: LayoutKind
    # Only set for LayoutKind.POD, e.g. "pods" for app/pods/components
    podModulePrefix: str | None = None

    def __post_init__(self) -> None:
        if (self.kind is LayoutKind.POD) != (self.podModulePrefix is not None):
            raise ValueError("podModulePrefix must be set for, and only for, the pod layout")

    @classmethod
    def pod(cls, prefix: str) -> "ProjectLayout":
        return cls(LayoutKind.POD, prefix)



CLASSIC_LAYOUT = ProjectLayout(LayoutKind.CLASSIC)
MODULE_UNIFICATION_LAYOUT = ProjectLayout(LayoutKind.MODULE_UNIFICATION)



def isModuleUnificationApp(root: str | PathLike[str]) -> bool:
    return os.path.exists(os.path.join(os.fspath(root), "src", "ui"))



def _readPodModulePrefix(root: str) -> str:
    configPath = os.path.join(root, ENVIRONMENT_CONFIG)
    try:
        with open(configPath, "r", encoding="utf-8") as fh:
            source = fh.read()
    except (OSError, UnicodeDecodeError) as err:
        raise LayoutConfigError(f"Cannot read '{configPath}': {err}", path=configPath) from err
    mtch = _POD_PREFIX_RE.search(source)
    return mtch.group("value") if mtch else ""



def getPodModulePrefix(root: str | PathLike[str]) -> str | None:
    """
    The pod directory name configured in config/environment.js, or None.

    The config module is read as text; a string literal assigned to
    podModulePrefix is taken as is. "app/pods" is reduced to "pods".
    """
    try:
        podModulePrefix = _readPodModulePrefix(os.fspath(root))
    except LayoutConfigError as err:
        logger.debug("No pod prefix: %s", err)
        return None

    podModulePrefix = podModulePrefix.strip()
    if "/" in podModulePrefix:
        podModulePrefix = podModulePrefix.split("/")[-1].strip()
    return podModulePrefix or None



def detectProjectLayout(root: str | PathLike[str]) -> ProjectLayout:
    """
    Exactly one layout per root, checked in order:
    module unification (src/ui exists), pods (prefix configured), classic.
    """
    if isModuleUnificationApp(root):
        return MODULE_UNIFICATION_LAYOUT
    prefix = getPodModulePrefix(root)
    if prefix is not None:
        return ProjectLayout.pod(prefix)
    return CLASSIC_LAYOUT
