# addonlens/scan/naming.py
from __future__ import annotations

import posixpath
import re

from addonlens.core.paths import normalizedPath

__all__ = [
    "RESERVED_SEGMENTS",
    "pureComponentName",
    "normalizeRoutePath",
    "dasherize",
    "normalizeToClassicComponent",
    "getComponentNameFromURI",
]


# Trailing file names that stand for their parent directory
RESERVED_SEGMENTS: tuple[str, ...] = ("template", "component", "helper", "index", "styles")

_DECAMELIZE_RE = re.compile(r"([a-z\d])([A-Z])")
_SEPARATORS_RE = re.compile(r"[ _]")



def pureComponentName(relativePath: str) -> str:
    """
    Canonical artifact name of a file path relative to its collection folder.

        "components/foo/component.js" -> "components/foo"
        "x/index.hbs"                 -> "x"
        "y/z.js"                      -> "y/z"
        "a/styles.css"                -> "a"
    """
    relativePath = normalizedPath(relativePath)
    ext = posixpath.splitext(relativePath)[1]
    if relativePath.startswith("/"):
        relativePath = relativePath[1:]

    for reserved in RESERVED_SEGMENTS:
        suffix = f"/{reserved}{ext}"
        if relativePath.endswith(suffix):
            return relativePath[: -len(suffix)]

    return relativePath[: -len(ext)] if ext else relativePath



def normalizeRoutePath(name: str) -> str:
    return ".".join(name.split("/"))



def dasherize(name: str) -> str:
    """"FooBar" -> "foo-bar", "foo_bar baz" -> "foo-bar-baz"."""
    return _SEPARATORS_RE.sub("-", _DECAMELIZE_RE.sub(r"\1_\2", name).lower())



def normalizeToClassicComponent(name: str) -> str:
    """Angle-bracket invocation name to classic path form: "Foo::BarBaz" -> "foo/bar-baz"."""
    return dasherize("/".join(name.split("::")))



def getComponentNameFromURI(root: str, uri: str) -> str | None:
    """
    Component name for a file URI inside `root`, taken from whatever follows
    its components/ (or private -components/) folder. None when the file is
    not under such a folder.
    """
    fileName = normalizedPath(uri.replace("file://", "", 1).replace(root, "", 1))
    splitter = "/-components/" if "/-components/" in fileName else "/components/"
    parts = fileName.split(splitter)
    if len(parts) < 2 or not parts[1]:
        return None
    return pureComponentName(parts[1])
