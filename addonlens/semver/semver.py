from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "SemVer",
    "parseSemVer",
    "cleanVersionString",
]



SEMVER_PATTERN_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)"
    r"\.(?P<minor>0|[1-9]\d*)"
    r"\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|[0-9A-Za-z-]*[A-Za-z-][0-9A-Za-z-]*)"
    r"(?:\.(?:0|[1-9]\d*|[0-9A-Za-z-]*[A-Za-z-][0-9A-Za-z-]*))*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)



@dataclass(frozen=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()



def cleanVersionString(raw: str) -> str:
    """
    Strips whitespace and a leading '=' / 'v' the way package managers write
    exact pins ("=1.2.3", "v1.2.3", " 1.2.3 ").
    """
    text = raw.strip()
    while text[:1] in ("=", "v", "V"):
        text = text[1:].lstrip()
    return text



def parseSemVer(raw: str) -> SemVer:
    """
    Parse a strict, full "M.m.p[-pre][+build]" version (after cleaning).

    Raises ValueError for anything else, including ranges like "^1.2.3".
    """
    if not isinstance(raw, str):
        raise TypeError(f"Version string must be a string type, got {type(raw).__name__}")

    text = cleanVersionString(raw)
    if not text:
        raise ValueError("Version string cannot be empty or whitespace only")

    mtch = SEMVER_PATTERN_RE.match(text)
    if not mtch:
        raise ValueError(f"Invalid semantic version {raw!r}")

    prereleaseGroup = mtch.group("prerelease")
    buildGroup = mtch.group("build")
    return SemVer(
        major=int(mtch.group("major")),
        minor=int(mtch.group("minor")),
        patch=int(mtch.group("patch")),
        prerelease=tuple(prereleaseGroup.split(".")) if prereleaseGroup else (),
        build=tuple(buildGroup.split(".")) if buildGroup else (),
    )
