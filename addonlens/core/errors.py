from __future__ import annotations
from pathlib import Path

__all__ = [
    "AddonIndexError",
    "ManifestError",
    "ManifestNotFoundError",
    "ManifestParseError",
    "LayoutConfigError",
]



class AddonIndexError(Exception):
    """Base class for everything addonlens raises internally."""

    def __init__(self, message: str, *, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path: str | None = str(path) if path is not None else None



class ManifestError(AddonIndexError):
    """A package manifest could not be turned into a PackageDescriptor."""



class ManifestNotFoundError(ManifestError):
    """No manifest file exists (or it cannot be read) at the given directory."""



class ManifestParseError(ManifestError):
    """The manifest exists but is not a JSON object we can validate."""



class LayoutConfigError(AddonIndexError):
    """The project's environment config cannot be read for layout detection."""
