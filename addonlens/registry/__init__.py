# addonlens/registry/__init__.py
from .registry import (
    ArtifactKind,
    ArtifactRegistry,
    RegistryKey,
    normalizeMatchNaming,
)

__all__ = [
    "ArtifactKind",
    "ArtifactRegistry",
    "RegistryKey",
    "normalizeMatchNaming",
]
