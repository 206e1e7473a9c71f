from __future__ import annotations
import json5, os
from pydantic import JsonValue
from pathlib import Path
from typing import Any, cast
from functools import lru_cache

from addonlens.core.dictpath import getByPath

import logging
logger = logging.getLogger(__name__)

__all__ = [
    "SETTINGS", "SETTINGS_ENV_VAR", "userSettingsPath", "loadUserSettings",
    "loadSettings", "deepMerge", "settings", "settingsBool", "settingsInt",
]


SETTINGS_ENV_VAR = "ADDONLENS_SETTINGS"

SETTINGS: JsonValue = {
    "__source": "ADDONLENS_DEFAULTS",
    "cache": {
        # Layout facts (src/ui, podModulePrefix) change while the user edits config
        "shortTtlMs": 60_000,
        # Full dependency-graph resolution and addon listings
        "longTtlMs": 600_000,
    },
    "addons": {
        "packagesFolderName": "node_modules",
        "namespacingDependency": "ember-holy-futuristic-template-namespacing-batman",
    },
    "scan": {
        "maxWorkers": 1,
        "glimmerXIgnore": ["dist", "lib", "node_modules", "tmp", "cache", ".cache", ".git"],
    },
    "logging": {"filePath": None},
    "debug": {
        "devModeEnabled": False,
        "suppressRecurringMessages": {"enabled": True, "windowSeconds": 60, "maxPerWindow": 5, "summaryLevel": "INFO"},
    },
}



def userSettingsPath() -> Path:
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(os.path.expanduser("~/.addonlens/addonlens.json5"))



def loadUserSettings() -> JsonValue:
    filePath = userSettingsPath()
    if filePath.exists():
        try:
            data = json5.loads(filePath.read_text(encoding="utf-8"))
        except Exception as err:
            logger.error("Failed to parse '%s': %s", filePath, err)
            return {}
        if not isinstance(data, dict):
            logger.error("Settings file '%s' must contain an object, got %s", filePath, type(data).__name__)
            return {}
        return cast(JsonValue, data)
    return {}



@lru_cache(maxsize=1)
def loadSettings() -> JsonValue:
    return deepMerge(SETTINGS, loadUserSettings())



def deepMerge(first: JsonValue, second: JsonValue) -> JsonValue:
    """
    Returns a new JsonValue where keys from `second` override/extend `first`.
    Only merges recursively when BOTH sides are JSON objects (dicts).
    For all other JSON types the right-hand value `second` replaces `first`.
    """
    if isinstance(first, dict) and isinstance(second, dict):
        out: dict[str, JsonValue] = dict(first)
        for key, value in second.items():
            if key in out:
                out[key] = deepMerge(out[key], cast(JsonValue, value))
            else:
                out[key] = cast(JsonValue, value)
        return cast(JsonValue, out)

    return cast(JsonValue, second)

# ---------- Ergonomic accessors over merged settings ----------

def settings(path: str, default: Any = None) -> Any:
    """Returns value at `path` from merged settings, or `default` if missing."""
    val = getByPath(loadSettings(), path)
    return default if val is None else val



def settingsBool(path: str, default: bool = False) -> bool:
    """Returns bool value at `path` or `default` if missing."""
    val = getByPath(loadSettings(), path)
    if isinstance(val, bool):
        return val
    if val is None:
        return default
    return bool(val)



def settingsInt(path: str, default: int) -> int:
    """Returns int value at `path`; missing or non-numeric values give `default`."""
    val = getByPath(loadSettings(), path)
    if isinstance(val, bool) or val is None:
        return default
    try:
        return int(val)
    except (TypeError, ValueError):
        logger.warning("Setting '%s' is not an integer (%r), using %d", path, val, default)
        return default
