import json
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from addonlens.app.settings import SETTINGS_ENV_VAR, loadSettings



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")



@pytest.fixture(autouse=True)
def isolatedSettings(monkeypatch, tmp_path_factory):
    """Every test sees the built-in defaults, never the developer's settings file."""
    missing = tmp_path_factory.mktemp("settings") / "missing.json5"
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(missing))
    loadSettings.cache_clear()
    yield missing
    loadSettings.cache_clear()



WritePackage = Callable[..., Path]


@pytest.fixture()
def writePackage() -> WritePackage:
    """
    Writes `<dirPath>/package.json` (and by default an index.js entry module).

        writePackage(tmp_path / "node_modules" / "addon-a", name="addon-a", addon=True)
    """
    def _write(
        dirPath: Path,
        *,
        name: str | None = None,
        addon: bool = False,
        indexJs: bool = True,
        **fields,
    ) -> Path:
        dirPath.mkdir(parents=True, exist_ok=True)
        payload = dict(fields)
        if name is not None:
            payload["name"] = name
        if addon:
            payload["keywords"] = [*payload.get("keywords", []), "ember-addon"]
        (dirPath / "package.json").write_text(json.dumps(payload, indent=2), encoding="utf-8")
        if indexJs:
            (dirPath / "index.js").write_text(f"module.exports = {{ name: '{name or dirPath.name}' }};\n", encoding="utf-8")
        return dirPath

    return _write



def touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture()
def touchFile() -> Callable[..., Path]:
    return touch
