# tests/addonlens/content/test_layout.py
from __future__ import annotations

import pytest

from addonlens.content.layout import (
    CLASSIC_LAYOUT,
    LayoutKind,
    ProjectLayout,
    detectProjectLayout,
    getPodModulePrefix,
    isModuleUnificationApp,
)

ENV_TEMPLATE = """'use strict';

module.exports = function(environment) {
  let ENV = {
    modulePrefix: 'my-app',
    %s
    environment,
    rootURL: '/',
  };
  return ENV;
};
"""


def _writeEnv(root, line: str) -> None:
    config = root / "config"
    config.mkdir(parents=True, exist_ok=True)
    (config / "environment.js").write_text(ENV_TEMPLATE % line, encoding="utf-8")


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("podModulePrefix: 'my-app/pods',", "pods"),
        ('podModulePrefix: "pods",', "pods"),
        ("podModulePrefix: ' features ',", "features"),
        ("podModulePrefix: '',", None),
        ("podModulePrefix: '   ',", None),
        ("", None),
    ],
)
def test_pod_module_prefix(tmp_path, line, expected):
    _writeEnv(tmp_path, line)
    assert getPodModulePrefix(tmp_path) == expected


def test_pod_prefix_missing_config_is_not_pod(tmp_path):
    assert getPodModulePrefix(tmp_path) is None


def test_detect_classic(tmp_path):
    assert detectProjectLayout(tmp_path) == CLASSIC_LAYOUT


def test_detect_pod(tmp_path):
    _writeEnv(tmp_path, "podModulePrefix: 'app/pods',")
    layout = detectProjectLayout(tmp_path)
    assert layout.kind is LayoutKind.POD
    assert layout.podModulePrefix == "pods"


def test_module_unification_wins_over_pods(tmp_path):
    _writeEnv(tmp_path, "podModulePrefix: 'pods',")
    (tmp_path / "src" / "ui").mkdir(parents=True)

    assert isModuleUnificationApp(tmp_path)
    layout = detectProjectLayout(tmp_path)
    assert layout.kind is LayoutKind.MODULE_UNIFICATION
    assert layout.podModulePrefix is None


def test_layout_value_is_consistent():
    with pytest.raises(ValueError):
        ProjectLayout(LayoutKind.POD)
    with pytest.raises(ValueError):
        ProjectLayout(LayoutKind.CLASSIC, "pods")
    assert ProjectLayout.pod("pods") == ProjectLayout(LayoutKind.POD, "pods")
