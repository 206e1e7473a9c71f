# tests/addonlens/content/test_in_repo_roots.py
from __future__ import annotations

from addonlens.content.in_repo_roots import getProjectInRepoAddonsRoots, getRecursiveInRepoAddonRoots


def test_declared_paths_are_followed_recursively(writePackage, tmp_path):
    root = writePackage(tmp_path / "app", name="app", indexJs=False, **{"ember-addon": {"paths": ["lib/b", "lib/a"]}})
    libA = writePackage(root / "lib" / "a", name="a", addon=True, **{"ember-addon": {"paths": ["../c"]}})
    libB = writePackage(root / "lib" / "b", name="b", addon=True)
    libC = writePackage(root / "lib" / "c", name="c", addon=True, **{"ember-addon": {"paths": ["../a"]}})

    assert getProjectInRepoAddonsRoots(root) == sorted([str(libA), str(libB), str(libC)])


def test_declared_path_that_is_not_an_addon_root_is_skipped(writePackage, tmp_path):
    root = writePackage(tmp_path / "app", name="app", indexJs=False, **{"ember-addon": {"paths": ["lib/x", "lib/missing"]}})
    writePackage(root / "lib" / "x", name="x", addon=True, indexJs=False)

    assert getProjectInRepoAddonsRoots(root) == []


def test_no_declared_paths_gives_nothing(writePackage, tmp_path):
    root = writePackage(tmp_path / "app", name="app", indexJs=False)
    assert getProjectInRepoAddonsRoots(root) == []
    assert getProjectInRepoAddonsRoots(tmp_path / "nothing-here") == []


def test_recursive_call_on_non_addon_contributes_nothing(writePackage, tmp_path):
    plain = writePackage(tmp_path / "plain", name="plain", **{"ember-addon": {"paths": ["../x"]}})
    writePackage(tmp_path / "x", name="x", addon=True)
    accumulator = {"/already/there": None}

    assert getRecursiveInRepoAddonRoots(plain, accumulator) == ["/already/there"]


def test_module_unification_packages(writePackage, tmp_path):
    root = writePackage(tmp_path / "mu", name="mu", indexJs=False)
    (root / "src" / "ui").mkdir(parents=True)
    packages = root / "packages"
    first = writePackage(packages / "first", name="first", addon=True, dependencies={"dep": "1"})
    dep = writePackage(packages / "first" / "node_modules" / "dep", name="dep", addon=True)
    nested = writePackage(packages / "group" / "second", name="second", addon=True)
    writePackage(packages / "not-addon", name="not-addon")
    # Installed copies inside packages/ are only reached through dependencies
    writePackage(packages / "group" / "node_modules" / "hidden", name="hidden", addon=True)

    roots = getProjectInRepoAddonsRoots(root)
    assert roots == sorted([str(first), str(dep), str(nested)])
