# tests/addonlens/content/test_package_meta.py
from __future__ import annotations
import logging

import pytest

from addonlens.content.package_meta import (
    EMPTY_PACKAGE,
    PackageDescriptor,
    addonVersion,
    dependencyNames,
    dependencyVersion,
    getModuleNameFromIndexJs,
    hasDep,
    hasExtensionConfig,
    isEmberAddon,
    isGlimmerNativeProject,
    isGlimmerXProject,
    readPackageJson,
)
from addonlens.core.errors import ManifestParseError
from addonlens.content import package_meta


def test_missing_manifest_gives_empty_descriptor(tmp_path):
    info = readPackageJson(tmp_path)
    assert info is EMPTY_PACKAGE
    assert info.isEmpty
    assert not isEmberAddon(info)


@pytest.mark.parametrize("text", ["{ broken", "[1, 2]", '"just a string"'])
def test_malformed_manifest_gives_empty_descriptor(tmp_path, caplog, text):
    (tmp_path / "package.json").write_text(text, encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="addonlens.content.package_meta"):
        assert readPackageJson(tmp_path) is EMPTY_PACKAGE
    assert "Ignoring manifest" in caplog.text


def test_loader_raises_typed_errors(tmp_path):
    (tmp_path / "package.json").write_text("[]", encoding="utf-8")
    with pytest.raises(ManifestParseError) as excinfo:
        package_meta._loadManifestObject(str(tmp_path))
    assert excinfo.value.path == str(tmp_path / "package.json")


def test_reads_known_fields(writePackage, tmp_path):
    writePackage(
        tmp_path,
        name="my-addon",
        addon=True,
        dependencies={"a": "^1.0.0"},
        peerDependencies={"b": "2"},
        devDependencies={"c": "~3.1"},
        workspaces={"packages": ["packages/*"], "nohoist": ["**"]},
        **{
            "ember-addon": {"version": 2, "paths": ["lib/x"], "before": "other"},
            "ember-language-server": {"entry": "./lib/els"},
        },
    )
    info = readPackageJson(tmp_path)

    assert info.name == "my-addon"
    assert isEmberAddon(info)
    assert addonVersion(info) == 2
    assert info.emberAddon is not None
    assert info.emberAddon.paths == ("lib/x",)
    assert info.emberAddon.before == ("other",)
    assert info.workspaces == ("packages/*",)
    assert hasExtensionConfig(info)
    assert dependencyNames(info, includeDev=False) == ["a", "b"]
    assert dependencyNames(info, includeDev=True) == ["a", "b", "c"]
    assert hasDep(info, "c") and not hasDep(info, "zzz")


def test_bad_fields_are_coerced_not_fatal():
    info = PackageDescriptor.model_validate(
        {
            "name": 42,
            "keywords": "ember-addon",
            "dependencies": ["not", "a", "map"],
            "devDependencies": {"ok": "1.0.0", "num": 2},
            "ember-addon": {"version": "nope", "paths": "lib/one", "projectRoot": "  "},
            "ember-language-server": True,
        }
    )
    assert info.name is None
    assert info.keywords == ("ember-addon",)
    assert info.dependencies == {}
    assert info.devDependencies == {"ok": "1.0.0", "num": "2"}
    assert info.emberAddon is not None
    assert info.emberAddon.version is None
    assert info.emberAddon.paths == ("lib/one",)
    assert info.emberAddon.projectRoot is None
    assert info.extensionConfig == {}
    assert addonVersion(info) == 1


def test_addon_version_none_for_non_addons():
    assert addonVersion(PackageDescriptor(name="plain")) is None


def test_dependency_version_only_for_exact_pins():
    info = PackageDescriptor(
        dependencies={"ember-source": "3.20.0", "ember-data": "^3.20.0"},
        devDependencies={"ember-cli": "=v3.1.2-beta.1"},
        peerDependencies={"x": "latest"},
    )
    assert dependencyVersion(info, "ember-source") == "3.20.0"
    assert dependencyVersion(info, "ember-cli") == "3.1.2"
    assert dependencyVersion(info, "ember-data") is None
    assert dependencyVersion(info, "x") is None
    assert dependencyVersion(info, "missing") is None


@pytest.mark.parametrize(("declared", "expected"), [(2, 2), (2.0, 2), ("2", 2), (1, 1), (2.5, 1), (True, 1)])
def test_addon_version_reads_numeric_forms(declared, expected):
    info = PackageDescriptor.model_validate({"keywords": ["ember-addon"], "ember-addon": {"version": declared}})
    assert addonVersion(info) == expected


def test_null_extension_block_still_marks_an_extension():
    info = PackageDescriptor.model_validate({"ember-language-server": None})
    assert info.extensionConfig == {}
    assert hasExtensionConfig(info)
    assert not hasExtensionConfig(PackageDescriptor.model_validate({"name": "plain"}))


def test_glimmer_flavours():
    assert isGlimmerXProject(PackageDescriptor(dependencies={"@glimmerx/core": "1.0.0"}))
    assert isGlimmerXProject(PackageDescriptor(devDependencies={"glimmer-lite-core": "1.0.0"}))
    assert isGlimmerNativeProject(PackageDescriptor(peerDependencies={"glimmer-native": "0.1.0"}))
    assert not isGlimmerXProject(EMPTY_PACKAGE)


def test_module_name_from_index_js(tmp_path):
    assert getModuleNameFromIndexJs(tmp_path) == ""
    (tmp_path / "index.js").write_text(
        "module.exports = {\n  name: require('./package').name,\n  moduleName: () => 'real-name',\n};\n",
        encoding="utf-8",
    )
    assert getModuleNameFromIndexJs(tmp_path) == "real-name"
