# tests/addonlens/core/test_dictpath.py
import pytest

from addonlens.core.dictpath import _splitPath, getByPath


def test_split_path_handles_escapes():
    assert _splitPath("a.b.c") == ["a", "b", "c"]
    assert _splitPath("scan\\.glob.x") == ["scan.glob", "x"]


@pytest.mark.parametrize("bad", ["", "a..b", ".a", "a.", "a\\"])
def test_split_path_rejects_malformed(bad):
    with pytest.raises(ValueError):
        _splitPath(bad)


def test_get_by_path():
    data = {"cache": {"ttl": 5, "nested": {"x": None}}, "list": [1, 2]}
    assert getByPath(data, "cache.ttl") == 5
    assert getByPath(data, "cache.missing", "d") == "d"
    assert getByPath(data, "list.0", "d") == "d"
    assert getByPath(data, "cache..ttl", "d") == "d"
    assert getByPath(data, "cache.nested.x", "d") is None
