# tests/addonlens/registry/test_artifact_registry.py
from __future__ import annotations
import threading

import pytest

from addonlens.registry import ArtifactKind, ArtifactRegistry, normalizeMatchNaming


def test_add_entry_twice_keeps_one_path():
    registry = ArtifactRegistry()
    registry.addEntry("foo", "component", ["/p/a.js"])
    registry.addEntry("foo", ArtifactKind.COMPONENT, ["/p/a.js"])

    assert registry.get("foo", "component") == ["/p/a.js"]
    assert len(registry) == 1


def test_paths_merge_in_insertion_order():
    registry = ArtifactRegistry()
    registry.addEntry("foo", "component", ["/p/b.hbs", "/p/a.js"])
    registry.addEntry("foo", "component", ["/p/a.js", "/p/c.css"])

    assert registry.get("foo", "component") == ["/p/b.hbs", "/p/a.js", "/p/c.css"]


def test_single_path_is_not_split_into_characters(tmp_path):
    registry = ArtifactRegistry()
    registry.addEntry("foo", "helper", "/p/helpers/foo.js")
    registry.addEntry("foo", "helper", tmp_path / "foo.js")

    assert registry.get("foo", "helper") == ["/p/helpers/foo.js", str(tmp_path / "foo.js")]


def test_same_name_different_kind_are_separate():
    registry = ArtifactRegistry()
    registry.addEntry("session", "service", ["/p/services/session.js"])
    registry.addEntry("session", "model", ["/p/models/session.js"])

    assert len(registry) == 2
    assert ("session", "service") in registry
    assert ("session", ArtifactKind.MODEL) in registry
    assert ("session", "helper") not in registry
    assert ("session", "bogus") not in registry
    assert registry.names("service") == ["session"]


def test_unknown_kind_is_rejected():
    registry = ArtifactRegistry()
    with pytest.raises(ValueError):
        registry.addEntry("x", "widget", ["/p/x.js"])


def test_missing_entry_is_empty():
    assert ArtifactRegistry().get("nope", "helper") == []


def test_for_root_uses_segment_prefixes():
    registry = ArtifactRegistry()
    registry.addEntry("a", "component", ["/work/app/components/a.js", "/work/app-two/components/a.js"])
    registry.addEntry("b", "helper", ["/work/app-two/helpers/b.js"])

    assert registry.forRoot("/work/app") == {("a", ArtifactKind.COMPONENT): ["/work/app/components/a.js"]}


def test_merge_and_snapshot_are_independent_copies():
    first = ArtifactRegistry()
    second = ArtifactRegistry()
    first.addEntry("a", "model", ["/1.js"])
    second.addEntry("a", "model", ["/1.js", "/2.js"])
    second.addEntry("b", "transform", ["/3.js"])

    first.merge(second)
    assert first.get("a", "model") == ["/1.js", "/2.js"]
    assert first.get("b", "transform") == ["/3.js"]

    snap = first.snapshot()
    snap[("a", ArtifactKind.MODEL)].append("/mutated.js")
    assert first.get("a", "model") == ["/1.js", "/2.js"]
    assert len(second) == 2


def test_concurrent_writers_do_not_duplicate():
    registry = ArtifactRegistry()

    def writer():
        for idx in range(200):
            registry.addEntry("shared", "component", [f"/p/{idx % 10}.js"])

    threads = [threading.Thread(target=writer) for _ in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(registry.get("shared", "component")) == sorted(f"/p/{idx}.js" for idx in range(10))


@pytest.mark.parametrize(
    ("item", "expected"),
    [
        ({"name": "components/my-button", "type": "template"}, {"name": "my-button", "type": "component"}),
        ({"name": "posts/index", "type": "template"}, {"name": "posts.index", "type": "routePath"}),
        ({"name": "posts/show", "type": "controller"}, {"name": "posts.show", "type": "routePath"}),
        ({"name": "posts", "type": "route"}, {"name": "posts", "type": "routePath"}),
        ({"name": "session", "type": "service"}, {"name": "session", "type": "service"}),
    ],
)
def test_normalize_match_naming(item, expected):
    assert normalizeMatchNaming(item) == expected
