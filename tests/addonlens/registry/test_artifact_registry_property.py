# tests/addonlens/registry/test_artifact_registry_property.py
from __future__ import annotations

import pytest

hypothesis = pytest.importorskip("hypothesis")
from hypothesis import given, strategies as st  # type: ignore[no-redef]

from addonlens.registry import ArtifactKind, ArtifactRegistry


name_strat = st.text(alphabet="abcdefgh-/", min_size=1, max_size=6)
path_strat = st.text(alphabet="abc/", min_size=1, max_size=6).map(lambda tail: f"/root/{tail}.js")
kind_strat = st.sampled_from(list(ArtifactKind))
writes_strat = st.lists(st.tuples(name_strat, kind_strat, st.lists(path_strat, max_size=4)), max_size=30)


@given(writes_strat)
def test_path_sets_never_hold_duplicates(writes) -> None:
    registry = ArtifactRegistry()
    for name, kind, paths in writes:
        registry.addEntry(name, kind, paths)

    for paths in registry.snapshot().values():
        assert len(paths) == len(set(paths))


@given(writes_strat)
def test_every_written_path_is_retrievable(writes) -> None:
    registry = ArtifactRegistry()
    for name, kind, paths in writes:
        registry.addEntry(name, kind, paths)

    for name, kind, paths in writes:
        stored = registry.get(name, kind)
        assert set(paths) <= set(stored)


@given(writes_strat)
def test_write_order_does_not_change_contents(writes) -> None:
    forward = ArtifactRegistry()
    backward = ArtifactRegistry()
    for name, kind, paths in writes:
        forward.addEntry(name, kind, paths)
    for name, kind, paths in reversed(writes):
        backward.addEntry(name, kind, paths)

    assert {key: set(paths) for key, paths in forward.snapshot().items()} == {
        key: set(paths) for key, paths in backward.snapshot().items()
    }
