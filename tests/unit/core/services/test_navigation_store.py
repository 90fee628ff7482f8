from __future__ import annotations

"""
Unit tests for the persisted Navigation Store.

Verifies:
1. Every mutation writes the full snapshot before returning.
2. Collapse toggling ignores leaves.
3. Missing or corrupt snapshots rehydrate as defaults.
4. Unrelated keys of the shared state document survive writes.
"""

import json
from pathlib import Path

import pytest

from drivegames.core.services.navigation import NavigationStore
from drivegames.domain.constants import NAVIGATION_NAMESPACE
from drivegames.domain.models import Node, NodeKind


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    return tmp_path / "nested" / "state.json"


def _folder(node_id: str) -> Node:
    return Node(id=node_id, name=node_id, is_container=True)


def _read(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))[NAVIGATION_NAMESPACE]


def test_toggle_collapsed_persists_immediately(state_file: Path) -> None:
    store = NavigationStore(str(state_file))

    assert store.toggle_collapsed(_folder("f1")) is True
    assert _read(state_file)["collapsed_ids"] == ["f1"]

    assert store.toggle_collapsed(_folder("f1")) is False
    assert _read(state_file)["collapsed_ids"] == []


def test_toggle_on_leaf_is_ignored(state_file: Path) -> None:
    store = NavigationStore(str(state_file))
    leaf = Node(id="d1", name="quiz.json", is_container=False, kind=NodeKind.STRUCTURED, children=[])

    assert store.toggle_collapsed(leaf) is False
    assert store.state.collapsed_ids == set()
    assert store.is_collapsed(leaf) is False


def test_state_survives_a_restart(state_file: Path) -> None:
    store = NavigationStore(str(state_file))
    store.select("d1")
    store.toggle_collapsed(_folder("f2"))
    store.set_drawer_open(True)

    reloaded = NavigationStore(str(state_file))
    state = reloaded.load()

    assert state.selected_id == "d1"
    assert state.collapsed_ids == {"f2"}
    assert state.drawer_open is True
    assert reloaded.selected_id == "d1"


@pytest.mark.parametrize("content", ["{ not json", json.dumps([1, 2]), json.dumps({NAVIGATION_NAMESPACE: "x"})])
def test_corrupt_snapshot_yields_defaults(state_file: Path, content: str) -> None:
    state_file.parent.mkdir(parents=True)
    state_file.write_text(content, encoding="utf-8")

    state = NavigationStore(str(state_file)).load()

    assert state.selected_id is None
    assert state.collapsed_ids == set()
    assert state.drawer_open is False


def test_unrelated_keys_are_preserved(state_file: Path) -> None:
    state_file.parent.mkdir(parents=True)
    state_file.write_text(json.dumps({"other.app": {"keep": True}}), encoding="utf-8")

    NavigationStore(str(state_file)).toggle_drawer()

    document = json.loads(state_file.read_text(encoding="utf-8"))
    assert document["other.app"] == {"keep": True}
    assert document[NAVIGATION_NAMESPACE]["drawer_open"] is True


def test_reset_and_clear_selection(state_file: Path) -> None:
    store = NavigationStore(str(state_file))
    store.select("d1")
    store.toggle_collapsed(_folder("f1"))

    store.clear_selection()
    assert _read(state_file)["selected_id"] is None

    store.reset()
    assert _read(state_file) == {"selected_id": None, "collapsed_ids": [], "drawer_open": False}
