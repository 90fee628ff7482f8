from __future__ import annotations

"""
Unit tests for Explorer Domain Models.

Verifies:
1. Remote entry conversion from store resources and cache records.
2. Node load-state marker and display naming.
3. Navigation snapshot serialization and tolerant rehydration.
4. Cache envelope TTL boundary.
"""

import pytest

from drivegames.domain.constants import FOLDER_MIME
from drivegames.domain.models import (
    NOT_LOADED,
    CacheEntry,
    NavigationState,
    Node,
    NodeKind,
    RemoteEntry,
)


def test_remote_entry_from_drive_detects_folders() -> None:
    folder = RemoteEntry.from_drive({"id": "f1", "name": "Topic", "mimeType": FOLDER_MIME})
    leaf = RemoteEntry.from_drive({"id": "d1", "name": "quiz.json", "mimeType": "application/json"})
    bare = RemoteEntry.from_drive({"id": "x1", "name": "notes"})

    assert folder.is_container is True
    assert leaf.is_container is False
    assert bare.mime_type == ""


def test_remote_entry_dict_roundtrip_uses_cache_keys() -> None:
    entry = RemoteEntry("f1", "Topic", True, FOLDER_MIME)
    data = entry.to_dict()

    assert data == {"id": "f1", "name": "Topic", "isContainer": True, "mimeType": FOLDER_MIME}
    assert RemoteEntry.from_dict(data) == entry


def test_not_loaded_marker_is_a_falsy_singleton() -> None:
    node = Node(id="f1", name="Topic", is_container=True)

    assert node.children is NOT_LOADED
    assert not NOT_LOADED
    assert node.loaded is False

    node.children = []
    assert node.loaded is True


def test_display_name_strips_leaf_suffix_only() -> None:
    leaf = Node(id="d1", name="Kapitel 1.json", is_container=False, kind=NodeKind.STRUCTURED, children=[])
    folder = Node(id="f1", name="v1.2", is_container=True)
    dotfile = Node(id="d2", name=".json", is_container=False, children=[])

    assert leaf.display_name == "Kapitel 1"
    assert folder.display_name == "v1.2"
    assert dotfile.display_name == ".json"
    assert leaf.dispatchable is True
    assert folder.dispatchable is False


def test_navigation_state_serializes_sorted_ids() -> None:
    state = NavigationState(selected_id="d1", collapsed_ids={"b", "a"}, drawer_open=True)

    assert state.to_dict() == {"selected_id": "d1", "collapsed_ids": ["a", "b"], "drawer_open": True}


def test_navigation_state_from_dict_filters_bad_fields() -> None:
    state = NavigationState.from_dict({
        "selected_id": "",
        "collapsed_ids": ["a", 3, None],
        "drawer_open": "yes",
    })

    assert state.selected_id is None
    assert state.collapsed_ids == {"a"}
    assert state.drawer_open is False


def test_navigation_state_from_non_mapping_raises() -> None:
    with pytest.raises(ValueError):
        NavigationState.from_dict(["not", "a", "dict"])


def test_cache_entry_ttl_boundary() -> None:
    entry = CacheEntry(value="x", created_at=100.0)

    assert entry.is_valid(100.0 + 1799.999, 1800) is True
    assert entry.is_valid(100.0 + 1800, 1800) is False
    assert entry.is_valid(10 ** 12, None) is True
