from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. An in-memory fake of the remote store with per-call counters.
3. Cache and settings fixtures rooted in a temporary user data directory.
"""

import copy
import os
import sys
from collections import Counter
from typing import Any, Dict, List, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from drivegames.core.services.cache import DurableCache, TieredCache  # noqa: E402
from drivegames.domain.config import ExplorerSettings  # noqa: E402
from drivegames.domain.constants import FOLDER_MIME  # noqa: E402
from drivegames.domain.errors import NotFound  # noqa: E402


# -----------------------------------------------------------------------------
# Fake Remote Store
# -----------------------------------------------------------------------------
class FakeDrive:
    """
    In-memory stand-in for DriveClient.

    Folders, files and documents are registered with `add_folder`,
    `add_file` and `add_document`. `fail` queues an exception for the next
    call of a method on an id; `calls` counts every call by (method, id).
    """

    def __init__(self) -> None:
        self.meta: Dict[str, Dict[str, Any]] = {}
        self.children: Dict[str, List[str]] = {}
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.calls: Counter = Counter()
        self._failures: Dict[tuple, List[BaseException]] = {}
        self.closed = False

    # --- registration ---
    def add_folder(self, folder_id: str, name: str, parent: Optional[str] = None) -> None:
        self.meta[folder_id] = {"id": folder_id, "name": name, "mimeType": FOLDER_MIME}
        self.children.setdefault(folder_id, [])
        if parent is not None:
            self.children.setdefault(parent, []).append(folder_id)

    def add_file(self, file_id: str, name: str, parent: str, mime: str = "") -> None:
        self.meta[file_id] = {"id": file_id, "name": name, "mimeType": mime}
        self.children.setdefault(parent, []).append(file_id)

    def add_document(self, file_id: str, name: str, parent: str, payload: Dict[str, Any]) -> None:
        self.add_file(file_id, name, parent, "application/json")
        self.documents[file_id] = payload

    def fail(self, method: str, node_id: str, exc: BaseException) -> None:
        self._failures.setdefault((method, node_id), []).append(exc)

    # --- protocol ---
    def get_file_metadata(self, file_id: str) -> Dict[str, Any]:
        self._enter("get_file_metadata", file_id)
        if file_id not in self.meta:
            raise NotFound(f"404 File not found: {file_id}", 404)
        return dict(self.meta[file_id])

    def list_children(self, parent_id: str) -> List[Dict[str, Any]]:
        self._enter("list_children", parent_id)
        if parent_id not in self.children:
            raise NotFound(f"404 File not found: {parent_id}", 404)
        return [dict(self.meta[c]) for c in self.children[parent_id]]

    def download_json(self, file_id: str) -> Dict[str, Any]:
        self._enter("download_json", file_id)
        if file_id not in self.documents:
            raise NotFound(f"404 File not found: {file_id}", 404)
        return copy.deepcopy(self.documents[file_id])

    def close(self) -> None:
        self.closed = True

    def _enter(self, method: str, node_id: str) -> None:
        self.calls[(method, node_id)] += 1
        queued = self._failures.get((method, node_id))
        if queued:
            raise queued.pop(0)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def fake_drive() -> FakeDrive:
    return FakeDrive()


@pytest.fixture(autouse=True)
def isolated_user_dir(tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> str:
    """Point the user data directory at a temporary folder for every test."""
    home = tmp_path / "userdata"
    monkeypatch.setenv("DRIVEGAMES_HOME", str(home))
    return str(home)


@pytest.fixture
def clock() -> Dict[str, float]:
    """Mutable fake time source: tests advance `clock["now"]`."""
    return {"now": 1_000_000.0}


@pytest.fixture
def durable_cache(tmp_path: Any, clock: Dict[str, float]) -> DurableCache:
    return DurableCache(str(tmp_path / "cache.db"), ttl_seconds=1800, clock=lambda: clock["now"])


@pytest.fixture
def tiered_cache(durable_cache: DurableCache) -> TieredCache:
    return TieredCache(durable_cache)


@pytest.fixture
def settings(tmp_path: Any) -> ExplorerSettings:
    return ExplorerSettings(
        api_key="test-key",
        root_folder_id="root",
        cache_db_path=str(tmp_path / "cache.db"),
        state_path=str(tmp_path / "state.json"),
    )
