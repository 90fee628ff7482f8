from __future__ import annotations

"""
Explorer Domain Models.

Defines the remote listing records, the lazily-materialized tree nodes,
the persisted navigation snapshot and the timestamped cache envelope.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Union

from drivegames.domain.constants import FOLDER_MIME

# -----------------------------------------------------------------------------
# REMOTE RECORDS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class RemoteEntry:
    """
    One record of a remote listing or metadata response.

    Attributes:
        id: Opaque identifier, unique across the store.
        name: Display name (file name including suffix for leaves).
        is_container: True for folders.
        mime_type: Declared content type, empty when the store omitted it.
    """
    id: str
    name: str
    is_container: bool
    mime_type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "isContainer": self.is_container,
            "mimeType": self.mime_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RemoteEntry":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            is_container=bool(data.get("isContainer", False)),
            mime_type=str(data.get("mimeType") or ""),
        )

    @classmethod
    def from_drive(cls, data: Dict[str, Any]) -> "RemoteEntry":
        """Build an entry from a raw Drive file resource."""
        mime = str(data.get("mimeType") or "")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            is_container=mime == FOLDER_MIME,
            mime_type=mime,
        )


# -----------------------------------------------------------------------------
# TREE NODES
# -----------------------------------------------------------------------------

class NodeKind(str, Enum):
    STRUCTURED = "structured"
    PRESENTATION = "presentation"
    OTHER = "other"


class _NotLoaded:
    """Marker for a container whose children have not been fetched yet."""

    _instance: Optional["_NotLoaded"] = None

    def __new__(cls) -> "_NotLoaded":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_LOADED"

    def __bool__(self) -> bool:
        return False


NOT_LOADED = _NotLoaded()

Children = Union[List["Node"], _NotLoaded]


@dataclass(eq=False)
class Node:
    """
    One entry of the materialized tree.

    Containers start as stubs (`children is NOT_LOADED`) and are filled in
    place with a complete, ordered list. Leaves are created fully realized.

    Attributes:
        id: Stable store identifier, the sole cache key.
        name: Display string as listed by the store.
        is_container: True for folders.
        kind: Leaf classification; None for containers.
        children: Ordered child nodes or NOT_LOADED.
        loading: True while a load is in flight for this node.
        generation: Root generation the node was created under.
    """
    id: str
    name: str
    is_container: bool
    kind: Optional[NodeKind] = None
    children: Children = NOT_LOADED
    loading: bool = False
    generation: int = 0

    @property
    def loaded(self) -> bool:
        return self.children is not NOT_LOADED

    @property
    def display_name(self) -> str:
        if self.is_container:
            return self.name
        stem, _ = os.path.splitext(self.name)
        return stem or self.name

    @property
    def dispatchable(self) -> bool:
        return not self.is_container and self.kind is NodeKind.STRUCTURED


# -----------------------------------------------------------------------------
# NAVIGATION SNAPSHOT
# -----------------------------------------------------------------------------

@dataclass
class NavigationState:
    """
    Persisted navigation snapshot.

    Attributes:
        selected_id: Currently selected node id, if any.
        collapsed_ids: Explicitly collapsed container ids.
        drawer_open: Whether the navigation drawer is shown.
    """
    selected_id: Optional[str] = None
    collapsed_ids: Set[str] = field(default_factory=set)
    drawer_open: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selected_id": self.selected_id,
            "collapsed_ids": sorted(self.collapsed_ids),
            "drawer_open": self.drawer_open,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "NavigationState":
        """
        Rebuild a snapshot, ignoring fields with unexpected types.

        Raises:
            ValueError: If the record is not a mapping.
        """
        if not isinstance(data, dict):
            raise ValueError("Navigation snapshot is not an object.")

        selected = data.get("selected_id")
        collapsed = data.get("collapsed_ids")
        drawer = data.get("drawer_open")

        return cls(
            selected_id=selected if isinstance(selected, str) and selected else None,
            collapsed_ids={c for c in collapsed if isinstance(c, str)} if isinstance(collapsed, list) else set(),
            drawer_open=drawer if isinstance(drawer, bool) else False,
        )


# -----------------------------------------------------------------------------
# CACHE ENVELOPE
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CacheEntry:
    """
    A cached value with its creation timestamp.

    Attributes:
        value: The cached payload.
        created_at: Epoch seconds at write time.
    """
    value: Any
    created_at: float

    def is_valid(self, now: float, ttl: Optional[float]) -> bool:
        """An entry is valid iff its age is strictly below the TTL (None = unbounded)."""
        if ttl is None:
            return True
        return (now - self.created_at) < ttl
