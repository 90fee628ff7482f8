from __future__ import annotations

"""
Tree State Store.

Persisted navigation state: the selected node, explicitly collapsed
containers and the drawer flag. Every mutation writes the complete snapshot
before returning. The snapshot lives under a namespaced key of a shared JSON
document; other keys in that document are left untouched.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from drivegames.domain.constants import NAVIGATION_NAMESPACE
from drivegames.domain.models import NavigationState, Node
from drivegames.infra.fs import ensure_parent_dir

logger = logging.getLogger(__name__)


class NavigationStore:
    """
    Owner of the process-wide NavigationState.

    Args:
        path: JSON document holding the snapshot.
        namespace: Key of the snapshot inside that document.
    """

    def __init__(self, path: str, namespace: str = NAVIGATION_NAMESPACE) -> None:
        self._path = path
        self._namespace = namespace
        self.state = NavigationState()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> NavigationState:
        """
        Rehydrate from disk. Missing or corrupt snapshots yield defaults.

        Returns:
            NavigationState: The now-current state.
        """
        document = self._read_document()
        record = document.get(self._namespace)

        if record is None:
            logger.debug("Navigation: no persisted snapshot. Using defaults.")
            self.state = NavigationState()
            return self.state

        try:
            self.state = NavigationState.from_dict(record)
        except ValueError as e:
            logger.warning(f"Navigation: corrupt snapshot ({e}). Using defaults.")
            self.state = NavigationState()
        return self.state

    def save(self) -> None:
        """Write the full snapshot. Failures are logged; in-memory state is kept."""
        document = self._read_document()
        document[self._namespace] = self.state.to_dict()
        try:
            ensure_parent_dir(self._path)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Navigation: failed to persist snapshot: {e}")

    def _read_document(self) -> Dict[str, Any]:
        if not os.path.exists(self._path):
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Navigation: unreadable state file {self._path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def toggle_collapsed(self, node: Node) -> bool:
        """
        Flip the collapsed flag of a container.

        Leaves never enter the collapsed set; toggling one is ignored.

        Returns:
            bool: The node's collapsed state after the call.
        """
        if not node.is_container:
            logger.debug(f"Navigation: ignoring collapse toggle on leaf {node.id}")
            return False

        if node.id in self.state.collapsed_ids:
            self.state.collapsed_ids.discard(node.id)
        else:
            self.state.collapsed_ids.add(node.id)
        self.save()
        return node.id in self.state.collapsed_ids

    def select(self, node_id: Optional[str]) -> None:
        self.state.selected_id = node_id or None
        self.save()

    def clear_selection(self) -> None:
        self.select(None)

    def set_drawer_open(self, is_open: bool) -> None:
        self.state.drawer_open = bool(is_open)
        self.save()

    def toggle_drawer(self) -> bool:
        self.set_drawer_open(not self.state.drawer_open)
        return self.state.drawer_open

    def reset(self) -> None:
        """Back to defaults (root switch), persisted immediately."""
        self.state = NavigationState()
        self.save()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_collapsed(self, node: Node) -> bool:
        return node.is_container and node.id in self.state.collapsed_ids

    @property
    def selected_id(self) -> Optional[str]:
        return self.state.selected_id
