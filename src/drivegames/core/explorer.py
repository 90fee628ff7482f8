from __future__ import annotations

"""
Explorer Controller.

Owns the single application state object (current root, its generation and
the materialized tree) and wires the caches, tree builder, navigation store,
payload resolver and dispatcher together. Switching roots is one reset of
that object plus a clear of every cache tier.
"""

import logging
import time
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from drivegames.core.resolution.dispatcher import DispatchHandle, Dispatcher, ViewContainer
from drivegames.core.resolution.resolver import PayloadResolver, ResolvedPayload
from drivegames.core.services.cache import DurableCache, TieredCache
from drivegames.core.services.listing import RemoteListingClient
from drivegames.core.services.navigation import NavigationStore
from drivegames.core.services.payload_cache import PayloadCache
from drivegames.core.tree.builder import TreeBuilder, find_node, find_path, iter_visible
from drivegames.domain.config import ExplorerSettings
from drivegames.domain.constants import DEFAULT_ROOT_NAME
from drivegames.domain.errors import (
    ConfigurationError,
    DriveGamesError,
    InternalContractViolation,
    Malformed,
    user_message,
)
from drivegames.domain.models import Node, NodeKind
from drivegames.infra.network import DriveClient
from drivegames.renderers.base import GameRenderer
from drivegames.renderers.games import default_registry

logger = logging.getLogger(__name__)

PRESENTATION_PLACEHOLDER = "PDF display not implemented yet."
OTHER_PLACEHOLDER = "This file type cannot be opened as a game."


# -----------------------------------------------------------------------------
# STATE AND RESULTS
# -----------------------------------------------------------------------------

@dataclass
class AppState:
    """
    Everything that belongs to the currently browsed root.

    Attributes:
        root_id: Id of the browsed root container.
        root_name: Display name of the root.
        generation: Incremented on every root switch.
        root: The root node, once its metadata is known.
    """
    root_id: str = ""
    root_name: str = DEFAULT_ROOT_NAME
    generation: int = 0
    root: Optional[Node] = None

    @property
    def nodes(self) -> List[Node]:
        if self.root is None or not self.root.loaded:
            return []
        return self.root.children  # type: ignore[return-value]


@dataclass
class ViewResult:
    """What the content area shows after a selection."""
    ok: bool
    kind: str
    title: str = ""
    path: List[str] = field(default_factory=list)
    message: str = ""
    children: List[str] = field(default_factory=list)
    resolved: Optional[ResolvedPayload] = None
    handle: Optional[DispatchHandle] = None


# -----------------------------------------------------------------------------
# CONTROLLER
# -----------------------------------------------------------------------------

class ExplorerController:
    """
    Args:
        settings: Validated explorer settings.
        drive: Store client; built from settings when omitted.
        durable: Durable cache tier; built from settings when omitted.
        navigation: Navigation store; built from settings when omitted.
        registry: Renderer identity -> handler value.
        clock: Time source for the durable tier.
        executor: Optional executor for renderer initialization.
    """

    def __init__(
            self,
            settings: ExplorerSettings,
            drive: Optional[Any] = None,
            durable: Optional[DurableCache] = None,
            navigation: Optional[NavigationStore] = None,
            registry: Optional[Mapping[str, GameRenderer]] = None,
            clock: Callable[[], float] = time.time,
            executor: Optional[Executor] = None,
    ) -> None:
        self.settings = settings
        self.drive = drive or DriveClient(
            settings.api_key,
            endpoint=settings.files_endpoint,
            page_size=settings.page_size,
            timeout=settings.request_timeout,
        )
        self.state = AppState(root_id=settings.root_folder_id)

        self.cache = TieredCache(durable or DurableCache(
            settings.resolved_cache_db_path(),
            ttl_seconds=settings.durable_ttl_seconds,
            clock=clock,
        ))
        self.listing = RemoteListingClient(self.drive, self.cache)
        self.builder = TreeBuilder(self.listing, self.cache, generation=lambda: self.state.generation)
        self.navigation = navigation or NavigationStore(settings.resolved_state_path())

        self.payload_cache = PayloadCache()
        self.resolver = PayloadResolver(self.drive.download_json, self.payload_cache)
        self.dispatcher = Dispatcher(
            registry if registry is not None else default_registry(),
            self.payload_cache,
            fetch_document=self.drive.download_json,
            executor=executor,
        )
        self.container = ViewContainer()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> Node:
        """Rehydrate navigation, sweep expired cache rows and open the configured root."""
        self.navigation.load()
        self.cache.invalidate_expired()
        return self.open_root()

    def open_root(self, root_id: Optional[str] = None) -> Node:
        """
        Fetch the root's metadata and first level.

        This is the only failure that blocks the whole view.

        Raises:
            ConfigurationError: No root id configured.
            RemoteError: Root metadata or listing could not be fetched.
        """
        target = root_id or self.state.root_id
        if not target:
            raise ConfigurationError("Root folder id is missing.")

        meta = self.listing.get_metadata(target)
        if not meta.is_container:
            raise Malformed(f"Root {target} is not a folder.")

        self.state.root_id = target
        self.state.root_name = meta.name or DEFAULT_ROOT_NAME
        self.state.root = self.builder.make_root(meta)
        self.builder.ensure_loaded(self.state.root)

        # Start state: nothing selected, empty content area
        self.navigation.clear_selection()
        self.container.clear()
        logger.info(f"Explorer: opened root '{self.state.root_name}' ({target}), generation {self.state.generation}")
        return self.state.root

    def switch_root(self, root_id: str) -> Node:
        """Discard everything tied to the current root, then open another one."""
        logger.info(f"Explorer: switching root {self.state.root_id} -> {root_id}")
        self.state.generation += 1
        self.state.root = None
        self.state.root_id = root_id
        self.state.root_name = DEFAULT_ROOT_NAME

        self.builder.discard_inflight()
        self.cache.reset()
        self.payload_cache.clear()
        self.container.clear()
        self.navigation.reset()
        return self.open_root(root_id)

    def close(self) -> None:
        close = getattr(self.drive, "close", None)
        if callable(close):
            close()

    # -------------------------------------------------------------------------
    # Tree interaction
    # -------------------------------------------------------------------------

    def node(self, node_id: str) -> Optional[Node]:
        root = self.state.root
        if root is not None and root.id == node_id:
            return root
        return find_node(self.state.nodes, node_id)

    def path_of(self, node_id: str) -> List[str]:
        return find_path(self.state.nodes, node_id) or []

    def toggle(self, node_id: str) -> bool:
        """
        Flip a container's collapsed flag; expanding loads it if needed.

        A container that has never been loaded is shown collapsed, so its
        first toggle expands and loads it.

        Returns:
            bool: True if the node is collapsed afterwards.

        Raises:
            KeyError: Unknown node id.
            RemoteError: The expansion load failed (the node stays unloaded).
        """
        node = self._require(node_id)
        if node.is_container and not node.loaded and not self.navigation.is_collapsed(node):
            self.builder.ensure_loaded(node)
            return False

        collapsed = self.navigation.toggle_collapsed(node)
        if node.is_container and not collapsed:
            self.builder.ensure_loaded(node)
        return collapsed

    def expand(self, node_id: str) -> List[Node]:
        """Make a container visible and loaded."""
        node = self._require(node_id)
        if self.navigation.is_collapsed(node):
            self.navigation.toggle_collapsed(node)
        return self.builder.ensure_loaded(node)

    def is_collapsed(self, node: Node) -> bool:
        return self.navigation.is_collapsed(node)

    def visible_nodes(self) -> List[Tuple[int, Node]]:
        return list(iter_visible(self.state.nodes, self.navigation.is_collapsed))

    def set_drawer_open(self, is_open: bool) -> None:
        self.navigation.set_drawer_open(is_open)

    def toggle_drawer(self) -> bool:
        return self.navigation.toggle_drawer()

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select(self, node_id: str) -> ViewResult:
        """
        Select a node and produce the content view.

        Failures are confined to the selected node or document and returned
        as a failed ViewResult. A dispatch contract violation is re-raised.
        """
        node = self.node(node_id)
        if node is None:
            return ViewResult(ok=False, kind="error", message=f"Unknown node {node_id}.")

        self.navigation.select(node_id)
        title = node.name
        path = self.path_of(node_id) or [node.name]

        try:
            if node.is_container:
                children = self.builder.ensure_loaded(node)
                self.container.clear()
                return ViewResult(
                    ok=True, kind="folder", title=title, path=path,
                    children=[c.name for c in children],
                )

            if node.kind is NodeKind.PRESENTATION:
                self.container.clear()
                return ViewResult(ok=True, kind="presentation", title=title, path=path,
                                  message=PRESENTATION_PLACEHOLDER)

            if node.kind is not NodeKind.STRUCTURED:
                self.container.clear()
                return ViewResult(ok=False, kind="other", title=title, path=path, message=OTHER_PLACEHOLDER)

            return self._open_game(node, title, path)

        except InternalContractViolation:
            raise
        except DriveGamesError as e:
            logger.error(f"Explorer: opening '{node.name}' ({node.id}) failed: {e}")
            return ViewResult(ok=False, kind="error", title=title, path=path, message=user_message(e))

    def resolve(self, document_id: str) -> ResolvedPayload:
        return self.resolver.resolve(document_id)

    def _open_game(self, node: Node, title: str, path: List[str]) -> ViewResult:
        resolved = self.resolver.resolve(node.id)
        handle = self.dispatcher.dispatch(node.id, resolved.resolved_type, resolved.payload, self.container)
        return ViewResult(
            ok=True, kind="game", title=title, path=path,
            resolved=resolved, handle=handle,
        )

    def _require(self, node_id: str) -> Node:
        node = self.node(node_id)
        if node is None:
            raise KeyError(node_id)
        return node

    def snapshot(self) -> Dict[str, Any]:
        """Plain summary of the explorer state for diagnostics."""
        return {
            "root_id": self.state.root_id,
            "root_name": self.state.root_name,
            "generation": self.state.generation,
            "navigation": self.navigation.state.to_dict(),
            "durable_entries": len(self.cache.durable),
            "session_entries": len(self.cache.session),
            "cached_payloads": len(self.payload_cache),
        }
