from __future__ import annotations

"""
Tree Builder.

Materializes the remote hierarchy one level at a time. Containers come back
as unloaded stubs and are filled in place by `ensure_loaded`, which allows at
most one in-flight load per node id: concurrent callers share the outcome of
the first call instead of issuing their own listing request.
"""

import logging
import os
import threading
from concurrent.futures import Future
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from drivegames.core.services.cache import CacheKind, TieredCache
from drivegames.core.services.listing import RemoteListingClient
from drivegames.domain import constants as const
from drivegames.domain.models import NOT_LOADED, Node, NodeKind, RemoteEntry

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# CLASSIFICATION AND ORDERING
# -----------------------------------------------------------------------------

def classify_leaf(entry: RemoteEntry) -> NodeKind:
    """
    Classify a leaf by file-name suffix, then by declared content type.

    Unrecognized leaves are OTHER: browsable, never dispatched as a game.
    """
    _, ext = os.path.splitext(entry.name)
    kind = const.KIND_BY_SUFFIX.get(ext.lower()) or const.KIND_BY_MIME.get(entry.mime_type.lower())
    return NodeKind(kind) if kind else NodeKind.OTHER


def sort_key(node: Node) -> Tuple[bool, str, str]:
    """Containers first, then code-point order of the name; id breaks ties."""
    return (not node.is_container, node.name, node.id)


# -----------------------------------------------------------------------------
# BUILDER
# -----------------------------------------------------------------------------

class TreeBuilder:
    """
    Lazy, level-at-a-time tree materialization.

    Args:
        listing: Cache-through metadata/listing client.
        cache: Tiered cache; the session tier holds expanded listings.
        generation: Returns the current root generation. Loads started under
            an older generation are not applied when they complete.
    """

    def __init__(
            self,
            listing: RemoteListingClient,
            cache: TieredCache,
            generation: Callable[[], int] = lambda: 0,
    ) -> None:
        self._listing = listing
        self._cache = cache
        self._generation = generation
        self._lock = threading.Lock()
        self._inflight: Dict[str, Future] = {}

    def make_root(self, entry: RemoteEntry) -> Node:
        return Node(
            id=entry.id,
            name=entry.name,
            is_container=True,
            generation=self._generation(),
        )

    def build_level(self, node_id: str, generation: Optional[int] = None) -> List[Node]:
        """
        Return the ordered direct children of a container.

        Args:
            node_id: Container id.
            generation: Root generation the caller is building for.

        Returns:
            List[Node]: Fresh nodes; containers are unloaded stubs.
        """
        gen = self._generation() if generation is None else generation

        cached = self._cache.get(CacheKind.TREE, node_id)
        if cached is not None:
            entries: List[RemoteEntry] = cached
        else:
            entries = self._listing.get_children(node_id)
            if gen == self._generation():
                self._cache.set(CacheKind.TREE, node_id, tuple(entries))

        nodes = [self._node_from_entry(e, gen) for e in entries]
        nodes.sort(key=sort_key)
        return nodes

    def ensure_loaded(self, node: Node) -> List[Node]:
        """
        Load a container's children exactly once.

        No-op for leaves and loaded containers. A caller arriving while a load
        for the same id is in flight waits for that load and gets its result
        (or its exception). On failure the node reverts to not-loaded.

        Returns:
            List[Node]: The node's children.

        Raises:
            RemoteError: The listing failure, propagated to every waiter.
        """
        if not node.is_container:
            return []

        with self._lock:
            if node.loaded:
                return node.children  # type: ignore[return-value]
            future = self._inflight.get(node.id)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[node.id] = future
                node.loading = True

        if not owner:
            logger.debug(f"Tree: joining in-flight load of {node.id}")
            return future.result()

        try:
            children = self.build_level(node.id, generation=node.generation)
        except BaseException as e:
            with self._lock:
                node.children = NOT_LOADED
                node.loading = False
                self._release(node.id, future)
            logger.error(f"Tree: loading '{node.name}' ({node.id}) failed: {e}")
            future.set_exception(e)
            raise

        with self._lock:
            node.loading = False
            self._release(node.id, future)
            stale = node.generation != self._generation()
            if not stale:
                node.children = children

        if stale:
            logger.info(f"Tree: discarded late listing for {node.id} from an earlier root.")
        else:
            logger.debug(f"Tree: '{node.name}' loaded with {len(children)} children.")
        future.set_result(children)
        return children

    def discard_inflight(self) -> None:
        """Forget in-flight loads so a new root never joins them."""
        with self._lock:
            self._inflight.clear()

    def _release(self, node_id: str, future: Future) -> None:
        if self._inflight.get(node_id) is future:
            del self._inflight[node_id]

    @staticmethod
    def _node_from_entry(entry: RemoteEntry, generation: int) -> Node:
        if entry.is_container:
            return Node(id=entry.id, name=entry.name, is_container=True, generation=generation)
        return Node(
            id=entry.id,
            name=entry.name,
            is_container=False,
            kind=classify_leaf(entry),
            children=[],
            generation=generation,
        )


# -----------------------------------------------------------------------------
# TREE QUERIES
# -----------------------------------------------------------------------------

def find_node(nodes: List[Node], node_id: str) -> Optional[Node]:
    """Depth-first search through loaded levels."""
    for n in nodes:
        if n.id == node_id:
            return n
        if n.is_container and n.loaded:
            found = find_node(n.children, node_id)  # type: ignore[arg-type]
            if found:
                return found
    return None


def find_path(nodes: List[Node], node_id: str) -> Optional[List[str]]:
    """Listed names from the top level down to the node."""
    for n in nodes:
        if n.id == node_id:
            return [n.name]
        if n.is_container and n.loaded:
            sub = find_path(n.children, node_id)  # type: ignore[arg-type]
            if sub:
                return [n.name] + sub
    return None


def iter_visible(
        nodes: List[Node],
        is_collapsed: Callable[[Node], bool],
        depth: int = 0,
) -> Iterator[Tuple[int, Node]]:
    """Yield (depth, node) for every node a reader would currently see."""
    for n in nodes:
        yield depth, n
        if n.is_container and n.loaded and not is_collapsed(n):
            yield from iter_visible(n.children, is_collapsed, depth + 1)  # type: ignore[arg-type]
