from __future__ import annotations

"""
Remote Listing Client.

Cache-through access to node metadata and child listings. Every call checks
the durable tier first; a miss goes to the store and the parsed result is
written back keyed by request kind and node id.
"""

import logging
from typing import Any, Dict, List, Protocol

from drivegames.core.services.cache import CacheKind, TieredCache
from drivegames.domain.errors import Malformed, RateLimited, user_message
from drivegames.domain.models import RemoteEntry

logger = logging.getLogger(__name__)


class DriveProtocol(Protocol):
    def get_file_metadata(self, file_id: str) -> Dict[str, Any]: ...

    def list_children(self, parent_id: str) -> List[Dict[str, Any]]: ...


class RemoteListingClient:
    """
    Metadata and listing access through the tiered cache.

    Args:
        drive: Raw store client.
        cache: Tiered cache; only its durable tier is used here.
    """

    def __init__(self, drive: DriveProtocol, cache: TieredCache) -> None:
        self._drive = drive
        self._cache = cache

    def get_metadata(self, node_id: str) -> RemoteEntry:
        """
        Return name and container flag of one node.

        Raises:
            RemoteError: RateLimited, NotFound, TransientNetwork or Malformed.
        """
        cached = self._cache.get(CacheKind.METADATA, node_id)
        if cached is not None:
            try:
                return RemoteEntry.from_dict(cached)
            except (KeyError, TypeError):
                logger.warning(f"Listing: ignoring corrupt cached metadata for {node_id}")

        raw = self._call("metadata", self._drive.get_file_metadata, node_id)
        entry = _parse_entry(raw, node_id)
        self._cache.set(CacheKind.METADATA, node_id, entry.to_dict())
        return entry

    def get_children(self, node_id: str) -> List[RemoteEntry]:
        """
        Return every direct child in store order, pagination already resolved.

        Raises:
            RemoteError: RateLimited, NotFound, TransientNetwork or Malformed.
        """
        cached = self._cache.get(CacheKind.CHILDREN, node_id)
        if isinstance(cached, list):
            try:
                return [RemoteEntry.from_dict(item) for item in cached]
            except (KeyError, TypeError):
                logger.warning(f"Listing: ignoring corrupt cached listing for {node_id}")

        raw_items = self._call("listing", self._drive.list_children, node_id)
        entries = [_parse_entry(item, node_id) for item in raw_items]
        self._cache.set(CacheKind.CHILDREN, node_id, [e.to_dict() for e in entries])
        logger.info(f"Listing: fetched {len(entries)} children of {node_id}")
        return entries

    @staticmethod
    def _call(what: str, fn: Any, node_id: str) -> Any:
        try:
            return fn(node_id)
        except RateLimited as e:
            logger.warning(f"Listing: {what} for {node_id} rate limited ({e}). {user_message(e)}")
            raise


def _parse_entry(raw: Any, context_id: str) -> RemoteEntry:
    if not isinstance(raw, dict) or not raw.get("id") or not isinstance(raw.get("name"), str):
        raise Malformed(f"Record in response for {context_id} lacks 'id' or 'name'.")
    return RemoteEntry.from_drive(raw)
