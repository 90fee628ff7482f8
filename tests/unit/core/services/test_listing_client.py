from __future__ import annotations

"""
Unit tests for the cache-through Remote Listing Client.
"""

from typing import Dict
from unittest.mock import MagicMock

import pytest

from drivegames.core.services.cache import CacheKind, TieredCache
from drivegames.core.services.listing import RemoteListingClient
from drivegames.domain.errors import Malformed, RateLimited


@pytest.fixture
def listing(fake_drive, tiered_cache: TieredCache) -> RemoteListingClient:
    fake_drive.add_folder("root", "Games")
    fake_drive.add_folder("f1", "Topic", parent="root")
    fake_drive.add_document("d1", "quiz.json", "root", {"game_type": "quiz"})
    return RemoteListingClient(fake_drive, tiered_cache)


def test_metadata_is_fetched_once_then_cached(listing, fake_drive) -> None:
    first = listing.get_metadata("root")
    second = listing.get_metadata("root")

    assert first == second
    assert first.is_container is True
    assert fake_drive.calls[("get_file_metadata", "root")] == 1


def test_children_keep_store_order_and_are_cached(listing, fake_drive, tiered_cache) -> None:
    children = listing.get_children("root")

    assert [c.id for c in children] == ["f1", "d1"]
    assert listing.get_children("root") == children
    assert fake_drive.calls[("list_children", "root")] == 1
    assert tiered_cache.get(CacheKind.CHILDREN, "root")[0]["isContainer"] is True


def test_expired_listing_is_refetched(listing, fake_drive, clock: Dict[str, float]) -> None:
    listing.get_children("root")
    clock["now"] += 1800

    listing.get_children("root")

    assert fake_drive.calls[("list_children", "root")] == 2


def test_corrupt_cached_listing_is_ignored(listing, fake_drive, tiered_cache) -> None:
    tiered_cache.set(CacheKind.CHILDREN, "root", [{"no_id": True}])

    children = listing.get_children("root")

    assert len(children) == 2
    assert fake_drive.calls[("list_children", "root")] == 1


def test_record_without_name_is_malformed(tiered_cache) -> None:
    drive = MagicMock()
    drive.list_children.return_value = [{"id": "x", "mimeType": "application/json"}]
    listing = RemoteListingClient(drive, tiered_cache)

    with pytest.raises(Malformed):
        listing.get_children("root")
    assert tiered_cache.get(CacheKind.CHILDREN, "root") is None


def test_rate_limit_is_propagated_and_not_cached(listing, fake_drive, tiered_cache) -> None:
    fake_drive.fail("list_children", "root", RateLimited("429 quota", 429))

    with pytest.raises(RateLimited):
        listing.get_children("root")

    assert tiered_cache.get(CacheKind.CHILDREN, "root") is None
    assert len(listing.get_children("root")) == 2
