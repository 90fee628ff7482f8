from __future__ import annotations

"""
Unit tests for the tier routing facade and the session tier.
"""

from typing import Dict

from drivegames.core.services.cache import CacheKind, SessionCache, TieredCache


def test_kinds_route_to_their_tier(tiered_cache: TieredCache) -> None:
    tiered_cache.set(CacheKind.METADATA, "n1", {"id": "n1"})
    tiered_cache.set(CacheKind.CHILDREN, "n1", [])
    tiered_cache.set(CacheKind.TREE, "n1", ("entries",))

    assert len(tiered_cache.durable) == 2
    assert tiered_cache.session.keys() == ["tree:n1"]
    assert tiered_cache.get(CacheKind.TREE, "n1") == ("entries",)
    assert tiered_cache.get("meta", "n1") == {"id": "n1"}


def test_session_tier_never_expires(tiered_cache: TieredCache, clock: Dict[str, float]) -> None:
    tiered_cache.set(CacheKind.TREE, "n1", ("a",))
    tiered_cache.set(CacheKind.METADATA, "n1", {"id": "n1"})
    clock["now"] += 10 ** 6

    assert tiered_cache.get(CacheKind.TREE, "n1") == ("a",)
    assert tiered_cache.get(CacheKind.METADATA, "n1") is None


def test_reset_clears_every_tier(tiered_cache: TieredCache) -> None:
    tiered_cache.set(CacheKind.METADATA, "n1", {"id": "n1"})
    tiered_cache.set(CacheKind.TREE, "n1", ("a",))

    tiered_cache.reset()

    assert len(tiered_cache.durable) == 0
    assert len(tiered_cache.session) == 0


def test_session_cache_keys_and_clear() -> None:
    cache = SessionCache(clock=lambda: 5.0)
    cache.set("tree", "a", 1)
    cache.set("tree", "b", 2)

    assert sorted(cache.keys()) == ["tree:a", "tree:b"]
    assert cache.get("tree", "missing") is None
    cache.clear()
    assert len(cache) == 0
