"""
Unit tests for CacheService and the broadcast channels.

Tests cover:
- TTL hits and misses
- Failed fetches never populate the cache
- Exact-key and prefix invalidation
- Broadcasting on clear, no re-broadcast on receive
- Data-changed listeners
- Cross-context invalidation through a BroadcastHub
"""

import pytest

from shopdesk.services import BroadcastHub, CacheService, CLEAR_CACHE
from shopdesk.services.cache_service import STATIC_TTL_SECONDS


class CountingFetcher:
    def __init__(self, value="data"):
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.value


# =============================================================================
# FETCH WITH CACHE TESTS
# =============================================================================


class TestFetchWithCache:
    """Tests for TTL-bounded reads."""

    def test_second_read_within_ttl_is_served_from_cache(self, cache: CacheService):
        """
        GIVEN a key fetched once
        WHEN it is read again before the TTL elapses
        THEN the fetcher is not called again
        """
        fetcher = CountingFetcher(["p1"])

        first = cache.fetch_with_cache("products", fetcher)
        second = cache.fetch_with_cache("products", fetcher)

        assert first == second == ["p1"]
        assert fetcher.calls == 1

    def test_read_after_ttl_refetches(self, cache: CacheService, clock):
        """
        GIVEN a cached key with the default 5 minute TTL
        WHEN 5 minutes pass
        THEN the fetcher runs again
        """
        fetcher = CountingFetcher()
        cache.fetch_with_cache("sales", fetcher)

        clock.advance(299)
        cache.fetch_with_cache("sales", fetcher)
        assert fetcher.calls == 1

        clock.advance(1)
        cache.fetch_with_cache("sales", fetcher)
        assert fetcher.calls == 2

    def test_static_ttl_keeps_metadata_for_thirty_minutes(self, cache: CacheService, clock):
        fetcher = CountingFetcher()
        cache.fetch_with_cache("brands", fetcher, ttl_seconds=STATIC_TTL_SECONDS)

        clock.advance(25 * 60)
        cache.fetch_with_cache("brands", fetcher, ttl_seconds=STATIC_TTL_SECONDS)

        assert fetcher.calls == 1

    def test_failed_fetch_is_not_cached(self, cache: CacheService):
        """
        GIVEN a fetcher that raises
        WHEN fetch_with_cache is called
        THEN the error propagates and nothing is stored
        """
        def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            cache.fetch_with_cache("users", failing)

        assert cache.get("users") is None
        assert cache.fetch_with_cache("users", CountingFetcher("ok")) == "ok"


# =============================================================================
# INVALIDATION TESTS
# =============================================================================


class TestClearCache:
    """Tests for exact and prefix invalidation."""

    def test_clear_removes_base_key_and_parameterized_variants(self, cache: CacheService):
        """
        GIVEN products, products_{"model":"iphone"} and productsx cached
        WHEN clear_cache(["products"]) runs
        THEN the first two are gone and productsx stays
        """
        cache.fetch_with_cache("products", CountingFetcher())
        cache.fetch_with_cache('products_{"model": "iphone"}', CountingFetcher())
        cache.fetch_with_cache("productsx", CountingFetcher())

        removed = cache.clear_cache(["products"])

        assert sorted(removed) == ["products", 'products_{"model": "iphone"}']
        assert cache.keys() == ["productsx"]

    def test_clear_broadcasts_message(self, cache: CacheService, broadcaster):
        cache.clear_cache(["sales", "products"])

        assert broadcaster.posted == [{
            "type": CLEAR_CACHE,
            "keys": ["sales", "products"],
            "prefixes": ["sales", "products"],
        }]

    def test_clear_notifies_listeners(self, cache: CacheService):
        received = []
        cache.subscribe(received.append)

        cache.clear_cache(["cash_sessions"])

        assert received == [["cash_sessions"]]

    def test_clear_all_drops_every_key(self, cache: CacheService):
        cache.fetch_with_cache("a", CountingFetcher())
        cache.fetch_with_cache("b_1", CountingFetcher())

        cache.clear_all()

        assert cache.keys() == []

    def test_refetch_after_clear(self, cache: CacheService):
        fetcher = CountingFetcher()
        cache.fetch_with_cache("users", fetcher)

        cache.clear_cache(["users"])
        cache.fetch_with_cache("users", fetcher)

        assert fetcher.calls == 2


class TestHandleBroadcast:
    """Tests for invalidations arriving from other contexts."""

    def test_received_clear_removes_entries_without_rebroadcast(self, cache, broadcaster):
        """
        GIVEN a cached sales_all_all entry
        WHEN a CLEAR_CACHE message for "sales" arrives
        THEN the entry is removed, listeners fire and nothing is posted back
        """
        cache.fetch_with_cache("sales_all_all", CountingFetcher())
        received = []
        cache.subscribe(received.append)

        broadcaster.receive({"type": CLEAR_CACHE, "keys": ["sales"], "prefixes": ["sales"]})

        assert cache.get("sales_all_all") is None
        assert received == [["sales"]]
        assert broadcaster.posted == []

    def test_unrelated_message_is_ignored(self, cache, broadcaster):
        cache.fetch_with_cache("users", CountingFetcher())

        broadcaster.receive({"type": "PING"})

        assert cache.get("users") is not None


class TestListeners:
    def test_failing_listener_does_not_block_others(self, cache: CacheService):
        received = []

        def broken(keys):
            raise ValueError("listener bug")

        cache.subscribe(broken)
        cache.subscribe(received.append)

        cache.clear_cache(["products"])

        assert received == [["products"]]

    def test_unsubscribe_stops_notifications(self, cache: CacheService):
        received = []
        unsubscribe = cache.subscribe(received.append)

        unsubscribe()
        cache.clear_cache(["products"])

        assert received == []


# =============================================================================
# CROSS-CONTEXT TESTS
# =============================================================================


class TestBroadcastHub:
    """Two caches attached to the same named channel."""

    def test_clear_in_one_context_invalidates_the_other(self, clock):
        hub = BroadcastHub()
        cache_a = CacheService(broadcaster=hub.open("app_cache_sync"), clock=clock)
        cache_b = CacheService(broadcaster=hub.open("app_cache_sync"), clock=clock)
        cache_a.fetch_with_cache("products", CountingFetcher())
        cache_b.fetch_with_cache("products", CountingFetcher())

        cache_a.clear_cache(["products"])

        assert cache_b.get("products") is None

    def test_sender_does_not_receive_its_own_message(self, clock):
        hub = BroadcastHub()
        cache_a = CacheService(broadcaster=hub.open("app_cache_sync"), clock=clock)
        CacheService(broadcaster=hub.open("app_cache_sync"), clock=clock)
        notifications = []
        cache_a.subscribe(notifications.append)

        cache_a.clear_cache(["sales"])

        # Only the local notification, no echo from the channel
        assert notifications == [["sales"]]

    def test_other_channel_names_are_isolated(self, clock):
        hub = BroadcastHub()
        cache_a = CacheService(broadcaster=hub.open("app_cache_sync"), clock=clock)
        cache_b = CacheService(broadcaster=hub.open("other"), clock=clock)
        cache_b.fetch_with_cache("products", CountingFetcher())

        cache_a.clear_cache(["products"])

        assert cache_b.get("products") is not None

    def test_closed_channel_stops_receiving(self, clock):
        hub = BroadcastHub()
        cache_a = CacheService(broadcaster=hub.open("app_cache_sync"), clock=clock)
        cache_b = CacheService(broadcaster=hub.open("app_cache_sync"), clock=clock)
        cache_b.fetch_with_cache("products", CountingFetcher())

        cache_b.close()
        cache_a.clear_cache(["products"])

        assert cache_b.get("products") is not None
