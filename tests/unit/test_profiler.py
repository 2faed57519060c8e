"""Tests for deriving criteria from booking history."""

import pytest

from househelp.core.config import MatchingConfig
from househelp.core.errors import RetrievalError, ValidationError
from househelp.core.schemas import GeoPoint, HistoricalInteraction, ServiceType
from househelp.pipeline.profiler import PreferenceProfiler, build_preferences
from househelp.stores.base import HistoryStore
from househelp.stores.memory import InMemoryHistoryStore

HOME = GeoPoint(latitude=-1.95, longitude=30.06)
CONFIG = MatchingConfig()

CLEANING = ServiceType.CLEANING
COOKING = ServiceType.COOKING
LAUNDRY = ServiceType.LAUNDRY
CHILDCARE = ServiceType.CHILDCARE
GARDENING = ServiceType.GARDENING


def _booking(*services: ServiceType, provider: str | None = None) -> HistoricalInteraction:
    return HistoricalInteraction(service_types=services, provider_id=provider)


class SpyHistoryStore(HistoryStore):
    """Records calls; can fail on either method."""

    def __init__(
        self,
        bookings: list[HistoricalInteraction],
        home: GeoPoint | None = HOME,
        fail_bookings: bool = False,
        fail_home: bool = False,
    ) -> None:
        self._bookings = bookings
        self._home = home
        self._fail_bookings = fail_bookings
        self._fail_home = fail_home
        self.booking_limits: list[int] = []
        self.home_calls = 0

    async def recent_bookings(self, user_id: str, limit: int) -> list[HistoricalInteraction]:
        self.booking_limits.append(limit)
        if self._fail_bookings:
            raise OSError("disk error")
        return self._bookings[:limit]

    async def home_location(self, user_id: str) -> GeoPoint | None:
        self.home_calls += 1
        if self._fail_home:
            raise TimeoutError("profile lookup timed out")
        return self._home


# ---------------------------------------------------------------------------
# build_preferences
# ---------------------------------------------------------------------------


class TestBuildPreferences:
    def test_top_three_by_frequency(self) -> None:
        bookings = [
            _booking(CLEANING),
            _booking(CLEANING, COOKING),
            _booking(LAUNDRY),
            _booking(CLEANING, LAUNDRY),
            _booking(CHILDCARE),
        ]
        prefs = build_preferences(bookings, HOME, CONFIG)
        assert prefs.criteria.services == frozenset({CLEANING, LAUNDRY, COOKING})

    def test_ties_keep_first_seen_order(self) -> None:
        bookings = [_booking(GARDENING), _booking(CHILDCARE), _booking(COOKING), _booking(LAUNDRY)]
        prefs = build_preferences(bookings, HOME, CONFIG)
        assert prefs.criteria.services == frozenset({GARDENING, CHILDCARE, COOKING})

    def test_fewer_than_three_services(self) -> None:
        prefs = build_preferences([_booking(CLEANING), _booking(CLEANING)], HOME, CONFIG)
        assert prefs.criteria.services == frozenset({CLEANING})

    def test_defaults_applied(self) -> None:
        prefs = build_preferences([_booking(CLEANING)], HOME, CONFIG)
        assert prefs.criteria.location == HOME
        assert prefs.criteria.radius_km == 20.0
        assert prefs.criteria.min_rating == 4.0
        assert prefs.criteria.max_hourly_rate is None
        assert prefs.criteria.languages == frozenset()

    def test_distinct_booked_providers(self) -> None:
        bookings = [
            _booking(CLEANING, provider="w-1"),
            _booking(COOKING, provider="w-2"),
            _booking(CLEANING, provider="w-1"),
            _booking(LAUNDRY),
        ]
        prefs = build_preferences(bookings, HOME, CONFIG)
        assert prefs.booked_provider_ids == frozenset({"w-1", "w-2"})

    def test_top_services_configurable(self) -> None:
        config = MatchingConfig(top_services=1)
        bookings = [_booking(COOKING), _booking(CLEANING), _booking(CLEANING)]
        prefs = build_preferences(bookings, HOME, config)
        assert prefs.criteria.services == frozenset({CLEANING})


# ---------------------------------------------------------------------------
# PreferenceProfiler
# ---------------------------------------------------------------------------


class TestDeriveCriteria:
    async def test_no_bookings_returns_none(self) -> None:
        store = SpyHistoryStore([])
        assert await PreferenceProfiler(store, CONFIG).derive_criteria("h-1") is None
        assert store.home_calls == 0

    async def test_reads_history_window(self) -> None:
        store = SpyHistoryStore([_booking(CLEANING)])
        await PreferenceProfiler(store, CONFIG).derive_criteria("h-1")
        assert store.booking_limits == [10]

    async def test_only_window_counts(self) -> None:
        """Bookings beyond the window do not affect the derived services."""
        bookings = [_booking(CLEANING)] * 10 + [_booking(GARDENING)] * 5
        store = SpyHistoryStore(bookings)
        prefs = await PreferenceProfiler(store, CONFIG).derive_criteria("h-1")
        assert prefs is not None
        assert prefs.criteria.services == frozenset({CLEANING})

    async def test_with_in_memory_store(self) -> None:
        store = InMemoryHistoryStore(
            bookings={"h-1": [_booking(CLEANING, provider="w-9")]},
            locations={"h-1": HOME},
        )
        prefs = await PreferenceProfiler(store, CONFIG).derive_criteria("h-1")
        assert prefs is not None
        assert prefs.criteria.services == frozenset({CLEANING})
        assert prefs.booked_provider_ids == frozenset({"w-9"})

    async def test_missing_home_location(self) -> None:
        store = SpyHistoryStore([_booking(CLEANING)], home=None)
        with pytest.raises(ValidationError, match="home location"):
            await PreferenceProfiler(store, CONFIG).derive_criteria("h-1")

    async def test_bookings_failure_wrapped(self) -> None:
        store = SpyHistoryStore([], fail_bookings=True)
        with pytest.raises(RetrievalError) as exc_info:
            await PreferenceProfiler(store, CONFIG).derive_criteria("h-1")
        assert isinstance(exc_info.value.__cause__, OSError)

    async def test_home_failure_wrapped(self) -> None:
        store = SpyHistoryStore([_booking(CLEANING)], fail_home=True)
        with pytest.raises(RetrievalError, match="home location"):
            await PreferenceProfiler(store, CONFIG).derive_criteria("h-1")

    async def test_bookings_without_services_return_none(self) -> None:
        store = SpyHistoryStore([_booking(provider="w-1"), _booking(provider="w-2")])
        assert await PreferenceProfiler(store, CONFIG).derive_criteria("h-1") is None
        assert store.home_calls == 0

    async def test_bookings_partly_without_services(self) -> None:
        store = SpyHistoryStore([_booking(provider="w-1"), _booking(COOKING)])
        prefs = await PreferenceProfiler(store, CONFIG).derive_criteria("h-1")
        assert prefs is not None
        assert prefs.criteria.services == frozenset({COOKING})
        assert prefs.booked_provider_ids == frozenset({"w-1"})
