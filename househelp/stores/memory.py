"""In-memory stores backed by plain lists. Useful for tests and embedding."""

from collections.abc import Iterable

from househelp.core.schemas import (
    CandidatePage,
    CandidateProvider,
    GeoPoint,
    HistoricalInteraction,
    SearchCriteria,
)
from househelp.pipeline.filters import build_filters, order_by_rating, run_filter_chain
from househelp.stores.base import CandidateStore, HistoryStore


class InMemoryCandidateStore(CandidateStore):
    """Runs the full filter chain over a fixed provider list."""

    def __init__(self, providers: Iterable[CandidateProvider]) -> None:
        self._providers = list(providers)

    async def query(self, criteria: SearchCriteria) -> CandidatePage:
        survivors = run_filter_chain(self._providers, build_filters(criteria))
        ordered = order_by_rating(survivors)
        return CandidatePage(candidates=ordered, total=len(ordered))

    async def top_rated(self, min_rating: float, limit: int) -> list[CandidateProvider]:
        eligible = [p for p in self._providers if p.rating >= min_rating]
        return order_by_rating(eligible)[:limit]


class InMemoryHistoryStore(HistoryStore):
    """Booking history keyed by household id.

    Bookings are stored oldest first, the order they were made in.
    """

    def __init__(
        self,
        bookings: dict[str, list[HistoricalInteraction]] | None = None,
        locations: dict[str, GeoPoint] | None = None,
    ) -> None:
        self._bookings = {k: list(v) for k, v in (bookings or {}).items()}
        self._locations = dict(locations or {})

    def add_booking(self, user_id: str, booking: HistoricalInteraction) -> None:
        self._bookings.setdefault(user_id, []).append(booking)

    async def recent_bookings(self, user_id: str, limit: int) -> list[HistoricalInteraction]:
        history = self._bookings.get(user_id, [])
        return list(reversed(history))[:limit]

    async def home_location(self, user_id: str) -> GeoPoint | None:
        return self._locations.get(user_id)
