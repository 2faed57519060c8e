"""Abstract store interfaces the matching engine reads from."""

from abc import ABC, abstractmethod

from househelp.core.schemas import (
    CandidatePage,
    CandidateProvider,
    GeoPoint,
    HistoricalInteraction,
    SearchCriteria,
)


class CandidateStore(ABC):
    """Read-only source of candidate providers."""

    @abstractmethod
    async def query(self, criteria: SearchCriteria) -> CandidatePage:
        """Return providers passing every filter present in ``criteria``.

        Candidates come back ordered by rating, highest first.
        """

    @abstractmethod
    async def top_rated(self, min_rating: float, limit: int) -> list[CandidateProvider]:
        """Return up to ``limit`` providers rated ``>= min_rating``, best first."""


class HistoryStore(ABC):
    """Read-only source of household booking history."""

    @abstractmethod
    async def recent_bookings(self, user_id: str, limit: int) -> list[HistoricalInteraction]:
        """Return the household's most recent bookings, newest first."""

    @abstractmethod
    async def home_location(self, user_id: str) -> GeoPoint | None:
        """Return the household's stored home location, if any."""
