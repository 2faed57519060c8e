"""Hard filters applied to candidate providers before scoring.

Filter order:
  1. MinRatingFilter        — scalar, cheapest
  2. MaxHourlyRateFilter    — scalar
  3. MinExperienceFilter    — scalar
  4. VerifiedFilter         — scalar
  5. ServiceContainmentFilter
  6. LanguageOverlapFilter
  7. AvailabilityFilter
  8. RadiusFilter           — haversine per candidate, most expensive

Stores that can push the scalar filters down into their query language run
``build_filters(criteria, scalar=False)`` for the rest.
"""

import logging
from collections.abc import Callable

from househelp.core.schemas import (
    AvailabilityWindow,
    CandidateProvider,
    GeoPoint,
    SearchCriteria,
    ServiceType,
)
from househelp.pipeline.distance import distance_km

logger = logging.getLogger(__name__)

# A filter is a callable that takes candidates and returns a subset.
Filter = Callable[[list[CandidateProvider]], list[CandidateProvider]]


class _PredicateFilter:
    """Keeps candidates for which ``_keep`` is true and logs removals."""

    def __call__(self, candidates: list[CandidateProvider]) -> list[CandidateProvider]:
        result = [c for c in candidates if self._keep(c)]
        removed = len(candidates) - len(result)
        if removed:
            logger.debug("%s: removed %d candidates", type(self).__name__, removed)
        return result

    def _keep(self, candidate: CandidateProvider) -> bool:
        raise NotImplementedError


class MinRatingFilter(_PredicateFilter):
    """Keep candidates rated at or above the floor."""

    def __init__(self, min_rating: float) -> None:
        self._min_rating = min_rating

    def _keep(self, candidate: CandidateProvider) -> bool:
        return candidate.rating >= self._min_rating


class MaxHourlyRateFilter(_PredicateFilter):
    """Keep candidates charging at most the ceiling."""

    def __init__(self, max_hourly_rate: float) -> None:
        self._max_rate = max_hourly_rate

    def _keep(self, candidate: CandidateProvider) -> bool:
        return candidate.hourly_rate <= self._max_rate


class MinExperienceFilter(_PredicateFilter):
    def __init__(self, min_years: float) -> None:
        self._min_years = min_years

    def _keep(self, candidate: CandidateProvider) -> bool:
        return candidate.experience_years >= self._min_years


class VerifiedFilter(_PredicateFilter):
    def _keep(self, candidate: CandidateProvider) -> bool:
        return candidate.verified


class ServiceContainmentFilter(_PredicateFilter):
    """Keep candidates whose whole service set lies within the requested set.

    A provider offering cleaning and cooking is dropped from a cleaning-only
    request. This is containment, not "offers at least one requested
    service", and matches the marketplace's existing query behaviour.
    TODO: product review of containment vs. overlap before changing it.
    """

    def __init__(self, services: frozenset[ServiceType]) -> None:
        self._services = services

    def _keep(self, candidate: CandidateProvider) -> bool:
        return candidate.services <= self._services


class LanguageOverlapFilter(_PredicateFilter):
    """Keep candidates speaking at least one requested language."""

    def __init__(self, languages: frozenset[str]) -> None:
        self._languages = languages

    def _keep(self, candidate: CandidateProvider) -> bool:
        return not candidate.languages.isdisjoint(self._languages)


class AvailabilityFilter(_PredicateFilter):
    """Keep candidates with a weekly slot covering the requested window."""

    def __init__(self, window: AvailabilityWindow) -> None:
        self._window = window

    def _keep(self, candidate: CandidateProvider) -> bool:
        return any(slot.covers(self._window) for slot in candidate.availability)


class RadiusFilter(_PredicateFilter):
    """Keep candidates within ``radius_km`` (inclusive) of the centre."""

    def __init__(self, center: GeoPoint, radius_km: float) -> None:
        self._center = center
        self._radius_km = radius_km

    def _keep(self, candidate: CandidateProvider) -> bool:
        return distance_km(self._center, candidate.location) <= self._radius_km


def build_filters(criteria: SearchCriteria, *, scalar: bool = True) -> list[Filter]:
    """Build the filter chain for every constraint present in ``criteria``.

    With ``scalar=False`` the rating, rate, experience and verified filters
    are left out for stores that already applied them.
    """
    filters: list[Filter] = []
    if scalar:
        if criteria.min_rating is not None:
            filters.append(MinRatingFilter(criteria.min_rating))
        if criteria.max_hourly_rate is not None:
            filters.append(MaxHourlyRateFilter(criteria.max_hourly_rate))
        if criteria.min_experience_years is not None:
            filters.append(MinExperienceFilter(criteria.min_experience_years))
        if criteria.verified_only:
            filters.append(VerifiedFilter())
    if criteria.services:
        filters.append(ServiceContainmentFilter(criteria.services))
    if criteria.languages:
        filters.append(LanguageOverlapFilter(criteria.languages))
    if criteria.availability is not None:
        filters.append(AvailabilityFilter(criteria.availability))
    if criteria.location is not None:
        filters.append(RadiusFilter(criteria.location, criteria.radius_km))
    return filters


def run_filter_chain(
    candidates: list[CandidateProvider],
    filters: list[Filter],
) -> list[CandidateProvider]:
    """Apply filters in order, returning the surviving candidates."""
    result = candidates
    for f in filters:
        result = f(result)
    return result


def order_by_rating(candidates: list[CandidateProvider]) -> list[CandidateProvider]:
    """Highest rating first; ties by id so the order is stable across stores."""
    return sorted(candidates, key=lambda c: (-c.rating, c.id))
