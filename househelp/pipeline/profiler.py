"""Derive implicit search criteria from a household's booking history."""

import logging
from collections import Counter
from collections.abc import Awaitable
from typing import TypeVar

from househelp.core.config import MatchingConfig
from househelp.core.errors import MatchingError, RetrievalError, ValidationError
from househelp.core.schemas import (
    GeoPoint,
    HistoricalInteraction,
    HouseholdPreferences,
    SearchCriteria,
    ServiceType,
)
from househelp.stores.base import HistoryStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_preferences(
    bookings: list[HistoricalInteraction],
    home: GeoPoint,
    config: MatchingConfig,
) -> HouseholdPreferences:
    """Turn recent bookings (newest first) into criteria plus booked providers.

    The ``config.top_services`` most frequent service types become the
    requested services; equal counts keep the order first seen.
    """
    frequency: Counter[ServiceType] = Counter()
    for booking in bookings:
        frequency.update(booking.service_types)
    top = [service for service, _ in frequency.most_common(config.top_services)]

    booked = frozenset(b.provider_id for b in bookings if b.provider_id)

    criteria = SearchCriteria(
        services=frozenset(top),
        location=home,
        radius_km=config.recommendation_radius_km,
        min_rating=config.recommendation_min_rating,
    )
    return HouseholdPreferences(criteria=criteria, booked_provider_ids=booked)


class PreferenceProfiler:
    """Reads booking history and home location from a ``HistoryStore``."""

    def __init__(self, store: HistoryStore, config: MatchingConfig) -> None:
        self._store = store
        self._config = config

    async def derive_criteria(self, user_id: str) -> HouseholdPreferences | None:
        """Return preferences for ``user_id``, or None when no criteria can be derived.

        That is the case with no bookings, or bookings that name no service type.

        Raises:
            ValidationError: the household has bookings but no home location.
            RetrievalError: a history store call failed.
        """
        bookings = await self._call(
            self._store.recent_bookings(user_id, self._config.history_window),
            "recent bookings",
        )
        if not bookings:
            logger.info("No booking history for household %s", user_id)
            return None
        if not any(b.service_types for b in bookings):
            logger.info("No service types in booking history for household %s", user_id)
            return None

        home = await self._call(self._store.home_location(user_id), "home location")
        if home is None:
            msg = f"household {user_id} has no home location to search around"
            raise ValidationError(msg)

        prefs = build_preferences(bookings, home, self._config)
        logger.info(
            "Household %s: %d bookings, services [%s], %d providers booked before",
            user_id,
            len(bookings),
            ", ".join(s.value for s in sorted(prefs.criteria.services, key=lambda s: s.value)),
            len(prefs.booked_provider_ids),
        )
        return prefs

    async def _call(self, awaitable: Awaitable[T], what: str) -> T:
        try:
            return await awaitable
        except MatchingError:
            raise
        except Exception as e:
            msg = f"history store failed to load {what}: {e}"
            raise RetrievalError(msg) from e
