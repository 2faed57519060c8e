"""Candidate retrieval: validate a request, then run it against the store."""

import logging

from househelp.core.errors import MatchingError, RetrievalError, ValidationError
from househelp.core.schemas import CandidatePage, SearchCriteria
from househelp.stores.base import CandidateStore

logger = logging.getLogger(__name__)


def validate_criteria(criteria: SearchCriteria) -> None:
    """Reject criteria that cannot drive a search.

    Raises:
        ValidationError: no services requested, non-positive radius, or no
            location to centre the radius filter on.
    """
    if not criteria.services:
        msg = "at least one service type must be requested"
        raise ValidationError(msg)
    if criteria.radius_km <= 0:
        msg = f"radius_km must be positive, got {criteria.radius_km}"
        raise ValidationError(msg)
    if criteria.location is None:
        msg = "a location is required for the radius filter"
        raise ValidationError(msg)


class CandidateRetriever:
    """Applies the hard filters of a request through a ``CandidateStore``.

    Usage::

        retriever = CandidateRetriever(store)
        page = await retriever.retrieve(criteria)
    """

    def __init__(self, store: CandidateStore) -> None:
        self._store = store

    async def retrieve(self, criteria: SearchCriteria) -> CandidatePage:
        """Return the candidates passing every filter in ``criteria``.

        Raises:
            ValidationError: before touching the store, for unusable criteria.
            RetrievalError: if the store call fails. Not retried.
        """
        validate_criteria(criteria)
        services = ", ".join(sorted(s.value for s in criteria.services))
        logger.debug(
            "Retrieving candidates for [%s] within %.1f km",
            services, criteria.radius_km,
        )
        try:
            page = await self._store.query(criteria)
        except MatchingError:
            raise
        except Exception as e:
            msg = f"candidate store query failed: {e}"
            raise RetrievalError(msg) from e

        logger.info("Retrieved %d candidates (total %d)", len(page.candidates), page.total)
        return page
