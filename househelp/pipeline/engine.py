"""Matching engine: wires profiler, retriever, scorer and ranker.

Paths:
  1. Explicit search   — caller's criteria → retrieve → score → rank
  2. History-driven    — profiler → retrieve → score → rank (novelty first)
  3. No-history        — top-rated providers, score = rating × 20, no distance

Each stage completes before the next starts. Store failures propagate as
RetrievalError and end the call; nothing is retried.
"""

import logging
from enum import Enum

from househelp.core.config import MatchingConfig, ScoringConfig
from househelp.core.errors import MatchingError, RetrievalError, ValidationError
from househelp.core.schemas import CandidateProvider, MatchResult, SearchCriteria
from househelp.pipeline.profiler import PreferenceProfiler
from househelp.pipeline.ranker import rank
from househelp.pipeline.retriever import CandidateRetriever
from househelp.pipeline.scorer import MAX_SCORE, score_candidates
from househelp.stores.base import CandidateStore, HistoryStore

logger = logging.getLogger(__name__)

# Maps a 0-5 star rating onto the 0-100 score scale.
RATING_TO_SCORE = 20.0


class MatchPath(str, Enum):
    EXPLICIT = "explicit"
    HISTORY = "history"
    FALLBACK = "fallback"


class MatchingEngine:
    """Entry point for match and recommendation requests.

    Holds only its injected stores and frozen configuration; concurrent calls
    share no mutable state.

    Usage::

        engine = MatchingEngine(candidate_store, history_store)
        matches = await engine.find_matches(criteria)
        recs = await engine.get_recommended_matches("household-1")
    """

    def __init__(
        self,
        candidates: CandidateStore,
        history: HistoryStore,
        matching: MatchingConfig | None = None,
        scoring: ScoringConfig | None = None,
    ) -> None:
        self._candidates = candidates
        self._matching = matching or MatchingConfig()
        self._scoring = scoring or ScoringConfig()
        self._retriever = CandidateRetriever(candidates)
        self._profiler = PreferenceProfiler(history, self._matching)

    async def find_matches(
        self,
        criteria: SearchCriteria,
        limit: int | None = None,
    ) -> list[MatchResult]:
        """Rank providers for explicit criteria. Novelty does not apply.

        Raises:
            ValidationError: unusable criteria or limit, before any store call.
            RetrievalError: the candidate store failed.
        """
        limit = self._check_limit(limit, self._matching.default_limit)
        results = await self._match(criteria, limit, previously_booked=None)
        self._log_outcome(MatchPath.EXPLICIT, results)
        return results

    async def get_recommended_matches(
        self,
        user_id: str,
        limit: int | None = None,
    ) -> list[MatchResult]:
        """Recommend providers from a household's booking history.

        Falls back to top-rated providers when the household has no bookings;
        those results carry no distance.

        Raises:
            ValidationError: bad limit, or bookings without a home location.
            RetrievalError: a history or candidate store call failed.
        """
        limit = self._check_limit(limit, self._matching.recommendation_limit)
        prefs = await self._profiler.derive_criteria(user_id)

        if prefs is None:
            results = await self._top_rated(limit)
            self._log_outcome(MatchPath.FALLBACK, results)
            return results

        results = await self._match(
            prefs.criteria, limit, previously_booked=prefs.booked_provider_ids,
        )
        self._log_outcome(MatchPath.HISTORY, results)
        return results

    async def _match(
        self,
        criteria: SearchCriteria,
        limit: int,
        previously_booked: frozenset[str] | None,
    ) -> list[MatchResult]:
        page = await self._retriever.retrieve(criteria)
        if not page.candidates:
            return []
        scored = score_candidates(page.candidates, criteria, self._scoring)
        return rank(scored, limit, previously_booked=previously_booked)

    async def _top_rated(self, limit: int) -> list[MatchResult]:
        min_rating = self._matching.fallback_min_rating
        try:
            providers = await self._candidates.top_rated(min_rating, limit)
        except MatchingError:
            raise
        except Exception as e:
            msg = f"candidate store top-rated query failed: {e}"
            raise RetrievalError(msg) from e

        ordered = sorted(providers, key=lambda p: (-p.rating, p.id))[:limit]
        return [_rating_only_match(p) for p in ordered]

    @staticmethod
    def _check_limit(limit: int | None, default: int) -> int:
        if limit is None:
            return default
        if limit < 1:
            msg = f"limit must be at least 1, got {limit}"
            raise ValidationError(msg)
        return limit

    @staticmethod
    def _log_outcome(path: MatchPath, results: list[MatchResult]) -> None:
        if results:
            logger.info("%s path: %d matches", path.value, len(results))
        else:
            logger.info("%s path: no matches", path.value)


def _rating_only_match(provider: CandidateProvider) -> MatchResult:
    return MatchResult(
        provider=provider,
        compatibility_score=min(MAX_SCORE, provider.rating * RATING_TO_SCORE),
        distance_km=None,
    )
