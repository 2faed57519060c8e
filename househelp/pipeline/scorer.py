"""Weighted compatibility scoring for candidate providers.

Score range: 0-100 (clamped). Six independent sub-scores, each normalized to
[0, 1], are multiplied by weights from ScoringConfig and summed:

  service overlap, distance fit, rating, experience, price, language overlap

Priority flags on the request raise the rating, experience or price weight,
so the raw sum can exceed 100 and is clamped.
"""

import logging

from househelp.core.config import ScoringConfig
from househelp.core.errors import ValidationError
from househelp.core.schemas import (
    CandidateProvider,
    GeoPoint,
    MatchResult,
    ScoreBreakdown,
    SearchCriteria,
)
from househelp.pipeline.distance import distance_km

logger = logging.getLogger(__name__)

MAX_SCORE = 100.0
MAX_RATING = 5.0


def explain_score(
    candidate: CandidateProvider,
    criteria: SearchCriteria,
    config: ScoringConfig,
) -> ScoreBreakdown:
    """Compute every sub-score, its weight and the clamped total.

    Args:
        candidate: The provider to score.
        criteria: The household's request. Must carry a location.
        config: Scoring weights from settings.

    Returns:
        ScoreBreakdown whose ``total`` is the compatibility score.
    """
    weights = _weights(criteria, config)
    origin = _origin(criteria)
    distance = distance_km(candidate.location, origin)

    service_fit = _overlap(candidate.services, criteria.services)
    distance_fit = max(0.0, 1.0 - distance / criteria.radius_km) if criteria.radius_km > 0 else 0.0
    rating_fit = candidate.rating / MAX_RATING
    experience_fit = min(1.0, candidate.experience_years / config.experience_saturation_years)

    # Absent or non-positive budget contributes nothing.
    price_fit = 0.0
    if criteria.max_hourly_rate is not None and criteria.max_hourly_rate > 0:
        price_fit = max(0.0, 1.0 - candidate.hourly_rate / criteria.max_hourly_rate)

    language_fit = _overlap(candidate.languages, criteria.languages)

    raw = (
        service_fit * weights["service"]
        + distance_fit * weights["distance"]
        + rating_fit * weights["rating"]
        + experience_fit * weights["experience"]
        + price_fit * weights["price"]
        + language_fit * weights["language"]
    )
    total = max(0.0, min(MAX_SCORE, raw))

    return ScoreBreakdown(
        service_fit=service_fit,
        distance_fit=distance_fit,
        rating_fit=rating_fit,
        experience_fit=experience_fit,
        price_fit=price_fit,
        language_fit=language_fit,
        weights=weights,
        distance_km=distance,
        total=total,
    )


def score_candidate(
    candidate: CandidateProvider,
    criteria: SearchCriteria,
    config: ScoringConfig,
) -> float:
    """Compatibility score in [0, 100] for one provider against a request."""
    return explain_score(candidate, criteria, config).total


def score_candidates(
    candidates: list[CandidateProvider],
    criteria: SearchCriteria,
    config: ScoringConfig,
) -> list[MatchResult]:
    """Score a batch of providers, returning MatchResults in input order.

    Ordering is the Ranker's job.
    """
    results: list[MatchResult] = []
    for candidate in candidates:
        breakdown = explain_score(candidate, criteria, config)
        logger.debug(
            "Scored %s: %.2f (%.2f km)", candidate.id, breakdown.total, breakdown.distance_km,
        )
        results.append(
            MatchResult(
                provider=candidate,
                compatibility_score=breakdown.total,
                distance_km=breakdown.distance_km,
            )
        )
    return results


def _weights(criteria: SearchCriteria, config: ScoringConfig) -> dict[str, float]:
    return {
        "service": config.service_weight,
        "distance": config.distance_weight,
        "rating": config.rating_priority_weight if criteria.prioritize_rating else config.rating_weight,
        "experience": (
            config.experience_priority_weight
            if criteria.prioritize_experience
            else config.experience_weight
        ),
        "price": config.price_priority_weight if criteria.prioritize_price else config.price_weight,
        "language": config.language_weight,
    }


def _overlap(offered: frozenset, requested: frozenset) -> float:
    """Share of ``requested`` covered by ``offered``; 0.0 when nothing requested."""
    if not requested:
        return 0.0
    return len(offered & requested) / len(requested)


def _origin(criteria: SearchCriteria) -> GeoPoint:
    if criteria.location is None:
        msg = "criteria.location is required for scoring"
        raise ValidationError(msg)
    return criteria.location
