"""Ordering and truncation of scored matches."""

from collections.abc import Collection

from househelp.core.schemas import MatchResult


def rank(
    scored: list[MatchResult],
    limit: int,
    previously_booked: Collection[str] | None = None,
) -> list[MatchResult]:
    """Sort matches best first and keep the top ``limit``.

    Order: compatibility score descending, then rating descending, then
    provider id ascending, so equal inputs always give the same list.

    When ``previously_booked`` is given (recommendations), novelty outranks
    score: every provider the household has not booked before sorts ahead of
    every provider it has, whatever their scores.
    """
    booked = frozenset(previously_booked) if previously_booked is not None else None

    def sort_key(result: MatchResult) -> tuple[bool, float, float, str]:
        seen_before = booked is not None and result.provider.id in booked
        return (
            seen_before,
            -result.compatibility_score,
            -result.provider.rating,
            result.provider.id,
        )

    return sorted(scored, key=sort_key)[:limit]
