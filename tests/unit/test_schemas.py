"""Tests for core schemas: providers, criteria, match results."""

from datetime import time

import pytest
from pydantic import ValidationError

from househelp.core.schemas import (
    AvailabilitySlot,
    CandidateProvider,
    GeoPoint,
    MatchResult,
    SearchCriteria,
    ServiceType,
    Weekday,
)


def _make_provider(**overrides: object) -> CandidateProvider:
    defaults: dict[str, object] = {
        "id": "w-1",
        "services": frozenset({ServiceType.CLEANING}),
        "experience_years": 4,
        "hourly_rate": 10,
        "languages": frozenset({"English"}),
        "rating": 4.2,
        "rating_count": 12,
        "location": GeoPoint(latitude=0.0, longitude=0.0),
    }
    defaults.update(overrides)
    return CandidateProvider(**defaults)  # type: ignore[arg-type]


class TestGeoPoint:
    def test_latitude_bounds(self) -> None:
        with pytest.raises(ValidationError):
            GeoPoint(latitude=91.0, longitude=0.0)
        with pytest.raises(ValidationError):
            GeoPoint(latitude=-90.5, longitude=0.0)

    def test_longitude_bounds(self) -> None:
        with pytest.raises(ValidationError):
            GeoPoint(latitude=0.0, longitude=180.5)

    def test_equality(self) -> None:
        assert GeoPoint(latitude=1.0, longitude=2.0) == GeoPoint(latitude=1.0, longitude=2.0)


class TestCandidateProvider:
    def test_services_coerced_from_strings(self) -> None:
        p = _make_provider(services=["cleaning", "cooking"])
        assert p.services == frozenset({ServiceType.CLEANING, ServiceType.COOKING})

    def test_unknown_service_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _make_provider(services=["plumbing"])

    def test_rating_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            _make_provider(rating=5.5)

    def test_negative_rate_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _make_provider(hourly_rate=-1)

    def test_frozen(self) -> None:
        p = _make_provider()
        with pytest.raises(ValidationError):
            p.rating = 1.0  # type: ignore[misc]

    def test_defaults(self) -> None:
        p = _make_provider()
        assert p.verified is False
        assert p.availability == ()
        assert p.full_name == ""


class TestAvailabilitySlot:
    def test_parses_hh_mm(self) -> None:
        slot = AvailabilitySlot.model_validate(
            {"day": "monday", "start_time": "08:00", "end_time": "17:00"}
        )
        assert slot.day == Weekday.MONDAY
        assert slot.start_time == time(8, 0)

    def test_start_must_precede_end(self) -> None:
        with pytest.raises(ValidationError):
            AvailabilitySlot(day=Weekday.MONDAY, start_time=time(17), end_time=time(8))

    def test_covers_inner_window(self) -> None:
        slot = AvailabilitySlot(day=Weekday.MONDAY, start_time=time(8), end_time=time(17))
        window = AvailabilitySlot(day=Weekday.MONDAY, start_time=time(9), end_time=time(12))
        assert slot.covers(window)

    def test_does_not_cover_other_day(self) -> None:
        slot = AvailabilitySlot(day=Weekday.MONDAY, start_time=time(8), end_time=time(17))
        window = AvailabilitySlot(day=Weekday.TUESDAY, start_time=time(9), end_time=time(12))
        assert not slot.covers(window)

    def test_does_not_cover_overrun(self) -> None:
        slot = AvailabilitySlot(day=Weekday.MONDAY, start_time=time(8), end_time=time(12))
        window = AvailabilitySlot(day=Weekday.MONDAY, start_time=time(11), end_time=time(13))
        assert not slot.covers(window)


class TestSearchCriteria:
    def test_defaults(self) -> None:
        c = SearchCriteria()
        assert c.services == frozenset()
        assert c.location is None
        assert c.radius_km == 20.0
        assert c.max_hourly_rate is None
        assert c.languages == frozenset()

    def test_empty_services_constructible(self) -> None:
        """Emptiness is rejected by the engine, not at construction."""
        assert SearchCriteria(services=[]).services == frozenset()

    def test_min_rating_bounds(self) -> None:
        with pytest.raises(ValidationError):
            SearchCriteria(min_rating=6.0)


class TestMatchResult:
    def test_score_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            MatchResult(provider=_make_provider(), compatibility_score=100.5)

    def test_negative_distance_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MatchResult(provider=_make_provider(), compatibility_score=50.0, distance_km=-1.0)

    def test_distance_absent_by_default(self) -> None:
        r = MatchResult(provider=_make_provider(), compatibility_score=84.0)
        assert r.distance_km is None
