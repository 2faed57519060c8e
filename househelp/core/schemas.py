"""Core data models for the matching engine."""

from datetime import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ServiceType(str, Enum):
    """Closed set of service categories offered on the marketplace."""

    CLEANING = "cleaning"
    COOKING = "cooking"
    CHILDCARE = "childcare"
    ELDERCARE = "eldercare"
    GARDENING = "gardening"
    DRIVING = "driving"
    SECURITY = "security"
    LAUNDRY = "laundry"
    PETCARE = "petcare"
    TUTORING = "tutoring"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class GeoPoint(BaseModel):
    """WGS84 coordinate in degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class AvailabilitySlot(BaseModel):
    """A weekly slot during which a provider can work."""

    model_config = ConfigDict(frozen=True)

    day: Weekday
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def start_before_end(self) -> "AvailabilitySlot":
        if self.start_time >= self.end_time:
            msg = "start_time must be before end_time"
            raise ValueError(msg)
        return self

    def covers(self, window: "AvailabilitySlot") -> bool:
        """True if this slot fully contains ``window`` on the same weekday."""
        return (
            self.day == window.day
            and self.start_time <= window.start_time
            and self.end_time >= window.end_time
        )


# A requested window has the same shape as a provider slot.
AvailabilityWindow = AvailabilitySlot


class CandidateProvider(BaseModel):
    """Snapshot of a service provider as returned by a candidate store.

    Frozen: the engine reads providers, it never mutates them.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    full_name: str = ""
    services: frozenset[ServiceType]
    experience_years: float = Field(default=0.0, ge=0.0)
    hourly_rate: float = Field(default=0.0, ge=0.0)
    languages: frozenset[str] = frozenset()
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    rating_count: int = Field(default=0, ge=0)
    location: GeoPoint
    verified: bool = False
    availability: tuple[AvailabilitySlot, ...] = ()


class SearchCriteria(BaseModel):
    """What a household is looking for.

    Only type-level bounds are enforced here. Whether the criteria are usable
    for a search (non-empty services, positive radius, a location to measure
    from) is checked by ``validate_criteria`` before any store call.
    """

    model_config = ConfigDict(frozen=True)

    services: frozenset[ServiceType] = frozenset()
    location: GeoPoint | None = None
    radius_km: float = 20.0
    min_rating: float | None = Field(default=None, ge=0.0, le=5.0)
    languages: frozenset[str] = frozenset()
    max_hourly_rate: float | None = None
    prioritize_experience: bool = False
    prioritize_rating: bool = False
    prioritize_price: bool = False
    availability: AvailabilityWindow | None = None
    min_experience_years: float | None = Field(default=None, ge=0.0)
    verified_only: bool = False


class CandidatePage(BaseModel):
    """Filtered candidates plus the total number that matched."""

    model_config = ConfigDict(frozen=True)

    candidates: list[CandidateProvider] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)


class ScoreBreakdown(BaseModel):
    """Per-signal contributions behind a compatibility score.

    Each ``*_fit`` is normalized to [0, 1]; ``total`` is the weighted sum
    clamped to [0, 100].
    """

    model_config = ConfigDict(frozen=True)

    service_fit: float
    distance_fit: float
    rating_fit: float
    experience_fit: float
    price_fit: float
    language_fit: float
    weights: dict[str, float]
    distance_km: float
    total: float = Field(ge=0.0, le=100.0)


class MatchResult(BaseModel):
    """A provider paired with its compatibility score for one request.

    ``distance_km`` is None when the distance was never computed (the
    top-rated fallback), never a 0 placeholder.
    """

    model_config = ConfigDict(frozen=True)

    provider: CandidateProvider
    compatibility_score: float = Field(ge=0.0, le=100.0)
    distance_km: float | None = Field(default=None, ge=0.0)


class HistoricalInteraction(BaseModel):
    """One past booking: which services were used and with whom."""

    model_config = ConfigDict(frozen=True)

    service_types: tuple[ServiceType, ...] = ()
    provider_id: str | None = None


class HouseholdPreferences(BaseModel):
    """Criteria implied by booking history, plus providers already used."""

    model_config = ConfigDict(frozen=True)

    criteria: SearchCriteria
    booked_provider_ids: frozenset[str] = frozenset()
