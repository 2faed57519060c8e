"""Configuration models and YAML loader for the matching engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field


class ScoringConfig(BaseModel):
    """Weights for the compatibility score.

    Each priority flag on a request swaps the base weight for its
    ``*_priority_weight`` counterpart.
    """

    model_config = ConfigDict(frozen=True)

    service_weight: float = Field(default=30.0, ge=0.0)
    distance_weight: float = Field(default=20.0, ge=0.0)
    rating_weight: float = Field(default=15.0, ge=0.0)
    rating_priority_weight: float = Field(default=25.0, ge=0.0)
    experience_weight: float = Field(default=10.0, ge=0.0)
    experience_priority_weight: float = Field(default=25.0, ge=0.0)
    price_weight: float = Field(default=10.0, ge=0.0)
    price_priority_weight: float = Field(default=25.0, ge=0.0)
    language_weight: float = Field(default=15.0, ge=0.0)
    experience_saturation_years: float = Field(default=10.0, gt=0.0)


class MatchingConfig(BaseModel):
    """Limits and defaults for the search and recommendation paths."""

    model_config = ConfigDict(frozen=True)

    default_limit: int = Field(default=10, ge=1)
    recommendation_limit: int = Field(default=5, ge=1)
    history_window: int = Field(default=10, ge=1)
    top_services: int = Field(default=3, ge=1)
    recommendation_radius_km: float = Field(default=20.0, gt=0.0)
    recommendation_min_rating: float = Field(default=4.0, ge=0.0, le=5.0)
    fallback_min_rating: float = Field(default=4.0, ge=0.0, le=5.0)


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/househelp.db"


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
