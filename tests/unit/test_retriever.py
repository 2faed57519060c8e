"""Tests for CandidateRetriever: validation, store delegation, error wrapping."""

import pytest

from househelp.core.errors import RetrievalError, ValidationError
from househelp.core.schemas import (
    CandidatePage,
    CandidateProvider,
    GeoPoint,
    SearchCriteria,
    ServiceType,
)
from househelp.pipeline.retriever import CandidateRetriever, validate_criteria
from househelp.stores.base import CandidateStore
from househelp.stores.memory import InMemoryCandidateStore

ORIGIN = GeoPoint(latitude=0.0, longitude=0.0)


class RecordingStore(CandidateStore):
    """Counts calls and optionally fails."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls = 0
        self._error = error

    async def query(self, criteria: SearchCriteria) -> CandidatePage:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return CandidatePage()

    async def top_rated(self, min_rating: float, limit: int) -> list[CandidateProvider]:
        return []


def _criteria(**overrides: object) -> SearchCriteria:
    defaults: dict[str, object] = {
        "services": frozenset({ServiceType.CLEANING}),
        "location": ORIGIN,
        "radius_km": 20.0,
    }
    defaults.update(overrides)
    return SearchCriteria(**defaults)  # type: ignore[arg-type]


def _provider(id: str, **kw: object) -> CandidateProvider:
    defaults: dict[str, object] = {
        "id": id,
        "services": frozenset({ServiceType.CLEANING}),
        "rating": 4.5,
        "location": ORIGIN,
    }
    defaults.update(kw)
    return CandidateProvider(**defaults)  # type: ignore[arg-type]


class TestValidateCriteria:
    def test_valid(self) -> None:
        validate_criteria(_criteria())

    def test_empty_services(self) -> None:
        with pytest.raises(ValidationError, match="service"):
            validate_criteria(_criteria(services=frozenset()))

    @pytest.mark.parametrize("radius", [0.0, -5.0])
    def test_non_positive_radius(self, radius: float) -> None:
        with pytest.raises(ValidationError, match="radius"):
            validate_criteria(_criteria(radius_km=radius))

    def test_missing_location(self) -> None:
        with pytest.raises(ValidationError, match="location"):
            validate_criteria(_criteria(location=None))

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            validate_criteria(_criteria(services=frozenset()))


class TestRetrieve:
    async def test_invalid_criteria_never_reach_store(self) -> None:
        store = RecordingStore()
        with pytest.raises(ValidationError):
            await CandidateRetriever(store).retrieve(_criteria(services=frozenset()))
        assert store.calls == 0

    async def test_store_failure_wrapped(self) -> None:
        cause = ConnectionError("store unreachable")
        store = RecordingStore(error=cause)
        with pytest.raises(RetrievalError) as exc_info:
            await CandidateRetriever(store).retrieve(_criteria())
        assert exc_info.value.__cause__ is cause
        assert store.calls == 1

    async def test_matching_errors_pass_through(self) -> None:
        store = RecordingStore(error=ValidationError("bad filter"))
        with pytest.raises(ValidationError, match="bad filter"):
            await CandidateRetriever(store).retrieve(_criteria())

    async def test_returns_filtered_page(self) -> None:
        store = InMemoryCandidateStore([
            _provider("a", rating=4.1),
            _provider("b", rating=4.9),
            _provider("c", services=frozenset({ServiceType.COOKING})),
        ])
        page = await CandidateRetriever(store).retrieve(_criteria())
        assert [p.id for p in page.candidates] == ["b", "a"]
        assert page.total == 2

    async def test_empty_result_is_not_an_error(self) -> None:
        page = await CandidateRetriever(InMemoryCandidateStore([])).retrieve(_criteria())
        assert page.candidates == []
        assert page.total == 0
