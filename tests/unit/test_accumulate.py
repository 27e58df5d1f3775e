# tests/unit/test_accumulate.py
"""Tests for the accumulate() and accumulate_async() factories."""

import pytest

import foldline
from foldline import (
    AccumulatorConfigError,
    AccumulatorSettings,
    AsyncAccumulator,
    ErrorHandling,
    MapperError,
    SyncAccumulator,
    accumulate,
    accumulate_async,
)


def explode(_n: int, _i: int) -> int:
    raise ValueError("No way!")


class TestAccumulate:
    """Synchronous factory."""

    def test_defaults_to_capture_mode(self) -> None:
        acc = accumulate([1, 2])

        assert isinstance(acc, SyncAccumulator)
        assert acc.throws is False
        assert acc.to_list() == [1, 2]

    def test_no_data(self) -> None:
        assert accumulate().to_list() == []

    def test_exception_mode(self) -> None:
        acc = accumulate([1], "exception")

        assert acc.throws is True
        with pytest.raises(MapperError):
            acc.map(explode)

    def test_enum_error_handling(self) -> None:
        assert accumulate([1], ErrorHandling.EXCEPTION).throws is True
        assert accumulate([1], ErrorHandling.ERROR).throws is False

    def test_invalid_error_handling(self) -> None:
        with pytest.raises(AccumulatorConfigError):
            accumulate([1], "sometimes")

    def test_settings_policy(self) -> None:
        settings = AccumulatorSettings(error_handling=ErrorHandling.EXCEPTION)

        assert accumulate([1], settings=settings).throws is True

    def test_explicit_error_handling_overrides_settings(self) -> None:
        settings = AccumulatorSettings(error_handling=ErrorHandling.EXCEPTION)

        assert accumulate([1], "error", settings=settings).throws is False

    def test_pivot_example(self) -> None:
        result = accumulate([1, 2, 3, 4, 5, 6, 7]).pivot(
            classifier=lambda n: n % 3,
            reducer=lambda total, n, _i: total + n,
            classification_name="remainder",
            value_name="total",
        ).result()

        assert not isinstance(result, foldline.AccumulatorError)
        assert {r["remainder"]: r["total"] for r in result} == {"0": 9, "1": 12, "2": 7}


class TestAccumulateAsync:
    """Asynchronous factory."""

    @pytest.mark.asyncio
    async def test_defaults_to_capture_mode(self) -> None:
        acc = accumulate_async([1, 2], name="orders")

        assert isinstance(acc, AsyncAccumulator)
        assert acc.throws is False
        assert await acc.to_list() == [1, 2]

    @pytest.mark.asyncio
    async def test_capture_returns_error(self) -> None:
        assert isinstance(await accumulate_async([1]).map(explode).result(), MapperError)

    @pytest.mark.asyncio
    async def test_exception_mode_rejects(self) -> None:
        acc = accumulate_async([1], "exception").map(explode)

        with pytest.raises(MapperError):
            await acc.result()

    def test_invalid_error_handling(self) -> None:
        with pytest.raises(AccumulatorConfigError):
            accumulate_async([1], "loud")


def test_version() -> None:
    assert foldline.__version__ == "0.1.0"
