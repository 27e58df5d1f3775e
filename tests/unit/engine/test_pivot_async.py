# tests/unit/engine/test_pivot_async.py
"""Tests for the asynchronous pivot stage."""

from typing import Any

import pytest

from foldline.contracts.errors import ClassifierError, ReducerError
from foldline.engine.accumulator import SyncAccumulator
from foldline.engine.async_accumulator import AsyncAccumulator
from tests.helpers.timing import sleep, sleep_and_return


async def slow_add(total: int, n: int, _i: int) -> int:
    # Larger values finish sooner
    await sleep(max(1, 8 - n))
    return total + n


async def slow_remainder(n: int) -> int:
    await sleep(n % 4)
    return n % 3


def name_key(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "key": f"{record['first_name']}:{record['last_name']}",
        "metadata": {"first_name": record["first_name"], "last_name": record["last_name"]},
    }


class TestAsyncPivot:
    """Async pivots with suspending classifiers and reducers."""

    @pytest.mark.asyncio
    async def test_remainder_sums(self) -> None:
        acc = AsyncAccumulator([1, 2, 3, 4, 5, 6, 7]).pivot(
            classifier=slow_remainder,
            reducer=slow_add,
            classification_name="remainder",
            value_name="total",
        )

        assert await acc.to_list() == [
            {"remainder": "1", "total": 12},
            {"remainder": "2", "total": 7},
            {"remainder": "0", "total": 9},
        ]

    @pytest.mark.asyncio
    async def test_reducer_sees_partition_order(self) -> None:
        async def collect(acc: list[int], n: int, _i: int) -> list[int]:
            await sleep(8 - n)
            return [*acc, n]

        acc = AsyncAccumulator([1, 2, 3, 4, 5, 6]).pivot(
            classifier=lambda n: sleep_and_return(n % 2, ms=n % 3),
            reducer=collect,
            initial_value=[],
            classification_name="parity",
            value_name="items",
        )

        assert await acc.to_list() == [{"parity": "1", "items": [1, 3, 5]}, {"parity": "0", "items": [2, 4, 6]}]

    @pytest.mark.asyncio
    async def test_matches_sync_pivot(self, example_data: list[dict[str, Any]]) -> None:
        data = example_data[:200]

        async def count(total: int, _record: Any, _i: int) -> int:
            await sleep(0)
            return total + 1

        expected = (
            SyncAccumulator(data)
            .pivot(classifier=name_key, reducer=lambda t, _r, _i: t + 1, initial_value=0, value_name="count")
            .to_list()
        )
        actual = (
            await AsyncAccumulator(data)
            .pivot(
                classifier=lambda r: sleep_and_return(name_key(r), ms=0),
                reducer=count,
                initial_value=0,
                value_name="count",
            )
            .to_list()
        )

        assert actual == expected

    @pytest.mark.asyncio
    async def test_appends_after_pivot(self) -> None:
        acc = AsyncAccumulator([1, 2]).pivot(
            classifier=slow_remainder, reducer=slow_add, initial_value=0, classification_name="k", value_name="v"
        )
        acc.append([3, 4])

        assert await acc.to_list() == [{"k": "1", "v": 5}, {"k": "2", "v": 2}, {"k": "0", "v": 3}]

    @pytest.mark.asyncio
    async def test_chained_pivots(self, example_data: list[dict[str, Any]]) -> None:
        async def count(total: int, _record: Any, _i: int) -> int:
            return total + 1

        acc = (
            AsyncAccumulator(example_data)
            .pivot(classifier=name_key, reducer=count, initial_value=0, value_name="count")
            .pivot(classifier=lambda r: r["count"], reducer=count, initial_value=0, classification_name="size", value_name="partitions")
        )

        assert await acc.to_list() == [{"size": "12", "partitions": 10}, {"size": "11", "partitions": 80}]

    @pytest.mark.asyncio
    async def test_empty_key_list_drops_datum(self) -> None:
        acc = AsyncAccumulator([1, 2, 3]).pivot(
            classifier=lambda n: sleep_and_return([] if n == 2 else ["all"], ms=1),
            reducer=slow_add,
            value_name="total",
        )

        assert await acc.to_list() == [{"total": 4}]


class TestAsyncPivotFailures:
    """Partition failures surface through the parent accumulator."""

    @pytest.mark.asyncio
    async def test_reducer_failure_captured(self) -> None:
        async def refuse(_total: int, _n: int, _i: int) -> Any:
            await sleep(1)
            return ValueError("No way!")

        acc = AsyncAccumulator([1, 2, 3, 4, 5, 6, 7]).pivot(classifier=lambda n: n % 3, reducer=refuse, initial_value=0)
        result = await acc.result()

        assert isinstance(result, ReducerError)

    @pytest.mark.asyncio
    async def test_reducer_failure_rejects_in_raise_mode(self) -> None:
        async def refuse(_total: int, _n: int, _i: int) -> Any:
            raise ValueError("No way!")

        acc = AsyncAccumulator([1, 2, 3], throws=True).pivot(classifier=lambda n: n % 3, reducer=refuse, initial_value=0)

        with pytest.raises(ReducerError, match="No way!"):
            await acc.result()

    @pytest.mark.asyncio
    async def test_classifier_failure(self) -> None:
        async def explode(n: int) -> Any:
            await sleep(1)
            if n == 3:
                return KeyError("unclassifiable")
            return "ok"

        result = await AsyncAccumulator([1, 2, 3, 4]).pivot(classifier=explode, reducer=slow_add).result()

        assert isinstance(result, ClassifierError)
        assert result.index == 2
