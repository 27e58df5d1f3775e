"""Source, map, filter and sort stages.

Each transform has a synchronous and an asynchronous stage. Async stages
await any awaitable a callback returns, so callbacks may suspend.

Indices passed to mapper and filterer callbacks are per stage and start
at 0. Callback exceptions are reported through the stage's ErrorCallback
and the datum is dropped.
"""

from __future__ import annotations

import copy
import dataclasses
import inspect
from collections.abc import Iterable
from functools import cmp_to_key
from typing import Any

from foldline.contracts.callbacks import AsyncFilterer, AsyncMapper, AsyncSorter, Filterer, Mapper, Sorter
from foldline.contracts.enums import StageKind
from foldline.contracts.errors import FiltererError, MapperError, SorterError
from foldline.engine.protocols import ErrorCallback


async def settle(value: Any) -> Any:
    """Await value if a callback returned an awaitable, else return it."""
    if inspect.isawaitable(value):
        return await value
    return value


def shallow_copy[T](value: T) -> T:
    """Copy mutable containers and dataclass instances one level deep.

    Used for reduction seeds so a mutating reducer never writes into the
    caller's object or into a sibling pivot partition's seed.
    """
    if isinstance(value, (dict, list, set, bytearray)):
        return copy.copy(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return copy.copy(value)
    return value


# =============================================================================
# Source stage (installed at construction)
# =============================================================================


class SourceStage[T]:
    """Construction-time stage: initial data followed by appended data."""

    kind = StageKind.SOURCE

    def __init__(self, data: Iterable[T]) -> None:
        self._initial: list[T] = list(data)
        self._appended: list[T] = []

    def append(self, datum: T) -> None:
        self._appended.append(datum)

    def resolve(self) -> list[T]:
        return [*self._initial, *self._appended]


class AsyncSourceStage[T]:
    """Async twin of SourceStage."""

    kind = StageKind.SOURCE

    def __init__(self, data: Iterable[T]) -> None:
        self._inner = SourceStage(data)

    async def append(self, datum: T) -> None:
        self._inner.append(datum)

    async def resolve(self) -> list[T]:
        return self._inner.resolve()


# =============================================================================
# Map
# =============================================================================


class MapStage[In, Out]:
    """Buffers mapper(datum, index) for each datum."""

    kind = StageKind.MAP

    def __init__(self, mapper: Mapper[In, Out], on_error: ErrorCallback) -> None:
        self._mapper = mapper
        self._on_error = on_error
        self._data: list[Out] = []
        self._index = 0

    def append(self, datum: In) -> None:
        index = self._index
        self._index += 1
        try:
            mapped = self._mapper(datum, index)
        except Exception as exc:
            self._on_error(MapperError(exc, index=index))
            return
        self._data.append(mapped)

    def resolve(self) -> list[Out]:
        return list(self._data)


class AsyncMapStage[In, Out]:
    """Map stage whose mapper may suspend."""

    kind = StageKind.MAP

    def __init__(self, mapper: AsyncMapper[In, Out], on_error: ErrorCallback) -> None:
        self._mapper = mapper
        self._on_error = on_error
        self._data: list[Out] = []
        self._index = 0

    async def append(self, datum: In) -> None:
        index = self._index
        self._index += 1
        try:
            mapped: Out = await settle(self._mapper(datum, index))
        except Exception as exc:
            self._on_error(MapperError(exc, index=index))
            return
        self._data.append(mapped)

    async def resolve(self) -> list[Out]:
        return list(self._data)


# =============================================================================
# Filter
# =============================================================================


class FilterStage[T]:
    """Keeps each datum for which filterer(datum, index) is truthy."""

    kind = StageKind.FILTER

    def __init__(self, filterer: Filterer[T], on_error: ErrorCallback) -> None:
        self._filterer = filterer
        self._on_error = on_error
        self._data: list[T] = []
        self._index = 0

    def append(self, datum: T) -> None:
        index = self._index
        self._index += 1
        try:
            keep = self._filterer(datum, index)
        except Exception as exc:
            self._on_error(FiltererError(exc, index=index))
            return
        if keep:
            self._data.append(datum)

    def resolve(self) -> list[T]:
        return list(self._data)


class AsyncFilterStage[T]:
    """Filter stage whose predicate may suspend."""

    kind = StageKind.FILTER

    def __init__(self, filterer: AsyncFilterer[T], on_error: ErrorCallback) -> None:
        self._filterer = filterer
        self._on_error = on_error
        self._data: list[T] = []
        self._index = 0

    async def append(self, datum: T) -> None:
        index = self._index
        self._index += 1
        try:
            keep = await settle(self._filterer(datum, index))
        except Exception as exc:
            self._on_error(FiltererError(exc, index=index))
            return
        if keep:
            self._data.append(datum)

    async def resolve(self) -> list[T]:
        return list(self._data)


# =============================================================================
# Sort
# =============================================================================


class SortStage[T]:
    """Buffers everything, sorts once per resolve with a three-way comparator."""

    kind = StageKind.SORT

    def __init__(self, sorter: Sorter[T], on_error: ErrorCallback) -> None:
        self._sorter = sorter
        self._on_error = on_error
        self._data: list[T] = []

    def append(self, datum: T) -> None:
        self._data.append(datum)

    def resolve(self) -> list[T]:
        try:
            self._data.sort(key=cmp_to_key(self._sorter))
        except Exception as exc:
            self._on_error(SorterError(exc))
        return list(self._data)


class AsyncSortStage[T]:
    """Online insertion sort for comparators that may suspend.

    Each new datum is compared left to right against the sorted buffer and
    inserted before the first element e with sorter(datum, e) <= 0, or at
    the end. That is O(n) comparator calls per insert, O(n^2) overall, but
    keeps the buffer sorted after every append without a final sort.
    """

    kind = StageKind.SORT

    def __init__(self, sorter: AsyncSorter[T], on_error: ErrorCallback) -> None:
        self._sorter = sorter
        self._on_error = on_error
        self._data: list[T] = []

    async def append(self, datum: T) -> None:
        try:
            for position, existing in enumerate(self._data):
                if await settle(self._sorter(datum, existing)) <= 0:
                    self._data.insert(position, datum)
                    return
        except Exception as exc:
            self._on_error(SorterError(exc))
            return
        self._data.append(datum)

    async def resolve(self) -> list[T]:
        return list(self._data)
