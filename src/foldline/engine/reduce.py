"""Reduction stages: a single running fold.

With an initial value the fold starts at index 0. Without one, the stage
is Deferred: the first datum (shallow-copied) becomes the accumulated
value and the second datum is folded with index 1. Resolving a Deferred
reduction that never saw data reports EmptyReductionError.

A reducer fails by raising or by returning an Exception instance. The
running value is left unchanged on failure.
"""

from __future__ import annotations

from typing import Any

from foldline.contracts.callbacks import AsyncReducer, Reducer
from foldline.contracts.enums import StageKind
from foldline.contracts.errors import EmptyReductionError, ReducerError, as_failure
from foldline.contracts.sentinels import MISSING
from foldline.engine.protocols import Active, AsyncStage, AsyncStageSlot, Deferred, ErrorCallback, Stage, StageSlot
from foldline.engine.stages import settle, shallow_copy


class ReduceStage[Datum, Output]:
    """Synchronous running fold."""

    kind = StageKind.REDUCE

    def __init__(
        self,
        reducer: Reducer[Datum, Output],
        seed: Output,
        start_index: int,
        on_error: ErrorCallback,
    ) -> None:
        self._reducer = reducer
        self._value = seed
        self._index = start_index
        self._on_error = on_error

    def append(self, datum: Datum) -> None:
        index = self._index
        self._index += 1
        try:
            value = self._reducer(self._value, datum, index)
        except Exception as exc:
            self._on_error(ReducerError(exc, index=index))
            return
        failure = as_failure(value)
        if failure is not None:
            self._on_error(ReducerError(failure, index=index))
            return
        self._value = value

    def resolve(self) -> list[Output]:
        return [self._value]


class AsyncReduceStage[Datum, Output]:
    """Running fold whose reducer may suspend."""

    kind = StageKind.REDUCE

    def __init__(
        self,
        reducer: AsyncReducer[Datum, Output],
        seed: Output,
        start_index: int,
        on_error: ErrorCallback,
    ) -> None:
        self._reducer = reducer
        self._value = seed
        self._index = start_index
        self._on_error = on_error

    async def append(self, datum: Datum) -> None:
        index = self._index
        self._index += 1
        try:
            value = await settle(self._reducer(self._value, datum, index))
        except Exception as exc:
            self._on_error(ReducerError(exc, index=index))
            return
        failure = as_failure(value)
        if failure is not None:
            self._on_error(ReducerError(failure, index=index))
            return
        self._value = value

    async def resolve(self) -> list[Output]:
        return [self._value]


def reduce_slot[Datum, Output](
    reducer: Reducer[Datum, Output],
    initial_value: Any,
    on_error: ErrorCallback,
) -> StageSlot[Datum, Output]:
    """Build the slot for a synchronous reduce() call."""
    if initial_value is MISSING:

        def install(first: Any) -> Stage[Datum, Output]:
            return ReduceStage(reducer, shallow_copy(first), 1, on_error)

        def resolve_empty() -> list[Output]:
            on_error(EmptyReductionError())
            return []

        return Deferred(kind=StageKind.REDUCE, install=install, resolve=resolve_empty)

    return Active(ReduceStage(reducer, shallow_copy(initial_value), 0, on_error))


def async_reduce_slot[Datum, Output](
    reducer: AsyncReducer[Datum, Output],
    initial_value: Any,
    on_error: ErrorCallback,
) -> AsyncStageSlot[Datum, Output]:
    """Build the slot for an asynchronous reduce() call."""
    if initial_value is MISSING:

        def install(first: Any) -> AsyncStage[Datum, Output]:
            return AsyncReduceStage(reducer, shallow_copy(first), 1, on_error)

        async def resolve_empty() -> list[Output]:
            on_error(EmptyReductionError())
            return []

        return Deferred(kind=StageKind.REDUCE, install=install, resolve=resolve_empty)

    return Active(AsyncReduceStage(reducer, shallow_copy(initial_value), 0, on_error))
