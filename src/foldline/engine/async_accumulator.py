# src/foldline/engine/async_accumulator.py
"""AsyncAccumulator - the deferred (asynchronous) pipeline engine.

Same pipe protocol as SyncAccumulator, but every callback may suspend.
Ordering is preserved by an ActionQueue: append() and each transform
method enqueue exactly one action and return immediately, and the queue
runs actions one at a time in call order. The slot, buffers and captured
error are only ever touched from inside queued actions.

Failures are recorded in both modes. In raise mode the awaited result()
or to_list() raises the recorded error; in capture mode it is returned.
Pivot partitions always run in capture mode and report through the
parent pivot.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterable
from typing import Any, Self, cast

from foldline.contracts.callbacks import AsyncClassifier, AsyncFilterer, AsyncMapper, AsyncReducer, AsyncSorter
from foldline.contracts.errors import AccumulatorError
from foldline.contracts.sentinels import MISSING
from foldline.core.logging import get_logger
from foldline.engine.action_queue import ActionQueue
from foldline.engine.pivot import AsyncPivotStage
from foldline.engine.protocols import Active, AsyncStageSlot, Deferred
from foldline.engine.reduce import async_reduce_slot
from foldline.engine.results import ResolvedView
from foldline.engine.stages import AsyncFilterStage, AsyncMapStage, AsyncSortStage, AsyncSourceStage


class AsyncAccumulator[Datum, Output]:
    """Asynchronous accumulator pipeline.

    Transform and append calls are synchronous and chainable; only the
    result-producing calls are awaited:

        result = await (
            AsyncAccumulator(rows)
            .map(fetch_price)          # may be async
            .sort(compare_prices)      # may be async
            .result()
        )
        if isinstance(result, AccumulatorError):
            ...
    """

    def __init__(self, data: Iterable[Datum] = (), *, throws: bool = False, name: str = "accumulator") -> None:
        self._throws = throws
        self._error: AccumulatorError | None = None
        self._slot: AsyncStageSlot[Any, Any] = Active(AsyncSourceStage(data))
        self._queue = ActionQueue(name=name)
        self._log = get_logger(__name__, queue=name)

    @property
    def throws(self) -> bool:
        """True in raise mode."""
        return self._throws

    @property
    def error(self) -> AccumulatorError | None:
        """The failure captured so far by already-executed actions."""
        return self._error

    @property
    def pending_actions(self) -> int:
        """Number of queued actions not yet started."""
        return self._queue.pending_count

    def enable_exceptions(self) -> Self:
        """Switch to raise mode: awaited results raise instead of returning errors."""
        self._throws = True
        return self

    def _recast(self) -> AsyncAccumulator[Any, Any]:
        """Re-type this accumulator for the stage being installed.

        Unchecked: callers annotate the result with the new type parameters.
        Sound because the runtime object is shared, never copied.
        """
        return cast(AsyncAccumulator[Any, Any], self)

    def _on_error(self, error: AccumulatorError) -> None:
        if self._error is not None:
            return
        self._error = error
        self._log.debug(
            "accumulator_error_captured",
            stage=self._slot.kind,
            error_type=type(error).__name__,
            error=str(error),
        )

    async def _resolve(self) -> list[Any]:
        match self._slot:
            case Active(stage=stage):
                return await stage.resolve()
            case Deferred(resolve=resolve):
                return await resolve()

    async def _append_now(self, data: Iterable[Any]) -> None:
        for datum in data:
            if self._error is not None:
                return
            match self._slot:
                case Deferred(install=install):
                    self._slot = Active(install(datum))
                case Active(stage=stage):
                    await stage.append(datum)

    def _enqueue_pipe(self, build: Callable[[], AsyncStageSlot[Any, Any]]) -> None:
        async def install() -> None:
            if self._error is not None:
                return
            previous = await self._resolve()
            slot = build()
            self._slot = slot
            self._log.debug("stage_installed", stage=slot.kind, replayed=len(previous))
            # Replay inline so data appended later cannot overtake it
            await self._append_now(previous)

        self._queue.enqueue(install)

    def _make_partition(self, reducer: AsyncReducer[Any, Any], initial_value: Any, key_index: int) -> AsyncAccumulator[Any, Any]:
        partition: AsyncAccumulator[Any, Any] = AsyncAccumulator((), throws=False, name=f"{self._queue.name}/pivot-{key_index}")
        return partition.reduce(reducer, initial_value)

    # =========================================================================
    # Data
    # =========================================================================

    def append(self, data: Iterable[Datum]) -> Self:
        """Enqueue data for the current stage.

        The data is materialized now, so later mutation of the caller's
        iterable does not affect what is appended.
        """
        if self._error is not None:
            return self
        items = list(data)

        async def append_items() -> None:
            await self._append_now(items)

        self._queue.enqueue(append_items)
        return self

    # =========================================================================
    # Transforms
    # =========================================================================

    def reduce[T](self, reducer: AsyncReducer[Output, T], initial_value: T | Any = MISSING) -> AsyncAccumulator[Output, T]:
        """Fold all data into a single value. See SyncAccumulator.reduce()."""
        that: AsyncAccumulator[Output, T] = self._recast()
        if that._error is not None:
            return that
        that._enqueue_pipe(lambda: async_reduce_slot(reducer, initial_value, that._on_error))
        return that

    def map[T](self, mapper: AsyncMapper[Output, T]) -> AsyncAccumulator[Output, T]:
        """Replace each datum with (await) mapper(datum, index)."""
        that: AsyncAccumulator[Output, T] = self._recast()
        if that._error is not None:
            return that
        that._enqueue_pipe(lambda: Active(AsyncMapStage(mapper, that._on_error)))
        return that

    def filter(self, filterer: AsyncFilterer[Output]) -> AsyncAccumulator[Output, Output]:
        """Keep each datum for which (await) filterer(datum, index) is truthy."""
        that: AsyncAccumulator[Output, Output] = self._recast()
        if that._error is not None:
            return that
        that._enqueue_pipe(lambda: Active(AsyncFilterStage(filterer, that._on_error)))
        return that

    def sort(self, sorter: AsyncSorter[Output]) -> AsyncAccumulator[Output, Output]:
        """Order data online by insertion with a three-way comparator."""
        that: AsyncAccumulator[Output, Output] = self._recast()
        if that._error is not None:
            return that
        that._enqueue_pipe(lambda: Active(AsyncSortStage(sorter, that._on_error)))
        return that

    def pivot[T](
        self,
        *,
        classifier: AsyncClassifier[Output],
        reducer: AsyncReducer[Output, T],
        initial_value: T | Any = MISSING,
        classification_name: str | None = None,
        value_name: str | None = None,
    ) -> AsyncAccumulator[Output, dict[str, Any]]:
        """Group data by classification key and reduce each group.

        See SyncAccumulator.pivot(). Each partition has its own action
        queue, so partitions reduce concurrently while each one stays in
        arrival order.
        """
        that: AsyncAccumulator[Output, dict[str, Any]] = self._recast()
        if that._error is not None:
            return that

        def build() -> Active[AsyncPivotStage]:
            partition_count = 0

            def make_partition() -> AsyncAccumulator[Any, Any]:
                nonlocal partition_count
                partition_count += 1
                return that._make_partition(reducer, initial_value, partition_count)

            return Active(
                AsyncPivotStage(
                    classifier,
                    make_partition,
                    that._on_error,
                    classification_name=classification_name,
                    value_name=value_name,
                )
            )

        that._enqueue_pipe(build)
        return that

    # =========================================================================
    # Results
    # =========================================================================

    async def _settled(self) -> list[Output] | AccumulatorError:
        await self._queue.drain()
        resolved: list[Output] = await self._queue.submit(self._resolve)
        if self._error is None:
            return resolved
        if self._throws:
            raise self._error
        return self._error

    async def result(self) -> ResolvedView[Output] | AccumulatorError:
        """Wait for every queued action, then resolve the pipeline.

        Returns:
            A restartable view over the output, or the captured
            AccumulatorError in capture mode.

        Raises:
            AccumulatorError: In raise mode, the recorded failure.
            ActionQueueError: If a queued action failed outside the error channel.
        """
        settled = await self._settled()
        if isinstance(settled, AccumulatorError):
            return settled
        return ResolvedView(settled)

    async def to_list(self) -> list[Output] | AccumulatorError:
        """Like result(), but returns a new list."""
        return await self._settled()

    def __aiter__(self) -> AsyncIterator[Output]:
        if not self._throws:
            raise TypeError(
                "Accumulator in capture mode is not iterable: await result() and check for AccumulatorError, "
                "or enable exceptions first"
            )
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Output]:
        result = await self.result()
        if isinstance(result, AccumulatorError):
            raise result
        for item in result:
            yield item
