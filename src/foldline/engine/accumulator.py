# src/foldline/engine/accumulator.py
"""SyncAccumulator - the synchronous pipeline engine.

An accumulator owns one pending-stage slot (Active or Deferred), the
error-handling policy and the captured error. Every transform method
builds a new slot and pipes into it:

    1. resolve the current slot (drain the previous stage's output)
    2. install the new slot
    3. replay the drained output through append()

All data appended afterwards flows through the new stage until the next
transform call. result() and to_list() resolve the current slot.

Transform methods return the same object re-typed for the new output type.
No data is copied; the cast is sound only because the runtime object is
shared and its slot now produces the new type.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Self, cast

from foldline.contracts.callbacks import Classifier, Filterer, Mapper, Reducer, Sorter
from foldline.contracts.enums import StageKind
from foldline.contracts.errors import AccumulatorError, AccumulatorInvariantError
from foldline.contracts.sentinels import MISSING
from foldline.core.logging import get_logger
from foldline.engine.pivot import PivotStage
from foldline.engine.protocols import Active, Deferred, StageSlot
from foldline.engine.reduce import reduce_slot
from foldline.engine.results import ResolvedView
from foldline.engine.stages import FilterStage, MapStage, SortStage, SourceStage

slog = get_logger(__name__)


class SyncAccumulator[Datum, Output]:
    """Synchronous accumulator pipeline.

    Datum is the input type of the current stage (what append() accepts);
    Output is what result() yields.

    In capture mode (throws=False) the accumulator never raises for
    callback failures: the first failure is stored, further appends become
    no-ops, and result()/to_list() return the AccumulatorError instead of
    the output. Check with isinstance() before iterating.

    In raise mode (throws=True) failures raise at the point of detection,
    and the accumulator itself is iterable.

    Example:
        totals = (
            SyncAccumulator([1, 2, 3, 4], throws=True)
            .filter(lambda n, _i: n % 2 == 0)
            .reduce(lambda acc, n, _i: acc + n, 0)
            .to_list()
        )  # [6]
    """

    def __init__(self, data: Iterable[Datum] = (), *, throws: bool = False) -> None:
        self._throws = throws
        self._error: AccumulatorError | None = None
        self._slot: StageSlot[Any, Any] = Active(SourceStage(data))

    @property
    def throws(self) -> bool:
        """True in raise mode."""
        return self._throws

    @property
    def error(self) -> AccumulatorError | None:
        """The captured failure, if any."""
        return self._error

    @property
    def stage_kind(self) -> StageKind:
        """Kind of the stage currently handling appended data."""
        return self._slot.kind

    def enable_exceptions(self) -> Self:
        """Switch to raise mode.

        Raises:
            AccumulatorError: The already-captured failure, if there is one.
                The accumulator then stays in capture mode.
        """
        if self._error is not None:
            raise self._error
        self._throws = True
        return self

    def _recast(self) -> SyncAccumulator[Any, Any]:
        """Re-type this accumulator for the stage being installed.

        Unchecked: callers annotate the result with the new type parameters.
        Sound because the runtime object is shared, never copied.
        """
        return cast(SyncAccumulator[Any, Any], self)

    def _on_error(self, error: AccumulatorError) -> None:
        if self._throws:
            raise error
        if self._error is not None:
            return
        self._error = error
        slog.debug(
            "accumulator_error_captured",
            stage=self._slot.kind,
            error_type=type(error).__name__,
            error=str(error),
        )

    def _resolve(self) -> list[Any]:
        match self._slot:
            case Active(stage=stage):
                return stage.resolve()
            case Deferred(resolve=resolve):
                return resolve()

    def _pipe(self, slot: StageSlot[Any, Any]) -> None:
        previous = self._resolve()
        self._slot = slot
        slog.debug("stage_installed", stage=slot.kind, replayed=len(previous))
        self.append(previous)

    def _make_partition(self, reducer: Reducer[Any, Any], initial_value: Any) -> SyncAccumulator[Any, Any]:
        return SyncAccumulator((), throws=self._throws).reduce(reducer, initial_value)

    # =========================================================================
    # Data
    # =========================================================================

    def append(self, data: Iterable[Datum]) -> Self:
        """Feed data into the current stage, in order.

        The first datum installs a Deferred stage if one is pending. No-op
        once a failure has been captured.
        """
        if self._error is not None:
            return self
        for datum in data:
            if self._error is not None:
                break
            match self._slot:
                case Deferred(install=install):
                    self._slot = Active(install(datum))
                case Active(stage=stage):
                    stage.append(datum)
        return self

    # =========================================================================
    # Transforms
    # =========================================================================

    def reduce[T](self, reducer: Reducer[Output, T], initial_value: T | Any = MISSING) -> SyncAccumulator[Output, T]:
        """Fold all data into a single value.

        Args:
            reducer: (accumulated, datum, index) -> next value. Returning an
                Exception instance fails the reduction.
            initial_value: Seed. When omitted the first datum is the seed
                and folding starts at index 1.
        """
        that: SyncAccumulator[Output, T] = self._recast()
        if that._error is not None:
            return that
        that._pipe(reduce_slot(reducer, initial_value, that._on_error))
        return that

    def map[T](self, mapper: Mapper[Output, T]) -> SyncAccumulator[Output, T]:
        """Replace each datum with mapper(datum, index)."""
        that: SyncAccumulator[Output, T] = self._recast()
        if that._error is not None:
            return that
        that._pipe(Active(MapStage(mapper, that._on_error)))
        return that

    def filter(self, filterer: Filterer[Output]) -> SyncAccumulator[Output, Output]:
        """Keep each datum for which filterer(datum, index) is truthy."""
        that: SyncAccumulator[Output, Output] = self._recast()
        if that._error is not None:
            return that
        that._pipe(Active(FilterStage(filterer, that._on_error)))
        return that

    def sort(self, sorter: Sorter[Output]) -> SyncAccumulator[Output, Output]:
        """Order data with a three-way comparator (negative, zero, positive)."""
        that: SyncAccumulator[Output, Output] = self._recast()
        if that._error is not None:
            return that
        that._pipe(Active(SortStage(sorter, that._on_error)))
        return that

    def pivot[T](
        self,
        *,
        classifier: Classifier[Output],
        reducer: Reducer[Output, T],
        initial_value: T | Any = MISSING,
        classification_name: str | None = None,
        value_name: str | None = None,
    ) -> SyncAccumulator[Output, dict[str, Any]]:
        """Group data by classification key and reduce each group.

        Args:
            classifier: datum -> key, list of keys, {"key", "metadata"}
                mapping, Classification, or a list of those.
            reducer: Reducer run independently for every key.
            initial_value: Seed for every key's reduction (shallow-copied
                per key). When omitted each key seeds with its first datum.
            classification_name: Record field that receives the key.
            value_name: Record field that receives the reduced value. When
                omitted a mapping value is spread into the record.

        Returns:
            The accumulator, now producing one dict record per key in
            first-observation order.
        """
        that: SyncAccumulator[Output, dict[str, Any]] = self._recast()
        if that._error is not None:
            return that
        stage = PivotStage(
            classifier,
            lambda: that._make_partition(reducer, initial_value),
            that._on_error,
            classification_name=classification_name,
            value_name=value_name,
        )
        that._pipe(Active(stage))
        return that

    # =========================================================================
    # Results
    # =========================================================================

    def _checked(self, resolved: list[Output]) -> list[Output] | AccumulatorError:
        if self._error is None:
            return resolved
        if not self._throws:
            return self._error
        raise AccumulatorInvariantError(self._error) from self._error

    def result(self) -> ResolvedView[Output] | AccumulatorError:
        """Resolve the pipeline.

        Returns:
            A restartable view over the output, or the captured
            AccumulatorError in capture mode.
        """
        checked = self._checked(self._resolve())
        if isinstance(checked, AccumulatorError):
            return checked
        return ResolvedView(checked)

    def to_list(self) -> list[Output] | AccumulatorError:
        """Resolve the pipeline into a new list (or the captured error)."""
        return self._checked(self._resolve())

    def __iter__(self) -> Iterator[Output]:
        if not self._throws:
            raise TypeError(
                "Accumulator in capture mode is not iterable: call result() and check for AccumulatorError, "
                "or enable exceptions first"
            )
        result = self.result()
        if isinstance(result, AccumulatorError):
            raise AccumulatorInvariantError(result)
        return iter(result)
