"""Error hierarchy for accumulator pipelines.

Every failure the engine reports is an AccumulatorError. In capture mode
the error is returned as a value from result-producing calls; in raise
mode it is raised at the point of detection.

Failure taxonomy:
- CallbackError subclasses: a user callback raised, or (classifier and
  reducer only) returned an Exception instance. The original failure is
  chained as __cause__.
- EmptyReductionError: reduce() resolved without data or initial value.
- AccumulatorInvariantError: an error was stored while in raise mode.
  Raise mode raises eagerly, so this indicates an engine bug.
"""

from __future__ import annotations

from foldline.contracts.enums import StageKind


class AccumulatorError(Exception):
    """Base class for all failures reported by an accumulator."""


class AccumulatorConfigError(AccumulatorError):
    """Raised when accumulator settings are invalid."""

    pass


class CallbackError(AccumulatorError):
    """A user-supplied callback failed while processing a datum.

    Attributes:
        stage: Kind of stage whose callback failed
        index: Per-stage datum index passed to the callback, if any
        failure: The exception raised or returned by the callback
    """

    stage: StageKind = StageKind.SOURCE

    def __init__(self, failure: BaseException, *, index: int | None = None) -> None:
        self.failure = failure
        self.index = index
        detail = str(failure) or type(failure).__name__
        location = f" at index {index}" if index is not None else ""
        super().__init__(f"{self.stage} callback failed{location}: {detail}")
        self.__cause__ = failure


class ClassifierError(CallbackError):
    """The pivot classifier raised or returned a failure."""

    stage = StageKind.PIVOT


class ReducerError(CallbackError):
    """A reducer raised or returned a failure."""

    stage = StageKind.REDUCE


class MapperError(CallbackError):
    """A mapper raised."""

    stage = StageKind.MAP


class FiltererError(CallbackError):
    """A filter predicate raised."""

    stage = StageKind.FILTER


class SorterError(CallbackError):
    """A sort comparator raised."""

    stage = StageKind.SORT


class EmptyReductionError(AccumulatorError):
    """reduce() was resolved with no data and no initial value."""

    def __init__(self) -> None:
        super().__init__("Unable to reduce(): no data or initial value")


class AccumulatorInvariantError(AccumulatorError):
    """An error was stored although errors are expected to be raised.

    Raise mode raises every failure eagerly, so a stored error at result
    time means the engine itself is broken.
    """

    def __init__(self, original: AccumulatorError) -> None:
        self.original = original
        super().__init__(
            f"Error set although errors expected to be raised. This is a programming error. Original error: {original}"
        )


class ActionQueueError(AccumulatorError):
    """An enqueued action failed outside the accumulator's error channel."""

    pass


def as_failure(value: object) -> BaseException | None:
    """Return value if it is an explicit failure return, else None.

    Classifiers and reducers may signal failure by returning an Exception
    instance instead of raising it.
    """
    if isinstance(value, Exception):
        return value
    return None
