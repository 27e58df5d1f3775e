"""Shared contracts for the accumulator engine.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes are NOT re-exported here - import them from
foldline.core.config.
"""

from foldline.contracts.callbacks import (
    AsyncClassifier,
    AsyncFilterer,
    AsyncMapper,
    AsyncReducer,
    AsyncSorter,
    Classifier,
    Filterer,
    Mapper,
    Reducer,
    Sorter,
)
from foldline.contracts.classification import (
    Classification,
    ClassificationRegistry,
    ClassifierResult,
    normalize_classifications,
)
from foldline.contracts.enums import ErrorHandling, StageKind
from foldline.contracts.errors import (
    AccumulatorConfigError,
    AccumulatorError,
    AccumulatorInvariantError,
    ActionQueueError,
    CallbackError,
    ClassifierError,
    EmptyReductionError,
    FiltererError,
    MapperError,
    ReducerError,
    SorterError,
    as_failure,
)
from foldline.contracts.sentinels import MISSING, MissingSentinel

__all__ = [
    "MISSING",
    "AccumulatorConfigError",
    "AccumulatorError",
    "AccumulatorInvariantError",
    "ActionQueueError",
    "AsyncClassifier",
    "AsyncFilterer",
    "AsyncMapper",
    "AsyncReducer",
    "AsyncSorter",
    "CallbackError",
    "Classification",
    "ClassificationRegistry",
    "Classifier",
    "ClassifierError",
    "ClassifierResult",
    "EmptyReductionError",
    "ErrorHandling",
    "Filterer",
    "FiltererError",
    "Mapper",
    "MapperError",
    "MissingSentinel",
    "Reducer",
    "ReducerError",
    "Sorter",
    "SorterError",
    "StageKind",
    "as_failure",
]
