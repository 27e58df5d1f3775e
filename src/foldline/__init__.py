"""
foldline: composable, incrementally-fed accumulator pipelines.

Chain reduce, map, filter, sort and pivot (group-by with per-key
reduction) in any order, append data at any time, and choose whether
failures are returned as values or raised.
"""

from foldline.accumulate import accumulate, accumulate_async
from foldline.contracts import (
    MISSING,
    AccumulatorConfigError,
    AccumulatorError,
    AccumulatorInvariantError,
    ActionQueueError,
    CallbackError,
    Classification,
    ClassifierError,
    EmptyReductionError,
    ErrorHandling,
    FiltererError,
    MapperError,
    ReducerError,
    SorterError,
)
from foldline.core import AccumulatorSettings, configure_logging, load_settings
from foldline.engine import AsyncAccumulator, ResolvedView, SyncAccumulator

__version__ = "0.1.0"

__all__ = [
    "MISSING",
    "AccumulatorConfigError",
    "AccumulatorError",
    "AccumulatorInvariantError",
    "AccumulatorSettings",
    "ActionQueueError",
    "AsyncAccumulator",
    "CallbackError",
    "Classification",
    "ClassifierError",
    "EmptyReductionError",
    "ErrorHandling",
    "FiltererError",
    "MapperError",
    "ReducerError",
    "ResolvedView",
    "SorterError",
    "SyncAccumulator",
    "accumulate",
    "accumulate_async",
    "configure_logging",
    "load_settings",
]
