"""Accumulator pipeline engine: stages, pivot, action queue, accumulators."""

from foldline.engine.accumulator import SyncAccumulator
from foldline.engine.action_queue import ActionQueue
from foldline.engine.async_accumulator import AsyncAccumulator
from foldline.engine.pivot import build_pivot_record
from foldline.engine.results import ResolvedView

__all__ = [
    "ActionQueue",
    "AsyncAccumulator",
    "ResolvedView",
    "SyncAccumulator",
    "build_pivot_record",
]
