# src/foldline/accumulate.py
"""Factory functions for accumulator pipelines.

    from foldline import accumulate

    result = accumulate([1, 2, 3, 4, 5, 6, 7]).pivot(
        classifier=lambda n: n % 3,
        reducer=lambda total, n, _i: total + n,
        classification_name="remainder",
        value_name="total",
    ).result()
    # [{"remainder": "1", "total": 12}, {"remainder": "2", "total": 7},
    #  {"remainder": "0", "total": 9}]
"""

from __future__ import annotations

from collections.abc import Iterable

from foldline.contracts.enums import ErrorHandling
from foldline.core.config import AccumulatorSettings
from foldline.engine.accumulator import SyncAccumulator
from foldline.engine.async_accumulator import AsyncAccumulator


def _resolve_settings(
    error_handling: ErrorHandling | str | None,
    settings: AccumulatorSettings | None,
) -> AccumulatorSettings:
    """Merge an explicit error_handling argument over settings (validated)."""
    base = settings if settings is not None else AccumulatorSettings()
    if error_handling is None:
        return base
    return base.with_error_handling(error_handling)


def accumulate[T](
    data: Iterable[T] | None = None,
    error_handling: ErrorHandling | str | None = None,
    *,
    settings: AccumulatorSettings | None = None,
) -> SyncAccumulator[T, T]:
    """Create a synchronous accumulator seeded with data.

    Args:
        data: Initial input (may be empty or omitted).
        error_handling: "error" (default) returns failures from result();
            "exception" raises them where they occur.
        settings: Base settings; an explicit error_handling overrides them.

    Raises:
        AccumulatorConfigError: If error_handling is not a recognized value.
    """
    resolved = _resolve_settings(error_handling, settings)
    return SyncAccumulator(data if data is not None else (), throws=resolved.throws)


def accumulate_async[T](
    data: Iterable[T] | None = None,
    error_handling: ErrorHandling | str | None = None,
    *,
    settings: AccumulatorSettings | None = None,
    name: str = "accumulator",
) -> AsyncAccumulator[T, T]:
    """Create an asynchronous accumulator seeded with data.

    Same arguments as accumulate(). In "exception" mode the awaited
    result() raises the recorded failure. name labels the action queue in
    log events.
    """
    resolved = _resolve_settings(error_handling, settings)
    return AsyncAccumulator(data if data is not None else (), throws=resolved.throws, name=name)
