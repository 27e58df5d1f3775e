"""Result containers returned by accumulators."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class ResolvedView[T]:
    """Restartable, sized view over an accumulator's resolved output.

    Every iter() call starts again from the first element, so the view can
    be consumed any number of times. The underlying items are a snapshot
    taken at result time; later appends to the accumulator do not show up.

    Usage:
        result = accumulate([3, 1, 2]).sort(lambda a, b: a - b).result()
        if isinstance(result, AccumulatorError):
            ...
        first_pass = list(result)
        second_pass = list(result)  # same elements
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[T]) -> None:
        self._items: tuple[T, ...] = tuple(items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ResolvedView({list(self._items)!r})"
