"""Callback signatures accepted by accumulator transforms.

Sync accumulators call these directly. Async accumulators accept the same
shapes but any callback may return an awaitable, which is awaited.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from foldline.contracts.classification import ClassifierResult

type MaybeAwaitable[T] = T | Awaitable[T]

# (accumulated, datum, index) -> next accumulated value, or an Exception to fail
type Reducer[Datum, Output] = Callable[[Output, Datum, int], Output | Exception]
type AsyncReducer[Datum, Output] = Callable[[Output, Datum, int], MaybeAwaitable[Output | Exception]]

# (datum, index) -> mapped value
type Mapper[Datum, Output] = Callable[[Datum, int], Output]
type AsyncMapper[Datum, Output] = Callable[[Datum, int], MaybeAwaitable[Output]]

# (datum, index) -> keep?
type Filterer[Datum] = Callable[[Datum, int], Any]
type AsyncFilterer[Datum] = Callable[[Datum, int], MaybeAwaitable[Any]]

# (a, b) -> negative, zero or positive
type Sorter[Datum] = Callable[[Datum, Datum], int]
type AsyncSorter[Datum] = Callable[[Datum, Datum], MaybeAwaitable[int]]

# datum -> key(s), optionally with metadata, or an Exception to fail
type Classifier[Datum] = Callable[[Datum], ClassifierResult | Exception]
type AsyncClassifier[Datum] = Callable[[Datum], MaybeAwaitable[ClassifierResult | Exception]]
