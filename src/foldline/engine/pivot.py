"""Pivot stages: classify, reduce per partition, merge into records.

Each datum is classified into zero or more keys. Every key owns one child
accumulator (a partition) running the pivot's reducer, created lazily on
the first datum bearing that key. A datum is appended only to the
partitions of its own keys; a classifier returning an empty list drops it.

On resolve, every partition is resolved in first-observation order and
merged with its key and registered metadata into one output record. The
first partition that resolves to a failure aborts the whole pivot: the
failure is reported through the pivot's own error callback and the pivot
resolves to no records.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol

from foldline.contracts.callbacks import AsyncClassifier, Classifier
from foldline.contracts.classification import Classification, ClassificationRegistry, normalize_classifications
from foldline.contracts.enums import StageKind
from foldline.contracts.errors import AccumulatorError, ClassifierError, as_failure
from foldline.core.logging import get_logger
from foldline.engine.protocols import ErrorCallback
from foldline.engine.stages import settle

slog = get_logger(__name__)

# Record fields used when a value cannot be spread into the record
METADATA_FIELD = "metadata"
VALUE_FIELD = "value"


class Partition(Protocol):
    """Child accumulator owned by one pivot key (sync)."""

    def append(self, data: Iterable[Any]) -> Any: ...

    def result(self) -> Iterable[Any] | AccumulatorError: ...


class AsyncPartition(Protocol):
    """Child accumulator owned by one pivot key (async)."""

    def append(self, data: Iterable[Any]) -> Any: ...

    async def result(self) -> Iterable[Any] | AccumulatorError: ...


def build_pivot_record(
    key: str,
    metadata: Any,
    value: Any,
    classification_name: str | None,
    value_name: str | None,
) -> dict[str, Any]:
    """Merge one partition's key, metadata and reduced value into a record.

    Precedence (later wins on field collisions):
        1. {classification_name: key}, if classification_name is set
        2. metadata fields (non-mapping metadata goes under "metadata")
        3. reduced value: {value_name: value} if value_name is set, else the
           value's own fields (non-mapping values go under "value")
    """
    record: dict[str, Any] = {}
    if classification_name:
        record[classification_name] = key
    if metadata is not None:
        if isinstance(metadata, Mapping):
            record.update(metadata)
        else:
            record[METADATA_FIELD] = metadata
    if value_name:
        record[value_name] = value
    elif isinstance(value, Mapping):
        record.update(value)
    else:
        record[VALUE_FIELD] = value
    return record


def _classify(classifier_result: Any) -> list[Classification] | BaseException:
    failure = as_failure(classifier_result)
    if failure is not None:
        return failure
    try:
        return normalize_classifications(classifier_result)
    except ValueError as exc:
        return exc


class _PivotState[P]:
    """Partitions and registry shared by the sync and async pivot stages."""

    def __init__(
        self,
        make_partition: Callable[[], P],
        on_error: ErrorCallback,
        classification_name: str | None,
        value_name: str | None,
    ) -> None:
        self.make_partition = make_partition
        self.on_error = on_error
        self.classification_name = classification_name
        self.value_name = value_name
        self.partitions: dict[str, P] = {}
        self.registry = ClassificationRegistry()
        self.index = 0

    def next_index(self) -> int:
        index = self.index
        self.index += 1
        return index

    def partitions_for(self, entries: list[Classification]) -> list[P]:
        """Register metadata and look up (or create) each entry's partition."""
        found: list[P] = []
        for entry in entries:
            self.registry.register(entry)
            partition = self.partitions.get(entry.key)
            if partition is None:
                partition = self.make_partition()
                self.partitions[entry.key] = partition
                slog.debug("pivot_partition_created", key=entry.key, partition_count=len(self.partitions))
            found.append(partition)
        return found

    def record(self, key: str, resolved: Iterable[Any]) -> dict[str, Any]:
        value = next(iter(resolved))
        return build_pivot_record(
            key,
            self.registry.metadata_for(key),
            value,
            self.classification_name,
            self.value_name,
        )


class PivotStage:
    """Synchronous pivot stage over sync child accumulators."""

    kind = StageKind.PIVOT

    def __init__(
        self,
        classifier: Classifier[Any],
        make_partition: Callable[[], Partition],
        on_error: ErrorCallback,
        *,
        classification_name: str | None = None,
        value_name: str | None = None,
    ) -> None:
        self._classifier = classifier
        self._state = _PivotState(make_partition, on_error, classification_name, value_name)

    def append(self, datum: Any) -> None:
        index = self._state.next_index()
        try:
            entries = _classify(self._classifier(datum))
        except Exception as exc:
            entries = exc
        if isinstance(entries, BaseException):
            self._state.on_error(ClassifierError(entries, index=index))
            return
        for partition in self._state.partitions_for(entries):
            partition.append([datum])

    def resolve(self) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        for key, partition in self._state.partitions.items():
            resolved = partition.result()
            if isinstance(resolved, AccumulatorError):
                self._state.on_error(resolved)
                return []
            records.append(self._state.record(key, resolved))
        return records


class AsyncPivotStage:
    """Pivot stage whose classifier and partition reducers may suspend."""

    kind = StageKind.PIVOT

    def __init__(
        self,
        classifier: AsyncClassifier[Any],
        make_partition: Callable[[], AsyncPartition],
        on_error: ErrorCallback,
        *,
        classification_name: str | None = None,
        value_name: str | None = None,
    ) -> None:
        self._classifier = classifier
        self._state = _PivotState(make_partition, on_error, classification_name, value_name)

    async def append(self, datum: Any) -> None:
        index = self._state.next_index()
        try:
            entries = _classify(await settle(self._classifier(datum)))
        except Exception as exc:
            entries = exc
        if isinstance(entries, BaseException):
            self._state.on_error(ClassifierError(entries, index=index))
            return
        for partition in self._state.partitions_for(entries):
            # Enqueues on the partition's own action queue
            partition.append([datum])

    async def resolve(self) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        for key, partition in self._state.partitions.items():
            resolved = await partition.result()
            if isinstance(resolved, AccumulatorError):
                self._state.on_error(resolved)
                return []
            records.append(self._state.record(key, resolved))
        return records
