"""Classification entries produced by pivot classifiers.

A classifier maps one datum to one or more classification entries. Each
entry carries a text key naming the partition, plus optional metadata that
is merged into that partition's output record.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

type ClassifierResult = (
    str | int | Classification | Mapping[str, Any] | Iterable[str | int | Classification | Mapping[str, Any]]
)


@dataclass(frozen=True, slots=True)
class Classification:
    """One classification of a datum.

    Attributes:
        key: Partition key (always text)
        metadata: Extra fields for the partition's output record, or None
    """

    key: str
    metadata: Any = None


def _to_entry(item: object) -> Classification:
    if isinstance(item, Classification):
        return item
    if isinstance(item, str):
        return Classification(key=item)
    if isinstance(item, Mapping):
        if "key" not in item:
            raise ValueError(f"Classification mapping must have a 'key' entry, got keys {sorted(map(str, item))}")
        return Classification(key=str(item["key"]), metadata=item.get("metadata"))
    return Classification(key=str(item))


def normalize_classifications(result: object) -> list[Classification]:
    """Normalize a classifier's return value into classification entries.

    Accepted forms:
        "key"                                 -> [Classification("key")]
        ["a", "b"]                            -> [Classification("a"), Classification("b")]
        {"key": "a", "metadata": {...}}       -> [Classification("a", {...})]
        [{"key": "a", ...}, {"key": "b"}]     -> two entries with metadata
        Classification(...) or a list of them -> unchanged

    Any iterable other than a string, bytes or a mapping (list, tuple, set,
    generator) counts as several entries, taken in iteration order.

    Non-string scalar keys (e.g. ints) are converted with str(). An empty
    list yields no entries, so the datum joins no partition.

    Raises:
        ValueError: If a mapping entry has no "key".
    """
    if isinstance(result, Iterable) and not isinstance(result, (str, bytes, bytearray, Mapping)):
        return [_to_entry(item) for item in result]
    return [_to_entry(result)]


class ClassificationRegistry:
    """Maps each observed key to its first-seen metadata.

    Metadata for a key is fixed at first observation of non-None metadata
    and never overwritten. Key order is first-observation order.
    """

    def __init__(self) -> None:
        self._metadata: dict[str, Any] = {}

    def register(self, entry: Classification) -> None:
        if entry.metadata is None or entry.key in self._metadata:
            return
        self._metadata[entry.key] = entry.metadata

    def metadata_for(self, key: str) -> Any:
        """Return registered metadata for key, or None."""
        return self._metadata.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._metadata

    def __len__(self) -> int:
        return len(self._metadata)
