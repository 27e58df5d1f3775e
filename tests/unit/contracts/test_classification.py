# tests/unit/contracts/test_classification.py
"""Tests for classifier result normalization and the metadata registry."""

import pytest

from foldline.contracts.classification import (
    Classification,
    ClassificationRegistry,
    normalize_classifications,
)


class TestNormalizeClassifications:
    """Every accepted classifier result shape normalizes to entries."""

    def test_single_key(self) -> None:
        assert normalize_classifications("red") == [Classification(key="red")]

    def test_list_of_keys_has_no_metadata(self) -> None:
        entries = normalize_classifications(["red", "blue"])

        assert entries == [Classification(key="red"), Classification(key="blue")]
        assert all(entry.metadata is None for entry in entries)

    def test_single_mapping_with_metadata(self) -> None:
        entries = normalize_classifications({"key": "Maria:Wang", "metadata": {"first_name": "Maria"}})

        assert entries == [Classification(key="Maria:Wang", metadata={"first_name": "Maria"})]

    def test_list_of_mappings(self) -> None:
        entries = normalize_classifications([{"key": "a", "metadata": 1}, {"key": "b"}])

        assert entries == [Classification(key="a", metadata=1), Classification(key="b")]

    def test_classification_instances_pass_through(self) -> None:
        entry = Classification(key="x", metadata={"n": 1})

        assert normalize_classifications(entry) == [entry]
        assert normalize_classifications((entry,)) == [entry]

    def test_integer_key_becomes_text(self) -> None:
        """Keys are text: 7 % 3 classifies under "1", not 1."""
        assert normalize_classifications(7 % 3) == [Classification(key="1")]
        assert normalize_classifications([0, 2]) == [Classification(key="0"), Classification(key="2")]

    def test_mapping_key_becomes_text(self) -> None:
        assert normalize_classifications({"key": 3}) == [Classification(key="3")]

    def test_empty_list_yields_no_entries(self) -> None:
        assert normalize_classifications([]) == []

    def test_set_of_keys_is_several_entries(self) -> None:
        entries = normalize_classifications({"a", "b"})

        assert sorted(entry.key for entry in entries) == ["a", "b"]

    def test_generator_of_keys_is_several_entries(self) -> None:
        entries = normalize_classifications(n % 2 for n in range(3))

        assert entries == [Classification("0"), Classification("1"), Classification("0")]

    def test_bytes_is_a_single_key(self) -> None:
        assert normalize_classifications(b"ab") == [Classification(key="b'ab'")]

    def test_mapping_without_key_rejected(self) -> None:
        with pytest.raises(ValueError, match="'key'"):
            normalize_classifications({"metadata": {"a": 1}})


class TestClassificationRegistry:
    """Metadata is fixed at first observation."""

    def test_first_seen_metadata_wins(self) -> None:
        registry = ClassificationRegistry()

        registry.register(Classification(key="a", metadata={"v": 1}))
        registry.register(Classification(key="a", metadata={"v": 2}))

        assert registry.metadata_for("a") == {"v": 1}

    def test_missing_metadata_does_not_block_later_metadata(self) -> None:
        registry = ClassificationRegistry()

        registry.register(Classification(key="a"))
        registry.register(Classification(key="a", metadata={"v": 2}))

        assert registry.metadata_for("a") == {"v": 2}

    def test_unknown_key_has_no_metadata(self) -> None:
        registry = ClassificationRegistry()

        assert registry.metadata_for("nope") is None
        assert "nope" not in registry
        assert len(registry) == 0
