"""Tests for data models and configuration."""

from __future__ import annotations

import pytest

from bayes_classifier.config import ClassifierConfig
from bayes_classifier.models import Classification, ModelStats

# ---------------------------------------------------------------------------
# Classification tests
# ---------------------------------------------------------------------------


class TestClassification:
    """Tests for the Classification record."""

    def test_featureset_is_tuple(self) -> None:
        c = Classification(["a", "b"], "x")
        assert c.featureset == ("a", "b")
        assert c.probability == 0.0

    def test_equality_ignores_order_duplicates_and_probability(self) -> None:
        a = Classification(("a", "b", "b"), "x", probability=0.3)
        b = Classification(("b", "a"), "x", probability=0.9)
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_different_category_not_equal(self) -> None:
        assert Classification(("a",), "x") != Classification(("a",), "y")

    def test_not_equal_to_other_types(self) -> None:
        assert Classification(("a",), "x") != ("a", "x")

    def test_is_immutable(self) -> None:
        c = Classification(("a",), "x")
        with pytest.raises(AttributeError):
            c.category = "y"  # type: ignore[misc]

    def test_unknown(self) -> None:
        c = Classification.unknown(["a"])
        assert c.is_unknown
        assert c.category is None
        assert c.probability == 0.0
        assert c.featureset == ("a",)
        assert not Classification(("a",), "x").is_unknown

    def test_string_featureset_rejected(self) -> None:
        with pytest.raises(TypeError, match="string"):
            Classification("abc", "x")
        with pytest.raises(TypeError, match="string"):
            Classification(b"abc", "x")

    def test_with_probability(self) -> None:
        c = Classification(("a",), "x").with_probability(0.4)
        assert c.probability == 0.4
        assert c.category == "x"

    def test_dict_roundtrip(self) -> None:
        c = Classification(("a", "b"), "x", 0.25)
        data = c.to_dict()
        assert data == {"featureset": ["a", "b"], "category": "x", "probability": 0.25}
        restored = Classification.from_dict(data)
        assert restored == c
        assert restored.probability == 0.25


# ---------------------------------------------------------------------------
# ModelStats tests
# ---------------------------------------------------------------------------


class TestModelStats:
    """Tests for the ModelStats summary."""

    def test_fill_ratio(self) -> None:
        stats = ModelStats(examples=25, memory_capacity=100, feature_count=3, category_count=2)
        assert stats.fill_ratio == 0.25

    def test_to_dict_stringifies_categories(self) -> None:
        stats = ModelStats(
            examples=2, memory_capacity=10, feature_count=4, category_count=2,
            examples_per_category={1: 1, "b": 1},
        )
        data = stats.to_dict()
        assert data["examples_per_category"] == {"1": 1, "b": 1}
        assert data["fill_ratio"] == 0.2


# ---------------------------------------------------------------------------
# ClassifierConfig tests
# ---------------------------------------------------------------------------


class TestClassifierConfig:
    """Tests for configuration validation."""

    def test_defaults(self) -> None:
        config = ClassifierConfig()
        assert config.memory_capacity == 1000
        assert config.weight == 1.0
        assert config.assumed_probability == 0.5
        assert config.strategy == "bayes"

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"memory_capacity": 0}, "memory_capacity"),
            ({"memory_capacity": "10"}, "memory_capacity"),
            ({"weight": 0}, "weight"),
            ({"assumed_probability": 1.5}, "assumed_probability"),
            ({"assumed_probability": -0.1}, "assumed_probability"),
            ({"strategy": "svm"}, "Unknown strategy"),
        ],
    )
    def test_invalid_values_raise(self, kwargs, message) -> None:
        with pytest.raises(ValueError, match=message):
            ClassifierConfig(**kwargs)

    def test_dict_roundtrip_ignores_unknown_keys(self) -> None:
        config = ClassifierConfig(memory_capacity=10, strategy="log-bayes")
        data = config.to_dict()
        data["obsolete"] = True
        assert ClassifierConfig.from_dict(data) == config
