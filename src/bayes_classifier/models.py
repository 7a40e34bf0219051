"""Data models shared by the classifier core and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Optional


@dataclass(frozen=True, eq=False)
class Classification:
    """A training example or a scored classification result.

    Two classifications are equal when they carry the same set of features
    and the same category. The probability is ignored for equality and
    hashing, and the order or repetition of features does not matter.

    Attributes:
        featureset: The observed features (duplicates allowed).
        category: The assigned category, or ``None`` for the
            no-information result.
        probability: Score attached by classification (0 for training
            examples).
    """

    featureset: tuple[Hashable, ...]
    category: Optional[Hashable]
    probability: float = 0.0

    def __post_init__(self) -> None:
        # A string would otherwise become a tuple of characters
        if isinstance(self.featureset, (str, bytes)):
            raise TypeError("featureset must be a sequence of features, not a string")
        if not isinstance(self.featureset, tuple):
            object.__setattr__(self, "featureset", tuple(self.featureset))

    @classmethod
    def unknown(cls, features: Iterable[Hashable] = ()) -> "Classification":
        """Build the result returned when no category is known yet."""
        return cls(featureset=tuple(features), category=None, probability=0.0)

    @property
    def is_unknown(self) -> bool:
        return self.category is None

    def with_probability(self, probability: float) -> "Classification":
        """Return a copy carrying the given score."""
        return Classification(self.featureset, self.category, probability)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Classification):
            return NotImplemented
        return (
            self.category == other.category
            and frozenset(self.featureset) == frozenset(other.featureset)
        )

    def __hash__(self) -> int:
        return hash((frozenset(self.featureset), self.category))

    def to_dict(self) -> dict:
        return {
            "featureset": list(self.featureset),
            "category": self.category,
            "probability": self.probability,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Classification":
        return cls(
            featureset=tuple(data["featureset"]),
            category=data["category"],
            probability=float(data.get("probability", 0.0)),
        )


@dataclass
class ModelStats:
    """Summary of what a classifier currently remembers."""

    examples: int
    memory_capacity: int
    feature_count: int
    category_count: int
    examples_per_category: dict[Hashable, int] = field(default_factory=dict)

    @property
    def fill_ratio(self) -> float:
        """Fraction of the memory capacity in use (0-1)."""
        if self.memory_capacity <= 0:
            return 0.0
        return min(1.0, self.examples / self.memory_capacity)

    def to_dict(self) -> dict:
        return {
            "examples": self.examples,
            "memory_capacity": self.memory_capacity,
            "fill_ratio": round(self.fill_ratio, 4),
            "feature_count": self.feature_count,
            "category_count": self.category_count,
            "examples_per_category": {
                str(k): v for k, v in self.examples_per_category.items()
            },
        }
