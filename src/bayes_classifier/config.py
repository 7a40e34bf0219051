"""Classifier configuration."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields

from .strategies import STRATEGIES

DEFAULT_MEMORY_CAPACITY = 1000
DEFAULT_WEIGHT = 1.0
DEFAULT_ASSUMED_PROBABILITY = 0.5
DEFAULT_STRATEGY = "bayes"


@dataclass
class ClassifierConfig:
    """Tunable parameters of a :class:`~bayes_classifier.engine.BayesEngine`.

    Args:
        memory_capacity: Number of most recent training examples whose
            counts are retained.
        weight: Pseudo-count given to the assumed probability when smoothing.
        assumed_probability: Probability assumed for features with no
            observations.
        strategy: Name of the scoring strategy (see
            :data:`~bayes_classifier.strategies.STRATEGIES`).
    """

    memory_capacity: int = DEFAULT_MEMORY_CAPACITY
    weight: float = DEFAULT_WEIGHT
    assumed_probability: float = DEFAULT_ASSUMED_PROBABILITY
    strategy: str = DEFAULT_STRATEGY

    def __post_init__(self) -> None:
        # bool is an int subclass, reject it explicitly
        if isinstance(self.memory_capacity, bool) or not isinstance(self.memory_capacity, int):
            raise ValueError(f"memory_capacity must be an integer, got {self.memory_capacity!r}")
        if self.memory_capacity <= 0:
            raise ValueError(f"memory_capacity must be positive, got {self.memory_capacity}")

        if self.weight <= 0:
            raise ValueError(f"weight must be positive, got {self.weight}")

        if not (0.0 <= self.assumed_probability <= 1.0):
            raise ValueError(
                f"assumed_probability must be between 0 and 1, got {self.assumed_probability}"
            )

        if self.strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown strategy '{self.strategy}'. Known: {', '.join(sorted(STRATEGIES))}"
            )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClassifierConfig":
        """Build a config from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
