"""Probability sources and the weighed-average smoothing formula."""

from __future__ import annotations

from typing import Hashable, Mapping, Protocol, runtime_checkable


@runtime_checkable
class FeatureProbability(Protocol):
    """Anything that can estimate ``P(category | feature)``."""

    def feature_probability(self, feature: Hashable, category: Hashable) -> float:
        ...


def weighed_average(
    basic: float,
    totals: int,
    weight: float,
    assumed_probability: float,
) -> float:
    """Blend an observed probability with an assumed one.

    The assumed probability counts as ``weight`` pseudo-observations and
    the observed probability as ``totals`` real ones. With no observations
    the result is exactly ``assumed_probability``.

    Args:
        basic: Observed probability.
        totals: Number of observations behind ``basic``.
        weight: Pseudo-count of the assumed probability.
        assumed_probability: Prior guess.

    Returns:
        The smoothed probability.
    """
    return (weight * assumed_probability + totals * basic) / (weight + totals)


class MappingFeatureProbability:
    """Probability source backed by a fixed ``{(feature, category): p}`` table.

    Useful as the ``calculator`` of
    :meth:`~bayes_classifier.engine.BayesEngine.feature_weighed_average`
    when estimates come from somewhere other than the trained counts.

    Args:
        probabilities: Mapping of ``(feature, category)`` pairs to probabilities.
        default: Probability returned for pairs missing from the table.
    """

    def __init__(
        self,
        probabilities: Mapping[tuple[Hashable, Hashable], float],
        default: float = 0.0,
    ) -> None:
        for key, value in probabilities.items():
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"Probability for {key!r} must be between 0 and 1, got {value}")
        if not (0.0 <= default <= 1.0):
            raise ValueError(f"default must be between 0 and 1, got {default}")
        self._probabilities = dict(probabilities)
        self._default = default

    def feature_probability(self, feature: Hashable, category: Hashable) -> float:
        return self._probabilities.get((feature, category), self._default)
