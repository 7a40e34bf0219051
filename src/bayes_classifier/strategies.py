"""Category scoring strategies.

A strategy is a plain callable ``strategy(engine, features)`` yielding one
:class:`CategoryScore` per known category. The engine ranks the scores and
turns them into :class:`~bayes_classifier.models.Classification` results,
so a new strategy never has to touch the counting code.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Callable, Hashable, Iterable, Iterator, NamedTuple, Sequence

if TYPE_CHECKING:
    from .engine import BayesEngine


class CategoryScore(NamedTuple):
    """Score of one category.

    ``score`` is the value reported to callers; ``rank`` orders the
    categories and may differ from ``score`` when the strategy works in a
    transformed space (e.g. logarithms).
    """

    category: Hashable
    score: float
    rank: float


ScoringStrategy = Callable[["BayesEngine", Sequence[Hashable]], Iterable[CategoryScore]]


def category_prior(engine: "BayesEngine", category: Hashable) -> float:
    """Relative frequency of ``category`` among remembered examples."""
    total = engine.get_categories_total()
    if total == 0:
        return 0.0
    return engine.get_category_count(category) / total


def bayes_scores(
    engine: "BayesEngine",
    features: Sequence[Hashable],
) -> Iterator[CategoryScore]:
    """Score each category as ``prior * product of smoothed feature probabilities``.

    Repeated features contribute one factor per occurrence.
    """
    for category in engine.store.categories:
        score = category_prior(engine, category)
        for feature in features:
            score *= engine.feature_weighed_average(feature, category)
        yield CategoryScore(category, score, score)


def log_bayes_scores(
    engine: "BayesEngine",
    features: Sequence[Hashable],
) -> Iterator[CategoryScore]:
    """Same score as :func:`bayes_scores`, accumulated in log space.

    Categories are ranked by the summed logarithms, so the ranking survives
    feature sets long enough for the reported (exponentiated) score to
    underflow to zero.
    """
    for category in engine.store.categories:
        log_score = _log(category_prior(engine, category))
        for feature in features:
            if log_score == -math.inf:
                break
            log_score += _log(engine.feature_weighed_average(feature, category))
        yield CategoryScore(category, math.exp(log_score), log_score)


def _log(value: float) -> float:
    return math.log(value) if value > 0 else -math.inf


STRATEGIES: dict[str, ScoringStrategy] = {
    "bayes": bayes_scores,
    "log-bayes": log_bayes_scores,
}


def get_strategy(name: str) -> ScoringStrategy:
    """Look up a registered strategy by name.

    Raises:
        ValueError: If no strategy is registered under ``name``.
    """
    try:
        return STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown strategy '{name}'. Known: {', '.join(sorted(STRATEGIES))}"
        ) from None
