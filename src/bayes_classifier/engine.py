"""Bayes engine: probability estimation, learning and classification.

The engine composes a :class:`~bayes_classifier.store.FrequencyStore` with a
scoring strategy. The store keeps the counts, the engine turns them into
probabilities and the strategy turns probabilities into category scores.

Example::

    engine = BayesEngine()
    engine.learn("positive", ["I", "love", "sunny", "days"])
    engine.learn("negative", ["I", "hate", "rain"])

    engine.classify(["today", "is", "a", "sunny", "day"]).category  # "positive"
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Hashable, Iterable, Optional, Union

from .config import ClassifierConfig
from .models import Classification, ModelStats
from .probability import FeatureProbability, weighed_average
from .store import FrequencyStore
from .strategies import ScoringStrategy, get_strategy

logger = logging.getLogger(__name__)

Example = Union[Classification, tuple[Hashable, Iterable[Hashable]]]


class BayesEngine:
    """Incrementally trained Bayesian classifier with bounded memory.

    Only the most recent ``memory_capacity`` training examples influence
    the counts; older ones are forgotten by reversing their contribution.
    The engine is not thread-safe.

    Args:
        config: Classifier configuration (defaults to :class:`ClassifierConfig`).
        strategy: Scoring strategy overriding ``config.strategy``.
        store: Existing frequency store to use instead of a fresh one. Its
            memory capacity takes precedence over ``config.memory_capacity``.
    """

    def __init__(
        self,
        config: Optional[ClassifierConfig] = None,
        strategy: Optional[ScoringStrategy] = None,
        store: Optional[FrequencyStore] = None,
    ) -> None:
        config = config or ClassifierConfig()
        if store is None:
            store = FrequencyStore(memory_capacity=config.memory_capacity)
        elif store.memory_capacity != config.memory_capacity:
            config = dataclasses.replace(config, memory_capacity=store.memory_capacity)

        self._config = config
        self._store = store
        self._strategy = strategy or get_strategy(config.strategy)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> ClassifierConfig:
        return self._config

    @property
    def store(self) -> FrequencyStore:
        return self._store

    @property
    def strategy(self) -> ScoringStrategy:
        return self._strategy

    @property
    def memory_capacity(self) -> int:
        return self._store.memory_capacity

    def set_memory_capacity(self, memory_capacity: int) -> None:
        """Change the memory capacity, forgetting the oldest examples if needed."""
        self._store.set_memory_capacity(memory_capacity)
        self._config = dataclasses.replace(self._config, memory_capacity=memory_capacity)

    # ------------------------------------------------------------------
    # Count queries
    # ------------------------------------------------------------------

    def get_feature_count(self, feature: Hashable, category: Hashable) -> int:
        return self._store.get_feature_count(feature, category)

    def get_total_feature_count(self, feature: Hashable) -> int:
        return self._store.get_total_feature_count(feature)

    def get_category_count(self, category: Hashable) -> int:
        return self._store.get_category_count(category)

    def get_categories_total(self) -> int:
        return self._store.get_categories_total()

    def get_features(self) -> set[Hashable]:
        return self._store.get_features()

    def get_categories(self) -> set[Hashable]:
        return self._store.get_categories()

    # ------------------------------------------------------------------
    # Probabilities
    # ------------------------------------------------------------------

    def feature_probability(self, feature: Hashable, category: Hashable) -> float:
        """Fraction of the occurrences of ``feature`` that fell in ``category``.

        Returns 0 for a feature that was never seen.
        """
        total = self._store.get_total_feature_count(feature)
        if total == 0:
            return 0.0
        return self._store.get_feature_count(feature, category) / total

    def feature_weighed_average(
        self,
        feature: Hashable,
        category: Hashable,
        calculator: Optional[FeatureProbability] = None,
        weight: Optional[float] = None,
        assumed_probability: Optional[float] = None,
    ) -> float:
        """Smoothed probability of ``category`` given ``feature``.

        Blends ``assumed_probability`` (worth ``weight`` observations) with
        the probability reported by ``calculator`` (worth as many
        observations as the feature has been seen). An unseen feature gets
        exactly ``assumed_probability``.

        Args:
            feature: The feature to evaluate.
            category: The category to evaluate.
            calculator: Probability source; the engine itself by default.
            weight: Pseudo-count of the assumed probability
                (``config.weight`` by default).
            assumed_probability: Prior guess
                (``config.assumed_probability`` by default).

        Returns:
            The weighed average probability.
        """
        if weight is None:
            weight = self._config.weight
        if assumed_probability is None:
            assumed_probability = self._config.assumed_probability

        source = calculator if calculator is not None else self
        basic = source.feature_probability(feature, category)
        totals = self._store.get_total_feature_count(feature)
        return weighed_average(basic, totals, weight, assumed_probability)

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    def learn(
        self,
        category: Union[Hashable, Classification],
        features: Optional[Iterable[Hashable]] = None,
    ) -> Classification:
        """Train on one example.

        Accepts either ``learn(category, features)`` or
        ``learn(classification)``. Once the memory exceeds its capacity, the
        oldest example is forgotten.

        Returns:
            The learned classification.

        Raises:
            ValueError: If the category is ``None``.
            TypeError: If features are missing, given as a plain string, or
                unhashable. Nothing is counted in that case.
        """
        classification = _as_classification(category, features)

        self._store.count(classification)
        evicted = self._store.remember(classification)
        if evicted is not None:
            self._store.forget(evicted)
            logger.debug(f"Forgot oldest example labeled {evicted.category!r}.")

        logger.debug(
            f"Learned {classification.category!r} from {len(classification.featureset)} features."
        )
        return classification

    def learn_many(self, examples: Iterable[Example]) -> int:
        """Train on a sequence of classifications or ``(category, features)`` pairs.

        Returns:
            Number of examples learned.
        """
        learned = 0
        for example in examples:
            if isinstance(example, Classification):
                self.learn(example)
            else:
                category, features = example
                self.learn(category, features)
            learned += 1
        logger.debug(f"Learned {learned} examples, {len(self._store)} remembered.")
        return learned

    def reset(self) -> None:
        """Forget everything learned so far."""
        self._store.reset()

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify_detailed(self, features: Iterable[Hashable]) -> list[Classification]:
        """Score every known category.

        Returns:
            One classification per known category carrying its raw score,
            sorted ascending so the most likely category comes last. Equal
            scores rank the earlier learned category higher.
        """
        featureset = _as_featureset(features)
        order = {category: index for index, category in enumerate(self._store.categories)}
        scores = sorted(
            self._strategy(self, featureset),
            key=lambda s: (s.rank, -order.get(s.category, 0)),
        )
        return [Classification(featureset, s.category, s.score) for s in scores]

    def classify(self, features: Iterable[Hashable]) -> Classification:
        """Return the most likely category for ``features``.

        If nothing has been learned yet, returns the no-information result
        (``category`` is ``None`` and ``probability`` is 0).
        """
        featureset = _as_featureset(features)
        ranked = self.classify_detailed(featureset)
        if not ranked:
            logger.debug("No categories known, returning the no-information result.")
            return Classification.unknown(featureset)
        return ranked[-1]

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def top_features(self, category: Hashable, limit: int = 10) -> list[tuple[Hashable, float]]:
        """Features most indicative of ``category``.

        Ranks the features seen in ``category`` by their weighed average
        probability, breaking ties by how often they occurred.

        Args:
            category: Target category.
            limit: Maximum number of features returned.

        Returns:
            List of ``(feature, probability)`` tuples, strongest first.
        """
        counts = self._store.category_features(category)
        ranked = sorted(
            counts,
            key=lambda f: (self.feature_weighed_average(f, category), counts[f]),
            reverse=True,
        )
        return [(f, self.feature_weighed_average(f, category)) for f in ranked[:limit]]

    def stats(self) -> ModelStats:
        return ModelStats(
            examples=len(self._store),
            memory_capacity=self._store.memory_capacity,
            feature_count=len(self._store.get_features()),
            category_count=len(self._store.categories),
            examples_per_category={
                c: self._store.get_category_count(c) for c in self._store.categories
            },
        )


def _as_featureset(features: Iterable[Hashable]) -> tuple[Hashable, ...]:
    if isinstance(features, (str, bytes)):
        raise TypeError("features must be a sequence of features, not a string")
    return tuple(features)


def _as_classification(
    category: Union[Hashable, Classification],
    features: Optional[Iterable[Hashable]],
) -> Classification:
    if isinstance(category, Classification):
        if features is not None:
            raise TypeError("features cannot be passed together with a Classification")
        classification = category
    else:
        if features is None:
            raise TypeError("features are required when learning a category")
        classification = Classification(_as_featureset(features), category)

    if classification.category is None:
        raise ValueError("Cannot learn the None category, it marks unknown results")

    # Every feature and the category must be hashable before any count changes
    try:
        hash(classification)
    except TypeError as e:
        raise TypeError(f"Features and category must be hashable: {e}") from e
    return classification
