"""Frequency bookkeeping with a bounded memory of training examples.

The :class:`FrequencyStore` owns every counter the classifier relies on:

- how often each feature occurred in each category,
- how often each feature occurred overall,
- how many remembered training examples carry each category,

plus the FIFO memory of those training examples. Counts are only ever
changed through symmetric increment/decrement operations, and zero entries
are pruned, so the counters are always the exact aggregate of the
examples currently in memory.
"""

from __future__ import annotations

import copy
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Hashable, Optional

from .config import DEFAULT_MEMORY_CAPACITY
from .models import Classification

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

@dataclass
class StoreSnapshot:
    """Plain copy of the full store state, suitable for serializers."""

    feature_count_per_category: dict[Hashable, dict[Hashable, int]] = field(default_factory=dict)
    total_feature_count: dict[Hashable, int] = field(default_factory=dict)
    total_category_count: dict[Hashable, int] = field(default_factory=dict)
    memory: list[Classification] = field(default_factory=list)
    memory_capacity: int = DEFAULT_MEMORY_CAPACITY

    def validate(self) -> None:
        """Check that the counters are the exact aggregate of the memory.

        Raises:
            ValueError: If any count invariant is violated.
        """
        if self.memory_capacity <= 0:
            raise ValueError(f"memory_capacity must be positive, got {self.memory_capacity}")
        if len(self.memory) > self.memory_capacity:
            raise ValueError(
                f"memory holds {len(self.memory)} examples, capacity is {self.memory_capacity}"
            )

        if sum(self.total_category_count.values()) != len(self.memory):
            raise ValueError(
                f"Category counts sum to {sum(self.total_category_count.values())}, "
                f"memory holds {len(self.memory)} examples"
            )

        # Counters must be exactly what replaying the memory produces
        expected = FrequencyStore(memory_capacity=self.memory_capacity)
        for classification in self.memory:
            expected.count(classification)
        if self.feature_count_per_category != expected._feature_count_per_category:
            raise ValueError("Per-category feature counts do not match the remembered examples")
        if self.total_feature_count != expected._total_feature_count:
            raise ValueError("Total feature counts do not match the remembered examples")
        if self.total_category_count != expected._total_category_count:
            raise ValueError("Category counts do not match the remembered examples")


# ---------------------------------------------------------------------------
# Frequency Store
# ---------------------------------------------------------------------------

class FrequencyStore:
    """Feature and category counters with forget-on-eviction memory.

    The store is a mutable, non-thread-safe value. Hosts sharing one
    instance between threads must serialize access themselves.

    Args:
        memory_capacity: Maximum number of remembered training examples.

    Raises:
        ValueError: If ``memory_capacity`` is not a positive integer.
    """

    def __init__(self, memory_capacity: int = DEFAULT_MEMORY_CAPACITY) -> None:
        _check_capacity(memory_capacity)
        self._memory_capacity = memory_capacity
        self.reset()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Forget every count and remembered example (capacity is kept)."""
        self._feature_count_per_category: dict[Hashable, dict[Hashable, int]] = {}
        self._total_feature_count: dict[Hashable, int] = {}
        self._total_category_count: dict[Hashable, int] = {}
        self._memory: deque[Classification] = deque()
        logger.debug("Frequency store reset.")

    # ------------------------------------------------------------------
    # Increment / decrement
    # ------------------------------------------------------------------

    def increment_feature(self, feature: Hashable, category: Hashable) -> None:
        """Record one occurrence of ``feature`` in ``category``."""
        features = self._feature_count_per_category.setdefault(category, {})
        features[feature] = features.get(feature, 0) + 1
        self._total_feature_count[feature] = self._total_feature_count.get(feature, 0) + 1

    def increment_category(self, category: Hashable) -> None:
        """Record one more training example labeled ``category``."""
        self._total_category_count[category] = self._total_category_count.get(category, 0) + 1

    def decrement_feature(self, feature: Hashable, category: Hashable) -> None:
        """Remove one occurrence of ``feature`` in ``category``.

        Unknown features or categories are ignored. Counts reaching zero
        are removed, as are categories left without features.
        """
        features = self._feature_count_per_category.get(category)
        if features is None:
            return
        count = features.get(feature)
        if count is None:
            return

        if count == 1:
            del features[feature]
            if not features:
                del self._feature_count_per_category[category]
        else:
            features[feature] = count - 1

        total = self._total_feature_count.get(feature)
        if total is None:
            return
        if total == 1:
            del self._total_feature_count[feature]
        else:
            self._total_feature_count[feature] = total - 1

    def decrement_category(self, category: Hashable) -> None:
        """Remove one training example labeled ``category`` (no-op if unknown)."""
        count = self._total_category_count.get(category)
        if count is None:
            return
        if count == 1:
            del self._total_category_count[category]
        else:
            self._total_category_count[category] = count - 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_feature_count(self, feature: Hashable, category: Hashable) -> int:
        """Occurrences of ``feature`` in ``category`` (0 if unknown)."""
        features = self._feature_count_per_category.get(category)
        if features is None:
            return 0
        return features.get(feature, 0)

    def get_total_feature_count(self, feature: Hashable) -> int:
        """Occurrences of ``feature`` across all categories (0 if unknown)."""
        return self._total_feature_count.get(feature, 0)

    def get_category_count(self, category: Hashable) -> int:
        """Remembered training examples labeled ``category`` (0 if unknown)."""
        return self._total_category_count.get(category, 0)

    def get_categories_total(self) -> int:
        """Number of remembered training examples."""
        return sum(self._total_category_count.values())

    def get_features(self) -> set[Hashable]:
        return set(self._total_feature_count)

    def get_categories(self) -> set[Hashable]:
        return set(self._total_category_count)

    @property
    def categories(self) -> list[Hashable]:
        """Known categories in the order they were first counted."""
        return list(self._total_category_count)

    def category_features(self, category: Hashable) -> dict[Hashable, int]:
        """Copy of the feature counts recorded for ``category``."""
        return dict(self._feature_count_per_category.get(category, {}))

    # ------------------------------------------------------------------
    # Memory
    # ------------------------------------------------------------------

    @property
    def memory(self) -> tuple[Classification, ...]:
        """Remembered training examples, oldest first."""
        return tuple(self._memory)

    @property
    def memory_capacity(self) -> int:
        return self._memory_capacity

    def __len__(self) -> int:
        return len(self._memory)

    def remember(self, classification: Classification) -> Optional[Classification]:
        """Append a training example to memory.

        Returns:
            The oldest example if the memory overflowed and it was popped,
            otherwise ``None``. The caller is expected to :meth:`forget` it.
        """
        self._memory.append(classification)
        if len(self._memory) > self._memory_capacity:
            return self._memory.popleft()
        return None

    def count(self, classification: Classification) -> None:
        """Add the contribution of one training example to the counters."""
        for feature in classification.featureset:
            self.increment_feature(feature, classification.category)
        self.increment_category(classification.category)

    def forget(self, classification: Classification) -> None:
        """Remove the contribution of one training example from the counters.

        This is the exact inverse of :meth:`count`.
        """
        for feature in classification.featureset:
            self.decrement_feature(feature, classification.category)
        self.decrement_category(classification.category)

    def set_memory_capacity(self, memory_capacity: int) -> None:
        """Change the memory capacity.

        When the new capacity is smaller than the number of remembered
        examples, the oldest examples are evicted and their counts are
        removed, exactly as if they had been forgotten by learning.

        Raises:
            ValueError: If ``memory_capacity`` is not a positive integer.
        """
        _check_capacity(memory_capacity)
        evicted = 0
        while len(self._memory) > memory_capacity:
            self.forget(self._memory.popleft())
            evicted += 1

        if evicted:
            logger.warning(
                f"Memory capacity reduced to {memory_capacity}, forgot {evicted} oldest examples."
            )
        else:
            logger.debug(f"Memory capacity changed from {self._memory_capacity} to {memory_capacity}.")
        self._memory_capacity = memory_capacity

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------

    def snapshot(self) -> StoreSnapshot:
        """Deep copy of the full state."""
        return StoreSnapshot(
            feature_count_per_category=copy.deepcopy(self._feature_count_per_category),
            total_feature_count=dict(self._total_feature_count),
            total_category_count=dict(self._total_category_count),
            memory=list(self._memory),
            memory_capacity=self._memory_capacity,
        )

    def restore(self, snapshot: StoreSnapshot) -> None:
        """Replace the full state with a copy of ``snapshot``.

        Raises:
            ValueError: If the snapshot is internally inconsistent.
        """
        snapshot.validate()
        self._feature_count_per_category = copy.deepcopy(snapshot.feature_count_per_category)
        self._total_feature_count = dict(snapshot.total_feature_count)
        self._total_category_count = dict(snapshot.total_category_count)
        self._memory = deque(snapshot.memory)
        self._memory_capacity = snapshot.memory_capacity
        logger.debug(f"Frequency store restored with {len(self._memory)} examples.")

    @classmethod
    def from_snapshot(cls, snapshot: StoreSnapshot) -> "FrequencyStore":
        store = cls(memory_capacity=snapshot.memory_capacity)
        store.restore(snapshot)
        return store


def _check_capacity(memory_capacity: int) -> None:
    if isinstance(memory_capacity, bool) or not isinstance(memory_capacity, int):
        raise ValueError(f"memory_capacity must be an integer, got {memory_capacity!r}")
    if memory_capacity <= 0:
        raise ValueError(f"memory_capacity must be positive, got {memory_capacity}")
