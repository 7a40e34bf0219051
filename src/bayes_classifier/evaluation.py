"""Evaluation of online classifiers.

Provides:
- Precision, recall, F1, and confusion matrix computation
- Prequential (test-then-train) evaluation, the natural protocol for a
  classifier that keeps learning while it is used
- Stratified k-fold cross-validation with a fresh engine per fold

Labels can be any hashable value. A prediction of ``None`` stands for the
no-information result returned before any category is known.
"""

from __future__ import annotations

import logging
import random
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Hashable, Optional, Sequence

from .config import ClassifierConfig
from .engine import BayesEngine
from .models import Classification

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

@dataclass
class ClassificationMetrics:
    """Evaluation metrics for a set of predictions.

    Attributes:
        accuracy: Overall accuracy.
        per_class: Per-class precision, recall, F1 scores.
        macro_precision: Unweighted mean precision across classes.
        macro_recall: Unweighted mean recall across classes.
        macro_f1: Unweighted mean F1 across classes.
        weighted_f1: Support-weighted mean F1 across classes.
        confusion_matrix: Nested dict ``{true: {predicted: count}}``.
        support: Per-class sample counts in the true labels.
    """

    accuracy: float = 0.0
    per_class: dict[Hashable, dict[str, float]] = field(default_factory=dict)
    macro_precision: float = 0.0
    macro_recall: float = 0.0
    macro_f1: float = 0.0
    weighted_f1: float = 0.0
    confusion_matrix: dict[Hashable, dict[Hashable, int]] = field(default_factory=dict)
    support: dict[Hashable, int] = field(default_factory=dict)

    @property
    def samples(self) -> int:
        return sum(self.support.values())

    def to_dict(self) -> dict:
        return {
            "accuracy": round(self.accuracy, 4),
            "macro_precision": round(self.macro_precision, 4),
            "macro_recall": round(self.macro_recall, 4),
            "macro_f1": round(self.macro_f1, 4),
            "weighted_f1": round(self.weighted_f1, 4),
            "per_class": {
                str(cls): {k: round(v, 4) for k, v in metrics.items()}
                for cls, metrics in self.per_class.items()
            },
            "confusion_matrix": {
                str(true): {str(pred): n for pred, n in row.items()}
                for true, row in self.confusion_matrix.items()
            },
            "support": {str(cls): n for cls, n in self.support.items()},
        }

    def summary(self) -> str:
        """Human-readable summary of metrics."""
        lines = [
            f"Accuracy: {self.accuracy:.2%}",
            f"Macro F1: {self.macro_f1:.4f}",
            f"Weighted F1: {self.weighted_f1:.4f}",
            "",
            f"{'Class':<20} {'Precision':>10} {'Recall':>10} {'F1':>10} {'Support':>10}",
            "-" * 62,
        ]
        for cls in sorted(self.per_class, key=str):
            m = self.per_class[cls]
            lines.append(
                f"{str(cls):<20} {m['precision']:>10.4f} {m['recall']:>10.4f} "
                f"{m['f1']:>10.4f} {self.support.get(cls, 0):>10}"
            )
        return "\n".join(lines)


def compute_metrics(
    y_true: Sequence[Hashable],
    y_pred: Sequence[Hashable],
) -> ClassificationMetrics:
    """Compute classification metrics from true and predicted labels.

    Labels keep their order of first appearance, so they need not be
    comparable with each other.

    Raises:
        ValueError: If the label sequences differ in length.
    """
    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    labels = list(dict.fromkeys([*y_true, *y_pred]))
    outcomes = Counter(zip(y_true, y_pred))
    support = Counter(y_true)
    predicted = Counter(y_pred)

    per_class: dict[Hashable, dict[str, float]] = {}
    for label in labels:
        hits = outcomes[label, label]
        precision = hits / predicted[label] if predicted[label] else 0.0
        recall = hits / support[label] if support[label] else 0.0
        f1 = 2 * precision * recall / (precision + recall) if hits else 0.0
        per_class[label] = {"precision": precision, "recall": recall, "f1": f1}

    samples = len(y_true)
    return ClassificationMetrics(
        accuracy=sum(outcomes[label, label] for label in labels) / samples if samples else 0.0,
        per_class=per_class,
        macro_precision=_mean_of(per_class, "precision"),
        macro_recall=_mean_of(per_class, "recall"),
        macro_f1=_mean_of(per_class, "f1"),
        weighted_f1=(
            sum(per_class[label]["f1"] * n for label, n in support.items()) / samples
            if samples else 0.0
        ),
        confusion_matrix={
            true: {pred: outcomes[true, pred] for pred in labels} for true in labels
        },
        support=dict(support),
    )


def _mean_of(per_class: dict[Hashable, dict[str, float]], key: str) -> float:
    if not per_class:
        return 0.0
    return sum(m[key] for m in per_class.values()) / len(per_class)


# ---------------------------------------------------------------------------
# Prequential evaluation
# ---------------------------------------------------------------------------

def prequential_evaluate(
    engine: BayesEngine,
    examples: Sequence[Classification],
) -> ClassificationMetrics:
    """Classify each example, then learn it.

    Every prediction is made by a model that has never seen the example,
    and the engine ends up trained on all of them.

    Args:
        engine: Engine to evaluate; it is trained in place.
        examples: Labeled examples in stream order.

    Returns:
        Metrics over all predictions.
    """
    y_true: list[Hashable] = []
    y_pred: list[Hashable] = []
    for example in examples:
        predicted = engine.classify(example.featureset)
        y_true.append(example.category)
        y_pred.append(predicted.category)
        engine.learn(example)

    metrics = compute_metrics(y_true, y_pred)
    logger.info(f"Prequential evaluation over {len(examples)} examples: accuracy={metrics.accuracy:.3f}.")
    return metrics


# ---------------------------------------------------------------------------
# Cross-Validation
# ---------------------------------------------------------------------------

def stratified_k_fold(
    labels: Sequence[Hashable],
    k: int = 5,
    seed: int = 42,
) -> list[tuple[list[int], list[int]]]:
    """Generate stratified k-fold train/test index splits.

    The indices of each label are shuffled and dealt to the folds in turn.
    Dealing continues where the previous label stopped, so small labels
    do not all land in the first fold.

    Raises:
        ValueError: If ``k`` is less than 2.
    """
    if k < 2:
        raise ValueError(f"k must be at least 2, got {k}")

    rng = random.Random(seed)
    by_label: dict[Hashable, list[int]] = defaultdict(list)
    for index, label in enumerate(labels):
        by_label[label].append(index)

    fold_of: dict[int, int] = {}
    dealt = 0
    for indices in by_label.values():
        rng.shuffle(indices)
        for index in indices:
            fold_of[index] = dealt % k
            dealt += 1

    everything = range(len(labels))
    return [
        (
            [i for i in everything if fold_of[i] != fold],
            [i for i in everything if fold_of[i] == fold],
        )
        for fold in range(k)
    ]


def cross_validate(
    examples: Sequence[Classification],
    k: int = 5,
    seed: int = 42,
    config: Optional[ClassifierConfig] = None,
) -> list[ClassificationMetrics]:
    """Run stratified k-fold cross-validation.

    Each fold trains a fresh engine on the training split (in dataset
    order) and evaluates it on the held-out split.

    Returns:
        One ClassificationMetrics per fold.
    """
    folds = stratified_k_fold([e.category for e in examples], k=k, seed=seed)
    results: list[ClassificationMetrics] = []

    for fold, (train_idx, test_idx) in enumerate(folds, 1):
        engine = BayesEngine(config=config)
        engine.learn_many(examples[i] for i in train_idx)

        y_true = [examples[i].category for i in test_idx]
        y_pred = [engine.classify(examples[i].featureset).category for i in test_idx]
        metrics = compute_metrics(y_true, y_pred)
        logger.debug(f"Fold {fold}/{k}: accuracy={metrics.accuracy:.3f} on {len(test_idx)} examples.")
        results.append(metrics)

    return results
