"""Bayes Classifier -- incremental Bayesian classification with bounded memory."""

__version__ = "1.0.0"

from .config import ClassifierConfig
from .datasets import LabeledExample, read_examples
from .engine import BayesEngine
from .evaluation import (
    ClassificationMetrics,
    compute_metrics,
    cross_validate,
    prequential_evaluate,
    stratified_k_fold,
)
from .models import Classification, ModelStats
from .persistence import engine_from_dict, engine_to_dict, load_model, save_model
from .probability import FeatureProbability, MappingFeatureProbability, weighed_average
from .store import FrequencyStore, StoreSnapshot
from .strategies import (
    STRATEGIES,
    CategoryScore,
    ScoringStrategy,
    bayes_scores,
    get_strategy,
    log_bayes_scores,
)
from .tokenizer import Tokenizer

__all__ = [
    # Core
    "BayesEngine",
    "FrequencyStore",
    "StoreSnapshot",
    "Classification",
    "ModelStats",
    "ClassifierConfig",
    # Probability
    "FeatureProbability",
    "MappingFeatureProbability",
    "weighed_average",
    # Strategies
    "STRATEGIES",
    "CategoryScore",
    "ScoringStrategy",
    "bayes_scores",
    "log_bayes_scores",
    "get_strategy",
    # Collaborators
    "Tokenizer",
    "LabeledExample",
    "read_examples",
    "engine_to_dict",
    "engine_from_dict",
    "save_model",
    "load_model",
    # Evaluation
    "ClassificationMetrics",
    "compute_metrics",
    "prequential_evaluate",
    "stratified_k_fold",
    "cross_validate",
]
