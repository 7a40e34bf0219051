"""JSON persistence for trained engines.

The saved document holds the configuration, the optional tokenizer
settings, the remembered examples and the four counters. Counters are
stored as ``[key, count]`` pairs so that features and categories that are
not strings (numbers, booleans) survive the round trip. JSON arrays are
read back as tuples so they stay hashable.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Hashable, Optional

from .config import ClassifierConfig
from .engine import BayesEngine
from .models import Classification
from .store import FrequencyStore, StoreSnapshot
from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0"
SUPPORTED_VERSIONS = frozenset({FORMAT_VERSION})


def engine_to_dict(engine: BayesEngine, tokenizer: Optional[Tokenizer] = None) -> dict:
    """Serialize an engine (and optionally its tokenizer) to a plain dict."""
    snapshot = engine.store.snapshot()
    return {
        "version": FORMAT_VERSION,
        "config": engine.config.to_dict(),
        "tokenizer": tokenizer.to_dict() if tokenizer is not None else None,
        "memory": [c.to_dict() for c in snapshot.memory],
        "counts": {
            "per_category": [
                [category, _pairs(features)]
                for category, features in snapshot.feature_count_per_category.items()
            ],
            "features": _pairs(snapshot.total_feature_count),
            "categories": _pairs(snapshot.total_category_count),
        },
    }


def engine_from_dict(data: dict[str, Any]) -> tuple[BayesEngine, Optional[Tokenizer]]:
    """Rebuild an engine and its tokenizer from :func:`engine_to_dict` output.

    Raises:
        ValueError: If the document version is unsupported, a field is
            missing, or the counters disagree with the remembered examples.
    """
    version = data.get("version")
    if version not in SUPPORTED_VERSIONS:
        raise ValueError(
            f"Unsupported model version {version!r}. Supported: {', '.join(sorted(SUPPORTED_VERSIONS))}"
        )

    try:
        config = ClassifierConfig.from_dict(data["config"])
        counts = data["counts"]
        snapshot = StoreSnapshot(
            feature_count_per_category={
                _hashable(category): _unpairs(features)
                for category, features in counts["per_category"]
            },
            total_feature_count=_unpairs(counts["features"]),
            total_category_count=_unpairs(counts["categories"]),
            memory=[_classification(item) for item in data["memory"]],
            memory_capacity=config.memory_capacity,
        )
        store = FrequencyStore.from_snapshot(snapshot)
        tokenizer_data = data.get("tokenizer")
        tokenizer = Tokenizer.from_dict(tokenizer_data) if tokenizer_data else None
    except (AttributeError, KeyError, TypeError) as e:
        raise ValueError(f"Malformed model document: {e!r}") from e

    return BayesEngine(config=config, store=store), tokenizer


def save_model(
    engine: BayesEngine,
    path: str | Path,
    tokenizer: Optional[Tokenizer] = None,
) -> None:
    """Save an engine to a JSON file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(engine_to_dict(engine, tokenizer), f, indent=2)
    logger.info(f"Saved model with {len(engine.store)} examples to {path}.")


def load_model(path: str | Path) -> tuple[BayesEngine, Optional[Tokenizer]]:
    """Load an engine and its tokenizer from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a valid model document.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Model file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Model file {path} does not contain a JSON object")

    engine, tokenizer = engine_from_dict(data)
    logger.info(f"Loaded model with {len(engine.store)} examples from {path}.")
    return engine, tokenizer


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _pairs(counts: dict[Hashable, int]) -> list[list]:
    return [[key, count] for key, count in counts.items()]


def _unpairs(pairs: list) -> dict[Hashable, int]:
    return {_hashable(key): int(count) for key, count in pairs}


def _hashable(value: Any) -> Hashable:
    """Convert JSON arrays back into (nested) tuples."""
    if isinstance(value, list):
        return tuple(_hashable(v) for v in value)
    return value


def _classification(data: dict[str, Any]) -> Classification:
    return Classification(
        featureset=tuple(_hashable(f) for f in data["featureset"]),
        category=_hashable(data["category"]),
        probability=float(data.get("probability", 0.0)),
    )
