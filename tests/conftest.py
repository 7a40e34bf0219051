"""Shared test fixtures for bayes-classifier tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from bayes_classifier.engine import BayesEngine

POSITIVE_TEXT = "I love sunny days".split()
NEGATIVE_TEXT = "I hate rain".split()


@pytest.fixture
def engine() -> BayesEngine:
    """An untrained engine with default settings."""
    return BayesEngine()


@pytest.fixture
def sentiment_engine() -> BayesEngine:
    """Engine trained on one positive and one negative sentence."""
    engine = BayesEngine()
    engine.learn("positive", POSITIVE_TEXT)
    engine.learn("negative", NEGATIVE_TEXT)
    return engine


@pytest.fixture
def weather_lines() -> list[str]:
    """Labeled sentences in ``category<TAB>text`` form."""
    return [
        "positive\tI love sunny days",
        "negative\tI hate rain",
        "positive\tsunny beaches make me happy",
        "negative\tcold rain and grey skies are awful",
        "positive\twhat a lovely sunny afternoon",
        "negative\tthe storm and rain ruined everything",
        "positive\thappy days in the sun",
        "negative\tawful grey weather again",
    ]


@pytest.fixture
def tsv_dataset(tmp_path: Path, weather_lines: list[str]) -> Path:
    """Temporary TSV dataset with a comment and a blank line."""
    path = tmp_path / "weather.tsv"
    path.write_text(
        "# category<TAB>text\n" + "\n".join(weather_lines[:4]) + "\n\n" + "\n".join(weather_lines[4:]) + "\n",
        encoding="utf-8",
    )
    return path
