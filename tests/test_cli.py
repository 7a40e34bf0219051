"""Tests for the command-line interface."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from bayes_classifier.cli import main
from bayes_classifier.persistence import load_model


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def model_path(tmp_path: Path) -> Path:
    return tmp_path / "model.json"


@pytest.fixture
def trained_model(runner: CliRunner, tsv_dataset: Path, model_path: Path) -> Path:
    result = runner.invoke(main, ["train", str(tsv_dataset), "--model", str(model_path)])
    assert result.exit_code == 0, result.output
    return model_path


class TestTrain:
    """Tests for the train command."""

    def test_creates_model(self, runner: CliRunner, tsv_dataset: Path, model_path: Path) -> None:
        result = runner.invoke(main, ["train", str(tsv_dataset), "--model", str(model_path)])
        assert result.exit_code == 0, result.output
        assert "Learned" in result.output
        engine, tokenizer = load_model(model_path)
        assert engine.get_categories_total() == 8
        assert tokenizer is not None

    def test_extends_existing_model(self, runner: CliRunner, tsv_dataset: Path, trained_model: Path) -> None:
        result = runner.invoke(main, ["train", str(tsv_dataset), "--model", str(trained_model)])
        assert result.exit_code == 0, result.output
        engine, _ = load_model(trained_model)
        assert engine.get_categories_total() == 16

    def test_memory_capacity_option(self, runner: CliRunner, tsv_dataset: Path, model_path: Path) -> None:
        result = runner.invoke(main, [
            "train", str(tsv_dataset), "--model", str(model_path),
            "--memory-capacity", "3", "--strategy", "log-bayes",
        ])
        assert result.exit_code == 0, result.output
        engine, _ = load_model(model_path)
        assert engine.memory_capacity == 3
        assert len(engine.store) == 3
        assert engine.config.strategy == "log-bayes"

    def test_environment_variables(self, runner: CliRunner, tsv_dataset: Path, model_path: Path) -> None:
        result = runner.invoke(
            main, ["train", str(tsv_dataset)],
            env={"BAYES_MODEL": str(model_path), "BAYES_MEMORY_CAPACITY": "5"},
        )
        assert result.exit_code == 0, result.output
        engine, _ = load_model(model_path)
        assert engine.memory_capacity == 5

    def test_bad_dataset(self, runner: CliRunner, tmp_path: Path, model_path: Path) -> None:
        dataset = tmp_path / "bad.tsv"
        dataset.write_text("missing tab\n", encoding="utf-8")
        result = runner.invoke(main, ["train", str(dataset), "--model", str(model_path)])
        assert result.exit_code == 1
        assert "Error" in result.output
        assert not model_path.exists()


class TestClassify:
    """Tests for the classify command."""

    def test_json_output(self, runner: CliRunner, trained_model: Path) -> None:
        result = runner.invoke(main, [
            "classify", "--model", str(trained_model), "--output", "json", "--detailed",
            "such", "a", "sunny", "day",
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["category"] == "positive"
        assert data["features"] == ["such", "a", "sunny", "day"]
        assert [s["category"] for s in data["scores"]] == ["positive", "negative"]
        assert data["score"] == data["scores"][0]["score"]

    def test_rich_output(self, runner: CliRunner, trained_model: Path) -> None:
        result = runner.invoke(main, ["classify", "--model", str(trained_model), "-d", "cold grey rain"])
        assert result.exit_code == 0, result.output
        assert "negative" in result.output
        assert "Scores" in result.output

    def test_missing_model(self, runner: CliRunner, model_path: Path) -> None:
        result = runner.invoke(main, ["classify", "--model", str(model_path), "hello"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_malformed_model(self, runner: CliRunner, trained_model: Path) -> None:
        data = json.loads(trained_model.read_text(encoding="utf-8"))
        data["tokenizer"] = {"ngram_range": 5}
        trained_model.write_text(json.dumps(data), encoding="utf-8")

        result = runner.invoke(main, ["classify", "--model", str(trained_model), "hello"])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "Malformed" in result.output

    def test_empty_model(self, runner: CliRunner, trained_model: Path) -> None:
        runner.invoke(main, ["reset", "--model", str(trained_model), "--yes"])
        result = runner.invoke(main, ["classify", "--model", str(trained_model), "-o", "json", "hello"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["category"] is None

        result = runner.invoke(main, ["classify", "--model", str(trained_model), "hello"])
        assert "No categories" in result.output


class TestStats:
    """Tests for the stats command."""

    def test_json_output(self, runner: CliRunner, trained_model: Path) -> None:
        result = runner.invoke(main, ["stats", "--model", str(trained_model), "-o", "json", "--top", "2"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["examples"] == 8
        assert data["examples_per_category"] == {"positive": 4, "negative": 4}
        assert data["strategy"] == "bayes"
        assert len(data["top_features"]["positive"]) == 2

    def test_rich_output(self, runner: CliRunner, trained_model: Path) -> None:
        result = runner.invoke(main, ["stats", "--model", str(trained_model)])
        assert result.exit_code == 0, result.output
        assert "positive" in result.output
        assert "Categories" in result.output


class TestEvaluate:
    """Tests for the evaluate command."""

    def test_prequential(self, runner: CliRunner, tsv_dataset: Path) -> None:
        result = runner.invoke(main, ["evaluate", str(tsv_dataset), "-o", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["mode"] == "prequential"
        assert data["examples"] == 8
        assert len(data["folds"]) == 1

    def test_k_fold(self, runner: CliRunner, tsv_dataset: Path) -> None:
        result = runner.invoke(main, ["evaluate", str(tsv_dataset), "--folds", "2", "-o", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["mode"] == "2-fold"
        assert len(data["folds"]) == 2

    def test_single_fold_rejected(self, runner: CliRunner, tsv_dataset: Path) -> None:
        result = runner.invoke(main, ["evaluate", str(tsv_dataset), "--folds", "1"])
        assert result.exit_code == 1

    def test_rich_output(self, runner: CliRunner, tsv_dataset: Path) -> None:
        result = runner.invoke(main, ["evaluate", str(tsv_dataset)])
        assert result.exit_code == 0, result.output
        assert "Accuracy" in result.output


class TestCapacityAndReset:
    """Tests for the capacity and reset commands."""

    def test_shrink_capacity(self, runner: CliRunner, trained_model: Path) -> None:
        result = runner.invoke(main, ["capacity", "2", "--model", str(trained_model)])
        assert result.exit_code == 0, result.output
        assert "Forgot 6" in result.output
        engine, _ = load_model(trained_model)
        assert engine.memory_capacity == 2
        assert engine.get_categories_total() == 2

    def test_invalid_capacity(self, runner: CliRunner, trained_model: Path) -> None:
        result = runner.invoke(main, ["capacity", "0", "--model", str(trained_model)])
        assert result.exit_code == 2

    def test_reset(self, runner: CliRunner, trained_model: Path) -> None:
        result = runner.invoke(main, ["reset", "--model", str(trained_model), "--yes"])
        assert result.exit_code == 0, result.output
        engine, _ = load_model(trained_model)
        assert engine.get_categories_total() == 0
        assert engine.memory_capacity == 1000


def test_verbose_flag(runner: CliRunner, trained_model: Path) -> None:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    try:
        result = runner.invoke(main, ["-v", "stats", "--model", str(trained_model), "-o", "json"])
        assert result.exit_code == 0, result.output
        assert root.level == logging.DEBUG
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
