"""Command-line interface for the Bayes classifier.

Provides ``train``, ``classify``, ``stats``, ``evaluate``, ``capacity`` and
``reset`` commands with rich terminal output using the ``click`` and
``rich`` libraries. Models are kept in a JSON file between invocations.

Usage::

    bayes-classifier train reviews.tsv --model sentiment.json
    bayes-classifier classify --model sentiment.json "what a sunny day"
    bayes-classifier stats --model sentiment.json --top 5
    bayes-classifier evaluate reviews.tsv --folds 5
"""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .config import DEFAULT_MEMORY_CAPACITY, DEFAULT_STRATEGY, ClassifierConfig
from .datasets import LabeledExample, read_examples
from .engine import BayesEngine
from .evaluation import ClassificationMetrics, cross_validate, prequential_evaluate
from .models import Classification
from .persistence import load_model, save_model
from .strategies import STRATEGIES
from .tokenizer import Tokenizer

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_MODEL_PATH = "bayes-model.json"

model_option = click.option(
    "--model", "-m", type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_MODEL_PATH, envvar="BAYES_MODEL", show_default=True,
    help="Model file.",
)
output_option = click.option(
    "--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
    help="Output format.",
)
capacity_option = click.option(
    "--memory-capacity", type=click.IntRange(min=1), default=None,
    envvar="BAYES_MEMORY_CAPACITY",
    help=f"Number of most recent examples remembered [default: {DEFAULT_MEMORY_CAPACITY}].",
)
strategy_option = click.option(
    "--strategy", type=click.Choice(sorted(STRATEGIES)), default=None,
    envvar="BAYES_STRATEGY",
    help=f"Scoring strategy [default: {DEFAULT_STRATEGY}].",
)
ngrams_option = click.option(
    "--ngrams", type=click.IntRange(min=1), default=1, show_default=True,
    help="Largest n-gram size used as a feature.",
)
stopwords_option = click.option(
    "--stopwords/--no-stopwords", default=False, show_default=True,
    help="Drop common English stopwords.",
)


@click.group()
@click.version_option(package_name="bayes-classifier")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """Incremental Bayes classifier with bounded memory.

    Train on labeled examples one at a time, classify new inputs, and let
    the oldest examples be forgotten once the memory is full.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
            force=True,
        )


@main.command()
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@model_option
@capacity_option
@strategy_option
@ngrams_option
@stopwords_option
def train(
    dataset: Path,
    model: Path,
    memory_capacity: Optional[int],
    strategy: Optional[str],
    ngrams: int,
    stopwords: bool,
) -> None:
    """Learn every example of a labeled dataset.

    DATASET is a .tsv file (category<TAB>text per line) or a .jsonl file
    ({"category": ..., "text": ...} per line). An existing model is
    extended; otherwise a new one is created.

    Example: bayes-classifier train reviews.tsv --model sentiment.json
    """
    try:
        engine, tokenizer = _open_or_create(
            model, memory_capacity, strategy, Tokenizer(use_stopwords=stopwords, ngram_range=(1, ngrams))
        )
        examples = read_examples(dataset)
        with console.status("[bold blue]Training...", spinner="dots"):
            learned = engine.learn_many(_featurize(examples, tokenizer))
        save_model(engine, model, tokenizer)
    except (OSError, ValueError) as e:
        _fail(e)

    stats = engine.stats()
    console.print(
        f"Learned [bold]{learned}[/] examples. Remembering {stats.examples}/"
        f"{stats.memory_capacity} across {stats.category_count} categories."
    )
    console.print(f"[dim]Model saved to {model}[/]")


@main.command()
@click.argument("text", nargs=-1, required=True)
@model_option
@output_option
@click.option("--detailed", "-d", is_flag=True, help="Show the score of every category.")
def classify(text: tuple[str, ...], model: Path, output: str, detailed: bool) -> None:
    """Classify a piece of text.

    Example: bayes-classifier classify "what a sunny day"
    """
    try:
        engine, tokenizer = load_model(model)
    except (OSError, ValueError) as e:
        _fail(e)

    features = (tokenizer or Tokenizer()).tokenize(" ".join(text))
    ranked = list(reversed(engine.classify_detailed(features)))
    best = ranked[0] if ranked else Classification.unknown(features)

    if output == "json":
        payload = {
            "category": best.category,
            "score": best.probability,
            "features": list(features),
        }
        if detailed:
            payload["scores"] = [{"category": c.category, "score": c.probability} for c in ranked]
        click.echo(json.dumps(payload, indent=2))
        return

    if best.is_unknown:
        console.print("[yellow]No categories learned yet, cannot classify.[/]")
        return

    console.print(f"Category: [bold green]{best.category}[/] (score {best.probability:.6g})")
    if detailed:
        _render_scores(ranked)


@main.command()
@model_option
@output_option
@click.option("--top", type=click.IntRange(min=0), default=5, show_default=True,
              help="Most indicative features shown per category.")
def stats(model: Path, output: str, top: int) -> None:
    """Show what a model currently remembers."""
    try:
        engine, _ = load_model(model)
    except (OSError, ValueError) as e:
        _fail(e)

    model_stats = engine.stats()
    top_features = {
        category: engine.top_features(category, limit=top)
        for category in engine.store.categories
    }

    if output == "json":
        payload = model_stats.to_dict()
        payload["strategy"] = engine.config.strategy
        payload["top_features"] = {
            str(category): [[f, round(p, 4)] for f, p in features]
            for category, features in top_features.items()
        }
        click.echo(json.dumps(payload, indent=2))
        return

    console.print(Panel(
        f"Examples: {model_stats.examples}/{model_stats.memory_capacity} "
        f"({model_stats.fill_ratio:.0%}) | "
        f"Features: {model_stats.feature_count} | "
        f"Categories: {model_stats.category_count} | "
        f"Strategy: {engine.config.strategy}",
        title=f"Model: {model.name}",
        border_style="blue",
    ))

    if not model_stats.category_count:
        return

    table = Table(title="Categories", show_lines=top > 0)
    table.add_column("Category", style="cyan")
    table.add_column("Examples", justify="right", width=9)
    if top:
        table.add_column("Top features", style="white")
    for category, count in model_stats.examples_per_category.items():
        row = [str(category), str(count)]
        if top:
            row.append(", ".join(f"{f} ({p:.2f})" for f, p in top_features[category]))
        table.add_row(*row)
    console.print(table)


@main.command()
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--folds", "-k", type=click.IntRange(min=0), default=0,
              help="Run stratified k-fold cross-validation instead of test-then-train.")
@click.option("--seed", type=int, default=42, show_default=True, help="Random seed for folds.")
@capacity_option
@strategy_option
@ngrams_option
@stopwords_option
@output_option
def evaluate(
    dataset: Path,
    folds: int,
    seed: int,
    memory_capacity: Optional[int],
    strategy: Optional[str],
    ngrams: int,
    stopwords: bool,
    output: str,
) -> None:
    """Measure accuracy on a labeled dataset.

    By default every example is classified before it is learned
    (test-then-train). With --folds K (K >= 2) a fresh model is trained
    per fold instead.
    """
    if folds == 1:
        _fail(ValueError("--folds must be 0 (test-then-train) or at least 2"))

    try:
        config = ClassifierConfig(
            memory_capacity=memory_capacity or DEFAULT_MEMORY_CAPACITY,
            strategy=strategy or DEFAULT_STRATEGY,
        )
        tokenizer = Tokenizer(use_stopwords=stopwords, ngram_range=(1, ngrams))
        examples = list(_featurize(read_examples(dataset), tokenizer))
    except (OSError, ValueError) as e:
        _fail(e)

    with console.status("[bold blue]Evaluating...", spinner="dots"):
        if folds:
            results = cross_validate(examples, k=folds, seed=seed, config=config)
        else:
            results = [prequential_evaluate(BayesEngine(config=config), examples)]

    if output == "json":
        click.echo(json.dumps({
            "mode": f"{folds}-fold" if folds else "prequential",
            "examples": len(examples),
            "mean_accuracy": _mean(m.accuracy for m in results),
            "mean_macro_f1": _mean(m.macro_f1 for m in results),
            "folds": [m.to_dict() for m in results],
        }, indent=2))
        return

    title = f"{folds}-fold cross-validation" if folds else "Test-then-train evaluation"
    console.print(Panel(
        f"Examples: {len(examples)} | "
        f"Accuracy: {_mean(m.accuracy for m in results):.2%} | "
        f"Macro F1: {_mean(m.macro_f1 for m in results):.4f}",
        title=title,
        border_style="blue",
    ))
    if not folds:
        _render_metrics(results[0])


@main.command()
@click.argument("memory_capacity", type=click.IntRange(min=1))
@model_option
def capacity(memory_capacity: int, model: Path) -> None:
    """Change the memory capacity of a saved model.

    Shrinking forgets the oldest examples.
    """
    try:
        engine, tokenizer = load_model(model)
        before = len(engine.store)
        engine.set_memory_capacity(memory_capacity)
        save_model(engine, model, tokenizer)
    except (OSError, ValueError) as e:
        _fail(e)

    forgotten = before - len(engine.store)
    console.print(f"Memory capacity set to [bold]{memory_capacity}[/].")
    if forgotten:
        console.print(f"[yellow]Forgot {forgotten} oldest examples.[/]")


@main.command()
@model_option
@click.confirmation_option(prompt="Forget everything the model has learned?")
def reset(model: Path) -> None:
    """Forget everything a saved model has learned (settings are kept)."""
    try:
        engine, tokenizer = load_model(model)
        engine.reset()
        save_model(engine, model, tokenizer)
    except (OSError, ValueError) as e:
        _fail(e)
    console.print(f"Model {model} reset.")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/] {error}")
    sys.exit(1)


def _open_or_create(
    model: Path,
    memory_capacity: Optional[int],
    strategy: Optional[str],
    tokenizer: Tokenizer,
) -> tuple[BayesEngine, Tokenizer]:
    """Load ``model`` if it exists, otherwise build a new engine."""
    if not model.exists():
        config = ClassifierConfig(
            memory_capacity=memory_capacity or DEFAULT_MEMORY_CAPACITY,
            strategy=strategy or DEFAULT_STRATEGY,
        )
        logger.info(f"Creating new model {model}.")
        return BayesEngine(config=config), tokenizer

    engine, saved_tokenizer = load_model(model)
    if saved_tokenizer is not None and saved_tokenizer != tokenizer:
        logger.info("Using the tokenizer settings stored with the model.")
    if strategy and strategy != engine.config.strategy:
        engine = BayesEngine(
            config=dataclasses.replace(engine.config, strategy=strategy),
            store=engine.store,
        )
    if memory_capacity:
        engine.set_memory_capacity(memory_capacity)
    return engine, saved_tokenizer or tokenizer


def _featurize(examples: list[LabeledExample], tokenizer: Tokenizer):
    for example in examples:
        yield Classification(tuple(tokenizer.tokenize(example.text)), example.category)


def _mean(values) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def _render_scores(ranked: list[Classification]) -> None:
    """Render category scores, best first."""
    table = Table(title="Scores", show_lines=False)
    table.add_column("#", justify="right", width=4)
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")

    for i, result in enumerate(ranked, 1):
        style = "bold green" if i == 1 else ""
        table.add_row(str(i), str(result.category), f"{result.probability:.6g}", style=style)

    console.print(table)


def _render_metrics(metrics: ClassificationMetrics) -> None:
    """Render per-class metrics as a rich table."""
    table = Table(title="Per-class metrics", show_lines=False)
    table.add_column("Class", style="cyan")
    table.add_column("Precision", justify="right")
    table.add_column("Recall", justify="right")
    table.add_column("F1", justify="right")
    table.add_column("Support", justify="right")

    for cls in sorted(metrics.per_class, key=str):
        m = metrics.per_class[cls]
        table.add_row(
            "(none)" if cls is None else str(cls),
            f"{m['precision']:.4f}",
            f"{m['recall']:.4f}",
            f"{m['f1']:.4f}",
            str(metrics.support.get(cls, 0)),
        )

    console.print(table)


if __name__ == "__main__":
    main()
