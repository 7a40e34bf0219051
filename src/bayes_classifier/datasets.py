"""Readers for labeled training data.

Supports tab-separated files (``category<TAB>text`` per line) and JSON
Lines files (``{"category": ..., "text": ...}`` per line). Each reader
yields :class:`LabeledExample` objects in file order.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Hashable, Iterator


@dataclass(frozen=True)
class LabeledExample:
    """A raw training example before tokenization."""

    category: Hashable
    text: str


class DatasetReader(ABC):
    """Abstract base class for labeled dataset readers."""

    supported_extensions: tuple[str, ...] = ()

    def can_handle(self, path: Path) -> bool:
        """Check if this reader can handle the given file."""
        return path.suffix.lower() in self.supported_extensions

    def read(self, path: Path) -> Iterator[LabeledExample]:
        """Yield the examples stored in ``path``.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If a line is malformed.
        """
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, 1):
                line = line.rstrip("\n").rstrip("\r")
                if not line.strip() or line.lstrip().startswith("#"):
                    continue
                yield self.parse_line(line, line_number, path)

    @abstractmethod
    def parse_line(self, line: str, line_number: int, path: Path) -> LabeledExample:
        ...


class TsvReader(DatasetReader):
    """``category<TAB>text`` per line; blank lines and ``#`` comments are skipped."""

    supported_extensions = (".tsv", ".txt")

    def parse_line(self, line: str, line_number: int, path: Path) -> LabeledExample:
        category, sep, text = line.partition("\t")
        category = category.strip()
        if not sep or not category:
            raise ValueError(f"{path}:{line_number}: expected 'category<TAB>text'")
        return LabeledExample(category=category, text=text.strip())


class JsonLinesReader(DatasetReader):
    """One JSON object with ``category`` and ``text`` keys per line."""

    supported_extensions = (".jsonl", ".ndjson")

    def parse_line(self, line: str, line_number: int, path: Path) -> LabeledExample:
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path}:{line_number}: invalid JSON ({e.msg})") from e

        if not isinstance(record, dict) or "category" not in record or "text" not in record:
            raise ValueError(f"{path}:{line_number}: expected an object with 'category' and 'text'")
        category = record["category"]
        if category is None or isinstance(category, (list, dict)):
            raise ValueError(f"{path}:{line_number}: category must be a string or number")
        return LabeledExample(category=category, text=str(record["text"]))


def get_reader(path: Path) -> DatasetReader:
    """Get the reader matching the file extension.

    Raises:
        ValueError: If no reader supports the extension.
    """
    readers: list[DatasetReader] = [TsvReader(), JsonLinesReader()]
    for reader in readers:
        if reader.can_handle(path):
            return reader

    supported = set()
    for r in readers:
        supported.update(r.supported_extensions)

    raise ValueError(
        f"No dataset reader for '{path.suffix}'. "
        f"Supported formats: {', '.join(sorted(supported))}"
    )


def read_examples(path: str | Path) -> list[LabeledExample]:
    """Read every labeled example from a dataset file."""
    path = Path(path)
    return list(get_reader(path).read(path))
