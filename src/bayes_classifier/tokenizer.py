"""Text tokenization into classifier features.

Turns raw text into the ordered list of feature strings the engine learns
from: lowercase word tokens, optional stopword filtering, and optional
n-grams joined with ``_``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_WORD_RE = re.compile(r"\b\w[\w'-]*\w\b|\b\w\b", re.UNICODE)

STOP_WORDS: frozenset[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "be",
    "been", "being", "have", "has", "had", "do", "does", "did", "will",
    "would", "could", "should", "may", "might", "shall", "can", "must",
    "so", "if", "then", "than", "that", "this", "these", "those", "it",
    "its", "he", "she", "they", "them", "their", "his", "her", "our",
    "your", "we", "you", "who", "whom", "which", "what", "where", "when",
    "how", "all", "each", "every", "both", "some", "such", "any", "only",
    "own", "same", "just", "about", "into", "there", "here",
})


def ngrams(tokens: list[str], n: int) -> list[str]:
    """Generate n-grams from a token list."""
    if n <= 1:
        return list(tokens)
    return ["_".join(tokens[i : i + n]) for i in range(len(tokens) - n + 1)]


@dataclass
class Tokenizer:
    """Regex word tokenizer producing classifier features.

    Args:
        lowercase: Lowercase tokens before anything else.
        use_stopwords: Drop common English stopwords.
        ngram_range: ``(min_n, max_n)`` n-gram sizes to emit.
        min_length: Minimum token length kept.

    Raises:
        ValueError: If ``ngram_range`` or ``min_length`` is invalid.
    """

    lowercase: bool = True
    use_stopwords: bool = False
    ngram_range: tuple[int, int] = (1, 1)
    min_length: int = 1

    def __post_init__(self) -> None:
        self.ngram_range = tuple(self.ngram_range)  # type: ignore[assignment]
        if len(self.ngram_range) != 2:
            raise ValueError(f"ngram_range must be a (min_n, max_n) pair, got {self.ngram_range}")
        min_n, max_n = self.ngram_range
        if min_n < 1 or max_n < min_n:
            raise ValueError(f"Invalid ngram_range {self.ngram_range}")
        if self.min_length < 1:
            raise ValueError(f"min_length must be at least 1, got {self.min_length}")

    def tokenize(self, text: str) -> list[str]:
        """Split ``text`` into features, in order of appearance."""
        tokens = [m.group() for m in _WORD_RE.finditer(text)]
        if self.lowercase:
            tokens = [t.lower() for t in tokens]
        tokens = [t for t in tokens if len(t) >= self.min_length]
        if self.use_stopwords:
            tokens = [t for t in tokens if t.lower() not in STOP_WORDS]

        features: list[str] = []
        min_n, max_n = self.ngram_range
        for n in range(min_n, max_n + 1):
            features.extend(ngrams(tokens, n))
        return features

    def to_dict(self) -> dict:
        return {
            "lowercase": self.lowercase,
            "use_stopwords": self.use_stopwords,
            "ngram_range": list(self.ngram_range),
            "min_length": self.min_length,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Tokenizer":
        return cls(
            lowercase=data.get("lowercase", True),
            use_stopwords=data.get("use_stopwords", False),
            ngram_range=tuple(data.get("ngram_range", (1, 1))),
            min_length=data.get("min_length", 1),
        )
