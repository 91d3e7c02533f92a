"""Analyzer utilities for the contract search stack.

Text is turned into tokens by a composable tokenizer/filter pipeline. The
same analyzer must be used at index-build time and at query time, otherwise
exact matches silently stop working.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, replace
import re
from typing import Protocol


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class RegexTokenizer:
    """Regex-based tokenizer that yields word tokens.

    ``\\w`` is Unicode-aware, so accented letters stay inside their word and
    every other character acts as a separator.
    """

    def __init__(self, pattern: str = r"\w+", flags: int = re.UNICODE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.islower():
                yield token
            else:
                yield replace(token, text=token.text.lower())


# Portuguese articles, prepositions, contractions and conjunctions
PORTUGUESE_STOPWORDS = [
    "a",
    "as",
    "com",
    "da",
    "das",
    "de",
    "do",
    "dos",
    "e",
    "em",
    "na",
    "nas",
    "no",
    "nos",
    "o",
    "os",
    "para",
    "por",
    "que",
    "um",
    "uma",
    "umas",
    "uns",
]


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: Sequence[str] | None = None) -> None:
        vocab = stopwords if stopwords is not None else PORTUGUESE_STOPWORDS
        self.stopwords = {word.lower() for word in vocab}

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.lower() not in self.stopwords:
                yield token


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int = 2) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if len(token.text) >= self.min_length:
                yield token


class LimitFilter:
    """Stops the stream after ``limit`` tokens."""

    def __init__(self, limit: int) -> None:
        self.limit = limit

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for count, token in enumerate(tokens):
            if count >= self.limit:
                return
            yield token


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


class StandardAnalyzer:
    """Default analyzer: lowercase, Portuguese stop-words, no single letters, capped length."""

    def __init__(
        self,
        *,
        stopwords: Sequence[str] | None = None,
        max_tokens: int = 50,
    ) -> None:
        filters: list[TokenFilter] = [
            LowercaseFilter(),
            MinLengthFilter(2),
            StopFilter(stopwords),
            LimitFilter(max_tokens),
        ]
        self.max_tokens = max_tokens
        self.pipeline = AnalyzerPipeline(RegexTokenizer(), filters)

    def __call__(self, text: str) -> list[Token]:
        if not text:
            return []
        return self.pipeline(text)

    def terms(self, text: str) -> list[str]:
        """Return only the token texts, in order."""
        return [token.text for token in self(text)]


_default_analyzer = StandardAnalyzer()


def tokenize(text: str, analyzer: StandardAnalyzer | None = None) -> list[str]:
    """Normalize and split free text into searchable terms."""

    return (analyzer or _default_analyzer).terms(text)
