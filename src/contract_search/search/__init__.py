"""
Search indexing and query engine package.

This package provides a pure-Python, in-memory search stack:
- analyzers: Tokenizer and filters (lowercase, stop-words, length cap)
- fuzzy: Levenshtein distance and typo-tolerant term matching
- index: Immutable inverted index snapshots
- ranking: Facet filters and result ordering
- snippet: Highlighting, snippets and auxiliary scores
- analytics: Aggregate search counters
- engine: Tiered exact/partial/fuzzy query engine
"""
