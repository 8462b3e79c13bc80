"""Lexical relevance ranking over bundle and capability descriptions."""

from .base import RelevanceIndex, SearchResult
from .bm25 import BM25Index, term_frequencies, tokenize
from .locks import ReadWriteLock

__all__ = [
    "RelevanceIndex",
    "SearchResult",
    "BM25Index",
    "ReadWriteLock",
    "tokenize",
    "term_frequencies",
]
