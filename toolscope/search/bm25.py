from __future__ import annotations

"""BM25 keyword index.

Scores documents with the Okapi BM25 family using fixed parameters
``k1 = 1.2`` and ``b = 0.75``::

    idf(t)   = ln((N - df(t) + 0.5) / (df(t) + 0.5) + 1)
    tf_sat   = tf * (k1 + 1) / (tf + k1 * (1 - b + b * len / avg_len))
    score(d) = sum(idf(t) * tf_sat(t, d)) over query terms present in d

Each document keeps its term-frequency table and token count so the global
statistics can be recomputed by :meth:`BM25Index.rebuild` without the
original text. Average length is recomputed in full on every mutation,
which is linear in the corpus size and intended for tens to low hundreds of
documents.
"""

import logging
import math
import unicodedata
from collections import Counter
from dataclasses import dataclass
from itertools import groupby
from typing import Dict, Iterable, List, Optional

from .base import SearchResult
from .locks import ReadWriteLock

logger = logging.getLogger(__name__)

K1 = 1.2
B = 0.75


def _is_token_char(ch: str) -> bool:
    # Letters and decimal digits only; superscripts and fractions separate tokens.
    return ch.isalpha() or unicodedata.category(ch) == "Nd"


def tokenize(text: str) -> List[str]:
    """Lower-case ``text`` and split it on every non letter/digit character."""
    return ["".join(run) for keep, run in groupby(text.lower(), key=_is_token_char) if keep]


def term_frequencies(tokens: Iterable[str]) -> Dict[str, float]:
    """Count occurrences of each token."""
    return {term: float(count) for term, count in Counter(tokens).items()}


@dataclass(frozen=True)
class _Document:
    id: str
    tf: Dict[str, float]
    length: int


class BM25Index:
    """Thread-safe BM25 index.

    ``index``, ``remove`` and ``rebuild`` take the write side of a
    reader/writer lock; ``search`` takes the read side so concurrent
    searches do not block each other.
    """

    def __init__(self) -> None:
        self._docs: Dict[str, _Document] = {}
        self._df: Dict[str, int] = {}
        self._avg_len = 0.0
        self._lock = ReadWriteLock()
        self.k1 = K1
        self.b = B

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._docs)

    def __contains__(self, doc_id: object) -> bool:
        with self._lock.read():
            return doc_id in self._docs

    @property
    def average_length(self) -> float:
        with self._lock.read():
            return self._avg_len

    def document_frequency(self, term: str) -> int:
        with self._lock.read():
            return self._df.get(term, 0)

    def index(self, doc_id: str, text: str, tags: Optional[Iterable[str]] = None) -> None:
        combined = text
        tag_list = [tags] if isinstance(tags, str) else list(tags or ())
        if tag_list:
            combined += " " + " ".join(tag_list)
        tokens = tokenize(combined)
        doc = _Document(id=doc_id, tf=term_frequencies(tokens), length=len(tokens))

        with self._lock.write():
            old = self._docs.get(doc_id)
            if old is not None:
                self._forget_terms(old)
            self._docs[doc_id] = doc
            for term in doc.tf:
                self._df[term] = self._df.get(term, 0) + 1
            self._recompute_avg_len()
        logger.debug(f"Indexed document '{doc_id}' ({doc.length} tokens, replaced={old is not None})")

    def remove(self, doc_id: str) -> None:
        with self._lock.write():
            doc = self._docs.pop(doc_id, None)
            if doc is None:
                return
            self._forget_terms(doc)
            self._recompute_avg_len()
        logger.debug(f"Removed document '{doc_id}' from index")

    def search(self, query: str, k: int) -> List[SearchResult]:
        query_tokens = tokenize(query)
        if not query_tokens or k <= 0:
            return []

        with self._lock.read():
            n = float(len(self._docs))
            if n == 0:
                return []

            results: List[SearchResult] = []
            for doc in self._docs.values():
                score = 0.0
                for term in query_tokens:
                    tf = doc.tf.get(term, 0.0)
                    if tf == 0:
                        continue
                    df = float(self._df.get(term, 0))
                    idf = math.log((n - df + 0.5) / (df + 0.5) + 1)
                    norm = 1 - self.b + self.b * doc.length / self._avg_len
                    score += idf * (tf * (self.k1 + 1)) / (tf + self.k1 * norm)
                if score > 0:
                    results.append(SearchResult(id=doc.id, score=score))

        results.sort(key=lambda r: (-r.score, r.id))
        return results[:k]

    def rebuild(self) -> None:
        with self._lock.write():
            df: Dict[str, int] = {}
            for doc in self._docs.values():
                for term in doc.tf:
                    df[term] = df.get(term, 0) + 1
            self._df = df
            self._recompute_avg_len()
        logger.debug(f"Rebuilt index statistics for {len(self._docs)} documents")

    # Callers must hold the write lock.

    def _forget_terms(self, doc: _Document) -> None:
        for term in doc.tf:
            remaining = self._df.get(term, 0) - 1
            if remaining <= 0:
                self._df.pop(term, None)
            else:
                self._df[term] = remaining

    def _recompute_avg_len(self) -> None:
        if not self._docs:
            self._avg_len = 0.0
            return
        self._avg_len = sum(doc.length for doc in self._docs.values()) / len(self._docs)
