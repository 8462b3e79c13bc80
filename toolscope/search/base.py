from __future__ import annotations

"""Relevance index protocol and search result model.

The selection engine depends on ``RelevanceIndex`` rather than a concrete
ranking implementation. ``BM25Index`` in ``toolscope.search.bm25`` is the
implementation shipped with the package.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol


@dataclass(frozen=True)
class SearchResult:
    """A document id and its relevance score for one query."""

    id: str
    score: float


class RelevanceIndex(Protocol):
    """Protocol for keyword relevance indexes over short documents."""

    def index(self, doc_id: str, text: str, tags: Optional[Iterable[str]] = None) -> None:
        """
        Add a document, or replace it if ``doc_id`` is already indexed.

        Args:
            doc_id: Opaque document identifier (typically a bundle name).
            text: Free text to index.
            tags: Extra terms appended to ``text``.
        """
        ...

    def remove(self, doc_id: str) -> None:
        """Remove a document. Removing an unknown id is a no-op."""
        ...

    def search(self, query: str, k: int) -> List[SearchResult]:
        """
        Rank documents against ``query``.

        Args:
            query: Natural-language query.
            k: Maximum number of results.

        Returns:
            At most ``k`` results sorted by score descending.
        """
        ...

    def rebuild(self) -> None:
        """Recompute corpus statistics from the retained documents."""
        ...
