from __future__ import annotations

"""Per-turn capability selection.

``SelectionEngine`` answers "which capabilities matter for this query" by
combining ranked bundle search with dependency expansion:

1. No index, or an empty query: return the whole catalog (fail open).
2. Ask the index for up to ``fanout`` candidate bundles. No hits: fail open.
3. Expand each candidate breadth-first through its dependencies. The
   candidate's own capabilities score ``S``; a capability reached through a
   dependency ``d`` hops away scores ``S * decay**d``. A capability reachable
   several ways keeps its highest score.
4. Order by score descending (name breaks ties) and keep ``max_tools``.

The engine holds no mutable state: every call works on its own store
snapshot, visited sets and score maps. Internal store/index errors are
logged and answered with the full catalog so the agent loop keeps running.
"""

import logging
from collections import deque
from typing import Dict, List, Optional

from ..core.config import Settings
from ..core.config import settings as default_settings
from ..core.errors import ToolScopeError
from ..schemas.domain import Bundle, Capability, CapabilityDefinition
from ..search.base import RelevanceIndex, SearchResult
from ..store import Store, StoreSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOOLS = 20
DEFAULT_FANOUT = 10
DEFAULT_DEPENDENCY_DECAY = 0.5


class SelectionEngine:
    """Select relevant capabilities and bundles for a query."""

    def __init__(
        self,
        store: Store,
        index: Optional[RelevanceIndex] = None,
        *,
        max_tools: int = DEFAULT_MAX_TOOLS,
        fanout: int = DEFAULT_FANOUT,
        dependency_decay: float = DEFAULT_DEPENDENCY_DECAY,
    ) -> None:
        if max_tools < 1:
            raise ValueError(f"max_tools must be >= 1, got {max_tools}")
        if fanout < 1:
            raise ValueError(f"fanout must be >= 1, got {fanout}")
        if not 0.0 < dependency_decay <= 1.0:
            raise ValueError(f"dependency_decay must be in (0, 1], got {dependency_decay}")
        self._store = store
        self._index = index
        self.max_tools = max_tools
        self.fanout = fanout
        self.dependency_decay = dependency_decay

    @classmethod
    def from_settings(
        cls,
        store: Store,
        index: Optional[RelevanceIndex] = None,
        settings: Optional[Settings] = None,
    ) -> "SelectionEngine":
        cfg = (settings or default_settings).selection
        return cls(
            store,
            index,
            max_tools=cfg.max_tools,
            fanout=cfg.search_fanout,
            dependency_decay=cfg.dependency_decay,
        )

    @property
    def index(self) -> Optional[RelevanceIndex]:
        return self._index

    def select_tools(self, query: str) -> List[CapabilityDefinition]:
        """
        Return the capability definitions most relevant to ``query``.

        Args:
            query: The user's turn, in natural language.

        Returns:
            At most ``max_tools`` definitions ordered by relevance, or the
            whole catalog when narrowing is not possible.
        """
        if self._index is None or not query.strip():
            return self._all_definitions()

        try:
            return self._select(query)
        except ToolScopeError as e:
            logger.warning(f"Capability selection failed, returning full catalog: {e}")
            return self._all_definitions()

    def select_bundles(self, query: str, k: int) -> List[Bundle]:
        """
        Rank bundles against ``query`` without dependency expansion.

        Falls back to every bundle when there is no index or the query is empty.
        """
        try:
            with self._store.snapshot() as snap:
                if self._index is None or not query.strip():
                    return snap.bundles()
                bundles: List[Bundle] = []
                for hit in self._index.search(query, k):
                    bundle = snap.get_bundle(hit.id)
                    if bundle is not None:
                        bundles.append(bundle)
                return bundles
        except ToolScopeError as e:
            logger.warning(f"Bundle selection failed: {e}")
            return []

    def score_capabilities(self, query: str) -> Dict[str, float]:
        """Return the merged ``{capability name: score}`` map for ``query``."""
        if self._index is None or not query.strip():
            return {}
        hits = self._index.search(query, self.fanout)
        with self._store.snapshot() as snap:
            return self._score(snap, hits)[1]

    # -- internals ---------------------------------------------------------

    def _select(self, query: str) -> List[CapabilityDefinition]:
        hits = self._index.search(query, self.fanout) if self._index is not None else []
        if not hits:
            logger.debug(f"No bundles matched query {query!r}; returning full catalog")
            return self._all_definitions()

        with self._store.snapshot() as snap:
            found, scores = self._score(snap, hits)

        ranked = sorted(found.values(), key=lambda c: (-scores.get(c.name, 0.0), c.name))
        if len(ranked) > self.max_tools:
            ranked = ranked[: self.max_tools]
        logger.debug(
            f"Selected {len(ranked)} of {len(found)} capabilities from {len(hits)} bundles for query {query!r}"
        )
        return [c.definition for c in ranked]

    def _score(self, snap: StoreSnapshot, hits: List[SearchResult]) -> tuple[Dict[str, Capability], Dict[str, float]]:
        found: Dict[str, Capability] = {}
        scores: Dict[str, float] = {}
        for hit in hits:
            for bundle, distance in self._expand(snap, hit.id):
                score = hit.score * self.dependency_decay**distance
                for capability in snap.capabilities_by_source(bundle.source):
                    found[capability.name] = capability
                    if score > scores.get(capability.name, 0.0):
                        scores[capability.name] = score
        return found, scores

    @staticmethod
    def _expand(snap: StoreSnapshot, name: str) -> List[tuple[Bundle, int]]:
        """Breadth-first walk from ``name``; each bundle once, at its shortest distance."""
        root = snap.get_bundle(name)
        if root is None:
            return []
        visited = {name}
        reached: List[tuple[Bundle, int]] = []
        queue = deque([(root, 0)])
        while queue:
            bundle, distance = queue.popleft()
            reached.append((bundle, distance))
            for dep in bundle.dependencies:
                if dep in visited:
                    continue
                visited.add(dep)
                dep_bundle = snap.get_bundle(dep)
                if dep_bundle is None:
                    logger.debug(f"Bundle '{bundle.name}' depends on unknown bundle '{dep}'; skipping")
                    continue
                queue.append((dep_bundle, distance + 1))
        return reached

    def _all_definitions(self) -> List[CapabilityDefinition]:
        try:
            return [c.definition for c in self._store.list_capabilities()]
        except ToolScopeError as e:
            logger.error(f"Unable to read capability catalog: {e}")
            return []
