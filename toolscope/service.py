from __future__ import annotations

"""High-level facade used by the agent loop and tool-dispatch layer.

``ToolScopeService`` wires a ``Store``, a relevance index, a ``BundleRegistry``
and a ``SelectionEngine`` together and keeps the index in step with the
store:

- ``register_bundle`` writes the bundle and its capabilities, then indexes
  the bundle's description and tags under its name.
- ``remove_bundle`` deletes the bundle (and its capabilities) and drops it
  from the index.
- ``select_tools`` / ``select_bundles`` delegate to the engine.

The service is intentionally thin: it holds no locks and no per-query state.
"""

import logging
from typing import Any, Iterable, List, Optional

from .bundles.registry import BundleRegistry, CapabilitySource
from .capabilities.catalog import CapabilityCatalog
from .schemas.domain import NATIVE_SOURCE, Bundle, Capability, CapabilityDefinition
from .search.base import RelevanceIndex
from .search.bm25 import BM25Index
from .selection.engine import SelectionEngine
from .store import Store

logger = logging.getLogger(__name__)


class ToolScopeService:
    """Register capabilities and bundles, and select them per query."""

    def __init__(
        self,
        *,
        store: Optional[Store] = None,
        index: Optional[RelevanceIndex] = None,
        engine: Optional[SelectionEngine] = None,
    ) -> None:
        self._store = store if store is not None else Store()
        self._index = index if index is not None else BM25Index()
        self._engine = engine if engine is not None else SelectionEngine(self._store, self._index)
        self._bundles = BundleRegistry(self._store)
        self._catalog = CapabilityCatalog(self._store)

    @property
    def store(self) -> Store:
        return self._store

    @property
    def index(self) -> RelevanceIndex:
        return self._index

    @property
    def engine(self) -> SelectionEngine:
        return self._engine

    @property
    def bundles(self) -> BundleRegistry:
        return self._bundles

    @property
    def catalog(self) -> CapabilityCatalog:
        return self._catalog

    def register_bundle(self, bundle: Bundle, capabilities: CapabilitySource = None) -> None:
        self._bundles.register(bundle, capabilities)
        self._index.index(bundle.name, bundle.description, bundle.tags)

    def remove_bundle(self, name: str) -> None:
        self._bundles.remove(name)
        self._index.remove(name)

    def register_capability(
        self,
        definition: CapabilityDefinition,
        handler: Any = None,
        source: str = NATIVE_SOURCE,
        tags: Iterable[str] = (),
    ) -> None:
        self._catalog.register_with_source(definition, handler, source, tags)

    def remove_capability(self, name: str) -> None:
        self._catalog.remove(name)

    def select_tools(self, query: str) -> List[CapabilityDefinition]:
        return self._engine.select_tools(query)

    def select_bundles(self, query: str, k: int) -> List[Bundle]:
        return self._engine.select_bundles(query, k)

    def resolve(self, *names: str) -> CapabilityCatalog:
        return self._bundles.resolve(*names)

    def capabilities(self) -> List[Capability]:
        return self._store.list_capabilities()

    def reindex(self) -> None:
        """Re-index every stored bundle and recompute index statistics."""
        bundles = self._bundles.all()
        for bundle in bundles:
            self._index.index(bundle.name, bundle.description, bundle.tags)
        self._index.rebuild()
        logger.info(f"Re-indexed {len(bundles)} bundles")
