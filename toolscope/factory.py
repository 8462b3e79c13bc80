from __future__ import annotations

"""Convenience factories for wiring toolscope.

The intent is to keep application wiring and tests concise, while still
allowing callers to provide their own store, index or settings.
"""

from typing import Optional

from .core.config import Settings
from .search.base import RelevanceIndex
from .search.bm25 import BM25Index
from .selection.engine import SelectionEngine
from .service import ToolScopeService
from .store import Store


def build_engine(
    store: Store,
    index: Optional[RelevanceIndex] = None,
    settings: Optional[Settings] = None,
) -> SelectionEngine:
    """Construct a ``SelectionEngine`` configured from ``settings``."""
    return SelectionEngine.from_settings(store, index, settings)


def build_service(settings: Optional[Settings] = None) -> ToolScopeService:
    """Build a ``ToolScopeService`` with a fresh store and BM25 index."""
    store = Store()
    index = BM25Index()
    return ToolScopeService(store=store, index=index, engine=build_engine(store, index, settings))
