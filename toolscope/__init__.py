"""Per-turn capability selection for language-model agents.

toolscope picks, for each conversational turn, the small subset of
registered capabilities (tools) that matter for the user's query, so an
agent does not have to be shown its whole catalog every turn.

Design overview
---------------

- ``store``: transactional, multiply-indexed in-memory tables for
  capabilities, bundles and rules, with point-in-time snapshots.
- ``search``: BM25 keyword ranking over bundle descriptions and tags.
- ``bundles``: bundle registration, cascade removal and transitive
  dependency resolution.
- ``selection``: ranked search plus dependency expansion with score decay,
  bounded by ``max_tools``.

Typical usage
-------------

Most applications use ``ToolScopeService`` (or ``factory.build_service``):

1. Register bundles with their capabilities.
2. Call ``select_tools(query)`` each turn.
3. Look up handlers through ``service.catalog`` when the model calls a tool.
"""

from .bundles import BundleRegistry
from .capabilities import CapabilityCatalog
from .factory import build_engine, build_service
from .schemas.domain import Bundle, BundleExample, Capability, CapabilityDefinition, Rule
from .search import BM25Index, RelevanceIndex, SearchResult
from .selection import SelectionEngine
from .service import ToolScopeService
from .store import Store, StoreSnapshot

__all__ = [
    "Bundle",
    "BundleExample",
    "Capability",
    "CapabilityDefinition",
    "Rule",
    "Store",
    "StoreSnapshot",
    "BM25Index",
    "RelevanceIndex",
    "SearchResult",
    "CapabilityCatalog",
    "BundleRegistry",
    "SelectionEngine",
    "ToolScopeService",
    "build_engine",
    "build_service",
]
