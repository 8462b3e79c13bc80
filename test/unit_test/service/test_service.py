from __future__ import annotations

import pytest

from toolscope.capabilities.catalog import CapabilityCatalog
from toolscope.core.config import Settings
from toolscope.core.errors import BundleNotFoundError
from toolscope.factory import build_engine, build_service
from toolscope.schemas.domain import Bundle, CapabilityDefinition
from toolscope.search.bm25 import BM25Index
from toolscope.selection.engine import SelectionEngine
from toolscope.service import ToolScopeService
from toolscope.store import Store


class TestToolScopeService:
    def test_defaults_are_wired(self) -> None:
        service = ToolScopeService()
        assert isinstance(service.store, Store)
        assert isinstance(service.index, BM25Index)
        assert isinstance(service.engine, SelectionEngine)
        assert service.bundles.store is service.store
        assert service.catalog.store is service.store

    def test_register_bundle_indexes_it(self, web_and_math: ToolScopeService) -> None:
        assert "web" in web_and_math.index
        assert "math" in web_and_math.index
        assert [c.name for c in web_and_math.capabilities()] == ["calculate", "fetch_page", "web_search"]

    def test_remove_bundle_drops_index_entry(self, web_and_math: ToolScopeService) -> None:
        web_and_math.remove_bundle("web")

        assert "web" not in web_and_math.index
        assert web_and_math.bundles.get("web") is None
        assert [c.name for c in web_and_math.capabilities()] == ["calculate"]

    def test_remove_unknown_bundle_is_noop(self, service: ToolScopeService) -> None:
        service.remove_bundle("ghost")
        assert service.bundles.all() == []

    def test_register_and_remove_native_capability(self, service: ToolScopeService) -> None:
        service.register_capability(CapabilityDefinition(name="echo", description="repeat input"), tags=["util"])

        cap = service.store.get_capability("echo")
        assert cap.source == "native"
        assert cap.tags == ("util",)

        service.remove_capability("echo")
        assert service.store.get_capability("echo") is None

    def test_select_tools(self, web_and_math: ToolScopeService) -> None:
        names = [d.name for d in web_and_math.select_tools("search the web")]
        assert names == ["fetch_page", "web_search"]

    def test_select_bundles(self, web_and_math: ToolScopeService) -> None:
        assert [b.name for b in web_and_math.select_bundles("calculations", 5)] == ["math"]

    def test_resolve(self, web_and_math: ToolScopeService) -> None:
        catalog = web_and_math.resolve("math")
        assert isinstance(catalog, CapabilityCatalog)
        assert [d.name for d in catalog.definitions()] == ["calculate"]

        with pytest.raises(BundleNotFoundError):
            web_and_math.resolve("nope")

    def test_reindex_restores_dropped_entries(self, store: Store, make_capability) -> None:
        index = BM25Index()
        service = ToolScopeService(store=store, index=index)
        service.bundles.register(Bundle(name="web", description="search web pages"), [make_capability("web_search")])
        assert "web" not in index

        service.reindex()

        assert "web" in index
        assert [d.name for d in service.select_tools("web pages")] == ["web_search"]


class TestFactory:
    def test_build_engine_uses_settings(self, store: Store) -> None:
        cfg = Settings(_env_file=None, max_tools=4, search_fanout=3, dependency_decay=0.9)
        engine = build_engine(store, BM25Index(), cfg)

        assert (engine.max_tools, engine.fanout, engine.dependency_decay) == (4, 3, 0.9)

    def test_build_service(self) -> None:
        cfg = Settings(_env_file=None, max_tools=2)
        service = build_service(cfg)

        assert service.engine.max_tools == 2
        assert service.engine.index is service.index
