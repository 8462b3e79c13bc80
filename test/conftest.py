from __future__ import annotations

from typing import Any, Callable, Iterable

import pytest

from toolscope.schemas.domain import Bundle, Capability
from toolscope.search.bm25 import BM25Index
from toolscope.service import ToolScopeService
from toolscope.store import Store

CapabilityFactory = Callable[..., Capability]


def _handler(name: str) -> Callable[..., Any]:
    def handler(**kwargs: Any) -> str:
        return f"{name}:{sorted(kwargs)}"

    return handler


def _make_capability(
    name: str,
    description: str = "",
    tags: Iterable[str] = (),
    source: str = "native",
) -> Capability:
    return Capability(
        name=name,
        description=description or f"{name} capability",
        input_schema={"type": "object", "properties": {}},
        source=source,
        tags=tuple(tags),
        handler=_handler(name),
    )


@pytest.fixture
def make_capability() -> CapabilityFactory:
    """Factory for capability records with a dummy handler."""
    return _make_capability


@pytest.fixture
def store() -> Store:
    return Store()


@pytest.fixture
def index() -> BM25Index:
    return BM25Index()


@pytest.fixture
def service(store: Store, index: BM25Index) -> ToolScopeService:
    return ToolScopeService(store=store, index=index)


@pytest.fixture
def web_and_math(service: ToolScopeService) -> ToolScopeService:
    """Service with a 'web' and a 'math' bundle registered and indexed."""
    service.register_bundle(
        Bundle(name="web", description="search web pages", tags=("web",)),
        [_make_capability("web_search"), _make_capability("fetch_page")],
    )
    service.register_bundle(
        Bundle(name="math", description="perform calculations", tags=("math",)),
        [_make_capability("calculate")],
    )
    return service
