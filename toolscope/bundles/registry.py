from __future__ import annotations

"""Bundle registry.

A *bundle* is a named, taggable group of capabilities that may depend on
other bundles. Bundles do not list their capabilities: a capability belongs
to bundle ``X`` when its ``source`` is ``"bundle:X"``, and the store is the
only record of which capabilities exist.

Registration and removal each run in one store transaction. Both are
idempotent, so repeating a call after a failure converges on the same state.
A bundle may name dependencies that are not registered yet; that only
becomes an error when the bundle is resolved.
"""

import logging
from collections import deque
from typing import Iterable, List, Optional, Union

from ..capabilities.catalog import CapabilityCatalog
from ..core.errors import BundleNotFoundError
from ..schemas.domain import Bundle, Capability, bundle_source
from ..store import Store, StoreSnapshot

logger = logging.getLogger(__name__)

CapabilitySource = Union[CapabilityCatalog, Iterable[Capability], None]


def _collect(capabilities: CapabilitySource) -> List[Capability]:
    if capabilities is None:
        return []
    if isinstance(capabilities, CapabilityCatalog):
        return capabilities.capabilities()
    return list(capabilities)


class BundleRegistry:
    """Register, query and resolve bundles stored in a ``Store``."""

    def __init__(self, store: Store) -> None:
        self._store = store

    @property
    def store(self) -> Store:
        return self._store

    def register(self, bundle: Bundle, capabilities: CapabilitySource = None) -> None:
        """
        Upsert ``bundle`` and the capabilities it owns.

        Each capability is stored with ``source="bundle:<name>"`` and the
        bundle's tags, replacing whatever tags it carried.

        Args:
            bundle: The bundle record.
            capabilities: A ``CapabilityCatalog``, an iterable of ``Capability``
                records, or ``None`` for a bundle with no capabilities of its own.
        """
        owned = [
            c.model_copy(update={"source": bundle.source, "tags": bundle.tags}) for c in _collect(capabilities)
        ]
        with self._store.transaction() as w:
            w.insert_bundle(bundle)
            for capability in owned:
                w.insert_capability(capability)
        logger.info(f"Registered bundle '{bundle.name}' with {len(owned)} capabilities")

    def remove(self, name: str) -> None:
        """Delete every capability owned by ``name``, then the bundle itself."""
        with self._store.transaction() as w:
            owned = w.capabilities_by_source(bundle_source(name))
            for capability in owned:
                w.delete_capability(capability.name)
            removed = w.delete_bundle(name)
        logger.info(f"Removed bundle '{name}' (existed={removed}, capabilities={len(owned)})")

    def get(self, name: str) -> Optional[Bundle]:
        return self._store.get_bundle(name)

    def by_tag(self, tag: str) -> List[Bundle]:
        return self._store.list_bundles_by_tag(tag)

    def by_category(self, category: str) -> List[Bundle]:
        return self._store.list_bundles_by_category(category)

    def all(self) -> List[Bundle]:
        return self._store.list_bundles()

    def capabilities_of(self, name: str) -> List[Capability]:
        """Capabilities owned directly by bundle ``name``."""
        return self._store.list_capabilities_by_source(bundle_source(name))

    def dependency_closure(self, *names: str) -> List[Bundle]:
        """
        Return the named bundles and everything they transitively depend on.

        Dependencies come before their dependents. Each bundle appears once
        even if reachable through several paths or a cycle.

        Raises:
            BundleNotFoundError: If any bundle in the closure is not registered.
        """
        with self._store.snapshot() as snap:
            return _closure(snap, names)

    def resolve(self, *names: str) -> CapabilityCatalog:
        """
        Collect the capabilities of the named bundles and their dependencies.

        Traversal keeps a visited set, so dependency cycles terminate
        silently. Either every name resolves or nothing is returned.

        Returns:
            A new ``CapabilityCatalog`` backed by its own store.

        Raises:
            BundleNotFoundError: If a named bundle, or one of its transitive
                dependencies, is not registered.
        """
        resolved = CapabilityCatalog()
        with self._store.snapshot() as snap:
            bundles = _closure(snap, names)
            owned = [c for b in bundles for c in snap.capabilities_by_source(b.source)]
        with resolved.store.transaction() as w:
            for capability in owned:
                w.insert_capability(capability)
        logger.debug(f"Resolved {list(names)} -> {len(bundles)} bundles, {len(owned)} capabilities")
        return resolved


def _closure(snap: StoreSnapshot, names: Iterable[str]) -> List[Bundle]:
    visited: set[str] = set()
    ordered: List[Bundle] = []

    # Iterative post-order DFS so dependencies precede dependents.
    for root in names:
        if root in visited:
            continue
        visited.add(root)
        stack = deque([(_require(snap, root), 0)])
        while stack:
            bundle, next_dep = stack[-1]
            if next_dep < len(bundle.dependencies):
                stack[-1] = (bundle, next_dep + 1)
                dep = bundle.dependencies[next_dep]
                if dep not in visited:
                    visited.add(dep)
                    stack.append((_require(snap, dep), 0))
                continue
            stack.pop()
            ordered.append(bundle)
    return ordered


def _require(snap: StoreSnapshot, name: str) -> Bundle:
    bundle = snap.get_bundle(name)
    if bundle is None:
        raise BundleNotFoundError(name)
    return bundle
