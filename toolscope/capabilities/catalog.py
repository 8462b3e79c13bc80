from __future__ import annotations

"""Capability catalog.

The catalog is a name -> capability view over a :class:`~toolscope.store.Store`.
It is what the tool-dispatch layer reads to find a capability's definition
and its opaque handler; toolscope itself never calls the handler.

Notes:
    - ``register`` and ``register_with_source`` overwrite any existing
      capability with the same name.
    - ``get`` raises ``CapabilityNotFoundError`` if the capability is missing;
      ``get_handler`` returns ``None`` instead.
"""

from typing import Any, Iterable, List, Optional

from ..core.errors import CapabilityNotFoundError
from ..schemas.domain import NATIVE_SOURCE, Capability, CapabilityDefinition
from ..store import Store


class CapabilityCatalog:
    """Store-backed registry of capability definitions and handlers."""

    def __init__(self, store: Optional[Store] = None) -> None:
        """
        Initialize the catalog.

        Args:
            store: Store to share with other components. A private store is
                created when omitted.
        """
        self._store = store if store is not None else Store()

    @property
    def store(self) -> Store:
        """The underlying store, for cross-component queries."""
        return self._store

    def __len__(self) -> int:
        return len(self._store.list_capabilities())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def register(self, definition: CapabilityDefinition, handler: Any = None) -> None:
        """Register a capability with ``source="native"`` and no tags."""
        self.register_with_source(definition, handler, NATIVE_SOURCE, ())

    def register_with_source(
        self,
        definition: CapabilityDefinition,
        handler: Any,
        source: str,
        tags: Iterable[str] = (),
    ) -> None:
        """
        Register a capability with an explicit origin and tag set.

        Args:
            definition: Name, description and input schema.
            handler: Opaque reference handed back to the dispatch layer.
            source: Origin tag, e.g. ``"native"`` or ``"bundle:<name>"``.
            tags: Free-form tags, indexed for ``by_tag`` lookups.
        """
        self._store.insert_capability(
            Capability.from_definition(definition, handler=handler, source=source, tags=tuple(tags))
        )

    def add(self, capability: Capability) -> None:
        """Insert an already-built capability record as is."""
        self._store.insert_capability(capability)

    def definitions(self) -> List[CapabilityDefinition]:
        """All registered definitions, in name order."""
        return [c.definition for c in self._store.list_capabilities()]

    def capabilities(self) -> List[Capability]:
        return self._store.list_capabilities()

    def has(self, name: str) -> bool:
        return self._store.get_capability(name) is not None

    def get(self, name: str) -> Capability:
        """
        Retrieve a registered capability by name.

        Raises:
            CapabilityNotFoundError: If no capability is registered with the given name.
        """
        capability = self._store.get_capability(name)
        if capability is None:
            raise CapabilityNotFoundError(name)
        return capability

    def get_handler(self, name: str) -> Optional[Any]:
        capability = self._store.get_capability(name)
        return capability.handler if capability is not None else None

    def merge(self, other: Optional["CapabilityCatalog"]) -> None:
        """Copy every capability of ``other`` into this catalog, in one transaction."""
        if other is None:
            return
        incoming = other.capabilities()
        with self._store.transaction() as w:
            for capability in incoming:
                w.insert_capability(capability)

    def remove(self, name: str) -> None:
        self._store.delete_capability(name)

    def by_tag(self, tag: str) -> List[CapabilityDefinition]:
        return [c.definition for c in self._store.list_capabilities_by_tag(tag)]
