from __future__ import annotations

"""Typed store for capabilities, bundles and rules.

``Store`` wraps a :class:`~toolscope.store.memdb.MemDB` built from
:func:`~toolscope.store.schema.store_schema` and exposes one method per
operation so callers never deal with table or index names.

Contract
--------

- ``insert_*`` is an upsert keyed by the primary field; the prior record is
  replaced wholesale.
- ``get_*`` returns ``None`` when the key is absent.
- ``delete_*`` is idempotent; deleting an absent key is a silent no-op.
- ``list_*_by_tag`` matches on tag membership, not equality.
- ``snapshot()`` returns a :class:`StoreSnapshot` whose reads are frozen at
  the moment of the call.
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Optional

from ..schemas.domain import Bundle, Capability, Rule
from .memdb import PRIMARY_INDEX, MemDB, Txn
from .schema import BUNDLES, CAPABILITIES, RULES, store_schema

logger = logging.getLogger(__name__)

_rule_ids = itertools.count(1)
_rule_ids_lock = threading.Lock()


def next_rule_id() -> str:
    """Generate a process-unique rule id."""
    with _rule_ids_lock:
        return f"rule-{next(_rule_ids)}"


class _Reader(ABC):
    """Read surface shared by ``Store`` (fresh txn per call) and ``StoreSnapshot``."""

    @abstractmethod
    def _read(self) -> Txn:
        """Return the transaction reads are served from."""

    # -- capabilities ------------------------------------------------------

    def get_capability(self, name: str) -> Optional[Capability]:
        return self._read().first(CAPABILITIES, PRIMARY_INDEX, name)

    def capabilities(self) -> List[Capability]:
        return self._read().get(CAPABILITIES, PRIMARY_INDEX)

    def capabilities_by_source(self, source: str) -> List[Capability]:
        return self._read().get(CAPABILITIES, "source", source)

    def capabilities_by_tag(self, tag: str) -> List[Capability]:
        return self._read().get(CAPABILITIES, "tags", tag)

    # -- bundles -----------------------------------------------------------

    def get_bundle(self, name: str) -> Optional[Bundle]:
        return self._read().first(BUNDLES, PRIMARY_INDEX, name)

    def bundles(self) -> List[Bundle]:
        return self._read().get(BUNDLES, PRIMARY_INDEX)

    def bundles_by_category(self, category: str) -> List[Bundle]:
        return self._read().get(BUNDLES, "category", category)

    def bundles_by_tag(self, tag: str) -> List[Bundle]:
        return self._read().get(BUNDLES, "tags", tag)

    # -- rules -------------------------------------------------------------

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        return self._read().first(RULES, PRIMARY_INDEX, rule_id)

    def rules(self) -> List[Rule]:
        return self._read().get(RULES, PRIMARY_INDEX)

    def rules_by_pattern(self, pattern: str) -> List[Rule]:
        return self._read().get(RULES, "pattern", pattern)


class StoreSnapshot(_Reader):
    """Read-only, point-in-time view of a ``Store``.

    Release with :meth:`close` (or use as a context manager). Reads after
    release raise ``TransactionError``.
    """

    def __init__(self, txn: Txn) -> None:
        self._txn = txn

    def _read(self) -> Txn:
        return self._txn

    @property
    def closed(self) -> bool:
        return self._txn.done

    def close(self) -> None:
        self._txn.abort()

    def __enter__(self) -> "StoreSnapshot":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class Store(_Reader):
    """Transactional in-memory store for capabilities, bundles and rules.

    Every write method runs in its own transaction. Use :meth:`transaction`
    to group several writes so they commit together.
    """

    def __init__(self) -> None:
        self._db = MemDB(store_schema())

    @property
    def db(self) -> MemDB:
        return self._db

    def _read(self) -> Txn:
        return self._db.txn(write=False)

    @contextmanager
    def transaction(self) -> Iterator["StoreWriter"]:
        """Open a write transaction that commits when the block exits cleanly.

        Any exception raised inside the block aborts every change made in it.
        """
        txn = self._db.txn(write=True)
        try:
            yield StoreWriter(txn)
            txn.commit()
        finally:
            txn.abort()

    def snapshot(self) -> StoreSnapshot:
        """Return a read-only view of the state committed right now."""
        return StoreSnapshot(self._db.txn(write=False))

    # -- capabilities ------------------------------------------------------

    def insert_capability(self, capability: Capability) -> None:
        with self.transaction() as w:
            w.insert_capability(capability)

    def delete_capability(self, name: str) -> None:
        with self.transaction() as w:
            w.delete_capability(name)

    def list_capabilities(self) -> List[Capability]:
        return self.capabilities()

    def list_capabilities_by_source(self, source: str) -> List[Capability]:
        return self.capabilities_by_source(source)

    def list_capabilities_by_tag(self, tag: str) -> List[Capability]:
        return self.capabilities_by_tag(tag)

    # -- bundles -----------------------------------------------------------

    def insert_bundle(self, bundle: Bundle) -> None:
        with self.transaction() as w:
            w.insert_bundle(bundle)

    def delete_bundle(self, name: str) -> None:
        with self.transaction() as w:
            w.delete_bundle(name)

    def list_bundles(self) -> List[Bundle]:
        return self.bundles()

    def list_bundles_by_category(self, category: str) -> List[Bundle]:
        return self.bundles_by_category(category)

    def list_bundles_by_tag(self, tag: str) -> List[Bundle]:
        return self.bundles_by_tag(tag)

    # -- rules -------------------------------------------------------------

    def insert_rule(self, rule: Rule) -> str:
        """Insert a rule, assigning an id when it has none.

        Returns:
            The id the rule is stored under.
        """
        with self.transaction() as w:
            return w.insert_rule(rule)

    def delete_rule(self, rule_id: str) -> None:
        with self.transaction() as w:
            w.delete_rule(rule_id)

    def list_rules(self) -> List[Rule]:
        return self.rules()

    def list_rules_by_pattern(self, pattern: str) -> List[Rule]:
        return self.rules_by_pattern(pattern)


class StoreWriter(_Reader):
    """Write handle bound to one open transaction.

    Reads through a writer see the transaction's own uncommitted changes.
    """

    def __init__(self, txn: Txn) -> None:
        self._txn = txn

    def _read(self) -> Txn:
        return self._txn

    def insert_capability(self, capability: Capability) -> None:
        self._txn.insert(CAPABILITIES, capability)

    def delete_capability(self, name: str) -> bool:
        return self._txn.delete_key(CAPABILITIES, name)

    def insert_bundle(self, bundle: Bundle) -> None:
        self._txn.insert(BUNDLES, bundle)

    def delete_bundle(self, name: str) -> bool:
        return self._txn.delete_key(BUNDLES, name)

    def insert_rule(self, rule: Rule) -> str:
        if not rule.id:
            rule = rule.model_copy(update={"id": next_rule_id()})
        self._txn.insert(RULES, rule)
        return rule.id

    def delete_rule(self, rule_id: str) -> bool:
        return self._txn.delete_key(RULES, rule_id)
