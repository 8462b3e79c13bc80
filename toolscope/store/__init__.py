"""Transactional, multiply-indexed in-memory store.

- ``memdb``: generic MVCC table engine (``DBSchema``, ``MemDB``, ``Txn``).
- ``schema``: the capabilities/bundles/rules table layout.
- ``store``: typed ``Store`` facade and point-in-time ``StoreSnapshot``.
"""

from .memdb import DBSchema, IndexSchema, MemDB, TableSchema, Txn
from .schema import BUNDLES, CAPABILITIES, RULES, store_schema
from .store import Store, StoreSnapshot, StoreWriter

__all__ = [
    "DBSchema",
    "IndexSchema",
    "MemDB",
    "TableSchema",
    "Txn",
    "Store",
    "StoreSnapshot",
    "StoreWriter",
    "store_schema",
    "CAPABILITIES",
    "BUNDLES",
    "RULES",
]
