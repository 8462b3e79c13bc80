from __future__ import annotations

"""In-memory, multi-index table engine with snapshot isolation.

Tables are described by a ``DBSchema``. Every table has a unique ``id``
index (the primary key) and any number of secondary indexes. A secondary
index is either single-valued (one string attribute) or multi-valued (an
iterable attribute such as a tag tuple, where a record is reachable under
each of its values).

Concurrency model
-----------------

- Committed state is an immutable *root*: a mapping of table name to a
  ``_TableState``. Nothing reachable from a published root is ever mutated.
- A read transaction captures the root when it starts and keeps reading it,
  so later commits are invisible to it. Readers take no lock.
- A write transaction holds the writer lock from start to commit/abort. The
  first change to a table clones that table (shallowly); unchanged tables
  are shared with the previous root. ``commit`` publishes the new root with
  a single reference assignment, so readers observe either none or all of a
  transaction's changes across the primary and every secondary index.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from toolscope.core.errors import SchemaError, TransactionError

logger = logging.getLogger(__name__)

PRIMARY_INDEX = "id"


@dataclass(frozen=True)
class IndexSchema:
    """Describe one index of a table.

    Attributes
    ----------
    name:
        Index name used in lookups.
    field:
        Attribute read from each record.
    unique:
        At most one record may hold a given value.
    multi:
        The attribute is an iterable of strings; the record is indexed under
        each distinct element.
    allow_missing:
        Records with an empty value are left out of the index instead of
        failing the insert.
    """

    name: str
    field: str
    unique: bool = False
    multi: bool = False
    allow_missing: bool = False


@dataclass(frozen=True)
class TableSchema:
    name: str
    indexes: Dict[str, IndexSchema] = field(default_factory=dict)

    def validate(self) -> None:
        if not self.name:
            raise SchemaError("table name cannot be empty")
        primary = self.indexes.get(PRIMARY_INDEX)
        if primary is None:
            raise SchemaError(f"table '{self.name}' must have an '{PRIMARY_INDEX}' index")
        if not primary.unique or primary.multi or primary.allow_missing:
            raise SchemaError(f"'{PRIMARY_INDEX}' index of table '{self.name}' must be unique and single-valued")
        for key, index in self.indexes.items():
            if key != index.name:
                raise SchemaError(f"index name mismatch in table '{self.name}': {key!r} != {index.name!r}")
            if not index.field:
                raise SchemaError(f"index '{key}' of table '{self.name}' has no field")


@dataclass(frozen=True)
class DBSchema:
    tables: Dict[str, TableSchema] = field(default_factory=dict)

    def validate(self) -> None:
        if not self.tables:
            raise SchemaError("schema has no tables")
        for key, table in self.tables.items():
            if key != table.name:
                raise SchemaError(f"table name mismatch: {key!r} != {table.name!r}")
            table.validate()


class _TableState:
    """One table's rows and secondary index buckets.

    ``indexes`` maps index name -> value -> ``{primary key: record}``.
    """

    __slots__ = ("rows", "indexes")

    def __init__(self, rows: Dict[str, Any], indexes: Dict[str, Dict[str, Dict[str, Any]]]) -> None:
        self.rows = rows
        self.indexes = indexes

    @classmethod
    def empty(cls, schema: TableSchema) -> "_TableState":
        return cls({}, {name: {} for name in schema.indexes if name != PRIMARY_INDEX})

    def clone(self) -> "_TableState":
        # Buckets stay shared until a write touches them.
        return _TableState(dict(self.rows), {name: dict(buckets) for name, buckets in self.indexes.items()})


def _index_values(index: IndexSchema, record: Any) -> Tuple[str, ...]:
    raw = getattr(record, index.field, None)
    if index.multi:
        if raw is None:
            values: Tuple[str, ...] = ()
        elif isinstance(raw, str):
            values = (raw,) if raw else ()
        else:
            values = tuple(dict.fromkeys(str(v) for v in raw if v))
    else:
        values = (str(raw),) if raw not in (None, "") else ()
    if not values and not index.allow_missing:
        raise TransactionError(f"missing value for index '{index.name}' (field '{index.field}')")
    return values


class Txn:
    """A read or write transaction against a ``MemDB``.

    Use as a context manager. Leaving the block without calling
    :meth:`commit` aborts the transaction.
    """

    def __init__(self, db: "MemDB", write: bool) -> None:
        self._db = db
        self._write = write
        self._done = False
        if write:
            db._writer_lock.acquire()
        self._root: Dict[str, _TableState] = db._root
        self._cloned: set[str] = set()
        self._touched: set[Tuple[str, str, str]] = set()

    @property
    def write(self) -> bool:
        return self._write

    @property
    def done(self) -> bool:
        return self._done

    def __enter__(self) -> "Txn":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.abort()

    # -- lifecycle ---------------------------------------------------------

    def commit(self) -> None:
        """Publish the transaction's changes. A no-op for read transactions."""
        if self._done:
            return
        self._done = True
        if self._write:
            try:
                self._db._root = self._root
            finally:
                self._db._writer_lock.release()

    def abort(self) -> None:
        """Discard uncommitted changes. Safe to call more than once."""
        if self._done:
            return
        self._done = True
        if self._write:
            self._db._writer_lock.release()

    # -- helpers -----------------------------------------------------------

    def _check_open(self) -> None:
        if self._done:
            raise TransactionError("transaction already closed")

    def _schema(self, table: str) -> TableSchema:
        try:
            return self._db.schema.tables[table]
        except KeyError as e:
            raise TransactionError(f"unknown table: {table}") from e

    def _index(self, table: str, index: str) -> IndexSchema:
        try:
            return self._schema(table).indexes[index]
        except KeyError as e:
            raise TransactionError(f"unknown index '{index}' on table '{table}'") from e

    def _state(self, table: str) -> _TableState:
        self._schema(table)
        return self._root[table]

    def _mutable_state(self, table: str) -> _TableState:
        self._check_open()
        if not self._write:
            raise TransactionError("cannot modify data in a read-only transaction")
        state = self._state(table)
        if table not in self._cloned:
            state = state.clone()
            root = dict(self._root)
            root[table] = state
            self._root = root
            self._cloned.add(table)
        return state

    def _bucket(self, state: _TableState, table: str, index: str, value: str) -> Dict[str, Any]:
        key = (table, index, value)
        buckets = state.indexes[index]
        if key not in self._touched:
            buckets[value] = dict(buckets.get(value, {}))
            self._touched.add(key)
        elif value not in buckets:
            buckets[value] = {}
        return buckets[value]

    def _unlink(self, state: _TableState, schema: TableSchema, pk: str, record: Any) -> None:
        for name, index in schema.indexes.items():
            if name == PRIMARY_INDEX:
                continue
            for value in _index_values(replace(index, allow_missing=True), record):
                bucket = self._bucket(state, schema.name, name, value)
                bucket.pop(pk, None)
                if not bucket:
                    del state.indexes[name][value]

    # -- writes ------------------------------------------------------------

    def insert(self, table: str, record: Any) -> None:
        """Insert ``record`` or replace the record with the same primary key."""
        state = self._mutable_state(table)
        schema = self._schema(table)
        pk = _index_values(schema.indexes[PRIMARY_INDEX], record)[0]

        # Compute every index value before touching state so a bad record
        # leaves the transaction unchanged.
        planned: List[Tuple[str, Tuple[str, ...]]] = []
        for name, index in schema.indexes.items():
            if name == PRIMARY_INDEX:
                continue
            values = _index_values(index, record)
            if index.unique:
                for value in values:
                    holders = state.indexes[name].get(value, {})
                    if any(other != pk for other in holders):
                        raise TransactionError(f"unique index '{name}' violation on table '{table}': {value!r}")
            planned.append((name, values))

        previous = state.rows.get(pk)
        if previous is not None:
            self._unlink(state, schema, pk, previous)

        state.rows[pk] = record
        for name, values in planned:
            for value in values:
                self._bucket(state, table, name, value)[pk] = record

    def delete(self, table: str, record: Any) -> bool:
        """Delete the record with ``record``'s primary key.

        Returns:
            True if a record was removed, False if it was already absent.
        """
        schema = self._schema(table)
        pk = _index_values(schema.indexes[PRIMARY_INDEX], record)[0]
        return self.delete_key(table, pk)

    def delete_key(self, table: str, pk: str) -> bool:
        state = self._mutable_state(table)
        previous = state.rows.get(pk)
        if previous is None:
            return False
        self._unlink(state, self._schema(table), pk, previous)
        del state.rows[pk]
        return True

    # -- reads -------------------------------------------------------------

    def first(self, table: str, index: str, value: str) -> Optional[Any]:
        """Return the first record whose ``index`` matches ``value``, or None."""
        for record in self.get(table, index, value):
            return record
        return None

    def get(self, table: str, index: str, value: Optional[str] = None) -> List[Any]:
        """Return records through ``index``.

        Without ``value`` every record present in the index is returned in
        ``(value, primary key)`` order, once per distinct record. With
        ``value`` only matching records are returned, in primary key order.
        """
        return list(self.iter(table, index, value))

    def iter(self, table: str, index: str, value: Optional[str] = None) -> Iterator[Any]:
        self._check_open()
        self._index(table, index)
        state = self._state(table)
        if index == PRIMARY_INDEX:
            if value is None:
                return (state.rows[pk] for pk in sorted(state.rows))
            record = state.rows.get(value)
            return iter(() if record is None else (record,))
        buckets = state.indexes[index]
        if value is not None:
            bucket = buckets.get(value, {})
            return (bucket[pk] for pk in sorted(bucket))
        return self._iter_all(buckets)

    @staticmethod
    def _iter_all(buckets: Mapping[str, Dict[str, Any]]) -> Iterator[Any]:
        seen: set[str] = set()
        for value in sorted(buckets):
            bucket = buckets[value]
            for pk in sorted(bucket):
                if pk in seen:
                    continue
                seen.add(pk)
                yield bucket[pk]

    def count(self, table: str) -> int:
        self._check_open()
        return len(self._state(table).rows)


class MemDB:
    """Transactional multi-table store.

    Writers are serialized by a single lock; readers never block.
    """

    def __init__(self, schema: DBSchema) -> None:
        schema.validate()
        self.schema = schema
        self._writer_lock = threading.Lock()
        self._root: Dict[str, _TableState] = {
            name: _TableState.empty(table) for name, table in schema.tables.items()
        }
        logger.debug(f"MemDB created with tables: {sorted(schema.tables)}")

    def txn(self, write: bool = False) -> Txn:
        """Start a transaction. Write transactions block until prior writers finish."""
        return Txn(self, write)

    def tables(self) -> Iterable[str]:
        return self.schema.tables.keys()
