from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Tuple

import pytest

from toolscope.core.errors import SchemaError, TransactionError
from toolscope.store.memdb import DBSchema, IndexSchema, MemDB, TableSchema


@dataclass(frozen=True)
class _Row:
    name: str
    kind: str = ""
    labels: Tuple[str, ...] = ()
    code: str = ""


def _schema() -> DBSchema:
    return DBSchema(
        tables={
            "rows": TableSchema(
                name="rows",
                indexes={
                    "id": IndexSchema(name="id", field="name", unique=True),
                    "kind": IndexSchema(name="kind", field="kind", allow_missing=True),
                    "labels": IndexSchema(name="labels", field="labels", multi=True, allow_missing=True),
                    "code": IndexSchema(name="code", field="code", unique=True, allow_missing=True),
                },
            )
        }
    )


@pytest.fixture
def db() -> MemDB:
    return MemDB(_schema())


def _put(db: MemDB, *rows: _Row) -> None:
    with db.txn(write=True) as txn:
        for row in rows:
            txn.insert("rows", row)
        txn.commit()


class TestSchemaValidation:
    def test_missing_id_index_rejected(self) -> None:
        schema = DBSchema(tables={"t": TableSchema(name="t", indexes={"x": IndexSchema(name="x", field="x")})})
        with pytest.raises(SchemaError):
            MemDB(schema)

    def test_non_unique_id_rejected(self) -> None:
        schema = DBSchema(tables={"t": TableSchema(name="t", indexes={"id": IndexSchema(name="id", field="name")})})
        with pytest.raises(SchemaError):
            MemDB(schema)

    def test_table_name_mismatch_rejected(self) -> None:
        table = TableSchema(name="other", indexes={"id": IndexSchema(name="id", field="name", unique=True)})
        with pytest.raises(SchemaError):
            MemDB(DBSchema(tables={"t": table}))

    def test_empty_schema_rejected(self) -> None:
        with pytest.raises(SchemaError):
            MemDB(DBSchema())


class TestTransactions:
    def test_uncommitted_write_is_discarded(self, db: MemDB) -> None:
        with db.txn(write=True) as txn:
            txn.insert("rows", _Row(name="a"))
        assert db.txn().first("rows", "id", "a") is None

    def test_write_txn_sees_own_changes(self, db: MemDB) -> None:
        with db.txn(write=True) as txn:
            txn.insert("rows", _Row(name="a", kind="k"))
            assert txn.first("rows", "kind", "k") == _Row(name="a", kind="k")
            txn.commit()

    def test_insert_in_read_txn_raises(self, db: MemDB) -> None:
        with pytest.raises(TransactionError):
            db.txn().insert("rows", _Row(name="a"))

    def test_missing_primary_key_raises(self, db: MemDB) -> None:
        with db.txn(write=True) as txn:
            with pytest.raises(TransactionError):
                txn.insert("rows", _Row(name=""))

    def test_unknown_table_raises(self, db: MemDB) -> None:
        with pytest.raises(TransactionError):
            db.txn().get("nope", "id")

    def test_unknown_index_raises(self, db: MemDB) -> None:
        with pytest.raises(TransactionError):
            db.txn().get("rows", "nope")

    def test_closed_txn_rejects_reads(self, db: MemDB) -> None:
        txn = db.txn()
        txn.abort()
        with pytest.raises(TransactionError):
            txn.get("rows", "id")

    def test_unique_secondary_violation_keeps_state(self, db: MemDB) -> None:
        _put(db, _Row(name="a", code="c1"))
        with db.txn(write=True) as txn:
            with pytest.raises(TransactionError):
                txn.insert("rows", _Row(name="b", code="c1"))
            txn.commit()
        assert db.txn().first("rows", "id", "b") is None
        assert db.txn().first("rows", "code", "c1") == _Row(name="a", code="c1")

    def test_writer_lock_released_after_commit_and_abort(self, db: MemDB) -> None:
        db.txn(write=True).commit()
        db.txn(write=True).abort()
        # A third writer would block forever if either call leaked the lock.
        with db.txn(write=True) as txn:
            txn.insert("rows", _Row(name="x"))
            txn.commit()
        assert db.txn().count("rows") == 1


class TestIndexes:
    def test_get_by_primary_sorted(self, db: MemDB) -> None:
        _put(db, _Row(name="b"), _Row(name="a"), _Row(name="c"))
        assert [r.name for r in db.txn().get("rows", "id")] == ["a", "b", "c"]

    def test_multi_index_membership(self, db: MemDB) -> None:
        _put(db, _Row(name="a", labels=("x", "y")), _Row(name="b", labels=("y",)), _Row(name="c"))
        txn = db.txn()
        assert [r.name for r in txn.get("rows", "labels", "y")] == ["a", "b"]
        assert [r.name for r in txn.get("rows", "labels", "x")] == ["a"]
        # Full scan of a multi index yields each record once; "c" has no labels.
        assert [r.name for r in txn.get("rows", "labels")] == ["a", "b"]

    def test_replace_moves_secondary_entries(self, db: MemDB) -> None:
        _put(db, _Row(name="a", kind="old", labels=("x",)))
        _put(db, _Row(name="a", kind="new", labels=("y",)))
        txn = db.txn()
        assert txn.get("rows", "kind", "old") == []
        assert txn.get("rows", "labels", "x") == []
        assert [r.kind for r in txn.get("rows", "kind", "new")] == ["new"]
        assert txn.count("rows") == 1

    def test_delete_clears_every_index(self, db: MemDB) -> None:
        _put(db, _Row(name="a", kind="k", labels=("x", "y"), code="c"))
        with db.txn(write=True) as txn:
            assert txn.delete_key("rows", "a") is True
            txn.commit()
        txn = db.txn()
        for index, value in (("id", "a"), ("kind", "k"), ("labels", "x"), ("labels", "y"), ("code", "c")):
            assert txn.get("rows", index, value) == []

    def test_delete_absent_returns_false(self, db: MemDB) -> None:
        with db.txn(write=True) as txn:
            assert txn.delete("rows", _Row(name="ghost")) is False

    def test_reinsert_after_delete_in_same_txn(self, db: MemDB) -> None:
        _put(db, _Row(name="a", kind="k"))
        with db.txn(write=True) as txn:
            txn.delete_key("rows", "a")
            txn.insert("rows", _Row(name="a", kind="k"))
            txn.commit()
        assert [r.name for r in db.txn().get("rows", "kind", "k")] == ["a"]


class TestIsolation:
    def test_reader_keeps_its_view(self, db: MemDB) -> None:
        _put(db, _Row(name="a", labels=("x",)))
        reader = db.txn()
        _put(db, _Row(name="b", labels=("x",)))
        with db.txn(write=True) as txn:
            txn.delete_key("rows", "a")
            txn.commit()

        assert [r.name for r in reader.get("rows", "labels", "x")] == ["a"]
        assert [r.name for r in db.txn().get("rows", "labels", "x")] == ["b"]

    def test_concurrent_writers_are_serialized(self, db: MemDB) -> None:
        def worker(prefix: str) -> None:
            for i in range(50):
                _put(db, _Row(name=f"{prefix}-{i}", labels=("shared",)))

        threads = [threading.Thread(target=worker, args=(p,)) for p in ("a", "b", "c", "d")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        txn = db.txn()
        assert txn.count("rows") == 200
        assert len(txn.get("rows", "labels", "shared")) == 200

    def test_readers_never_see_partial_writes(self, db: MemDB) -> None:
        stop = threading.Event()
        mismatches: list[tuple[int, int]] = []

        def writer() -> None:
            for i in range(200):
                with db.txn(write=True) as txn:
                    txn.insert("rows", _Row(name=f"r{i}", kind="k", labels=("x",)))
                    txn.commit()
            stop.set()

        def reader() -> None:
            while not stop.is_set():
                txn = db.txn()
                by_kind = len(txn.get("rows", "kind", "k"))
                by_label = len(txn.get("rows", "labels", "x"))
                if by_kind != by_label or by_kind != txn.count("rows"):
                    mismatches.append((by_kind, by_label))

        threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert mismatches == []
