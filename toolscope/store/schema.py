"""Table schema for capabilities, bundles and rules."""

from __future__ import annotations

from .memdb import PRIMARY_INDEX, DBSchema, IndexSchema, TableSchema

CAPABILITIES = "capabilities"
BUNDLES = "bundles"
RULES = "rules"


def store_schema() -> DBSchema:
    """Build the schema used by :class:`toolscope.store.Store`.

    - ``capabilities``: unique ``id`` (name), ``source``, multi-valued ``tags``.
    - ``bundles``: unique ``id`` (name), ``category``, multi-valued ``tags``.
    - ``rules``: unique ``id``, ``pattern``.
    """
    return DBSchema(
        tables={
            CAPABILITIES: TableSchema(
                name=CAPABILITIES,
                indexes={
                    PRIMARY_INDEX: IndexSchema(name=PRIMARY_INDEX, field="name", unique=True),
                    "source": IndexSchema(name="source", field="source"),
                    "tags": IndexSchema(name="tags", field="tags", multi=True, allow_missing=True),
                },
            ),
            BUNDLES: TableSchema(
                name=BUNDLES,
                indexes={
                    PRIMARY_INDEX: IndexSchema(name=PRIMARY_INDEX, field="name", unique=True),
                    "category": IndexSchema(name="category", field="category", allow_missing=True),
                    "tags": IndexSchema(name="tags", field="tags", multi=True, allow_missing=True),
                },
            ),
            RULES: TableSchema(
                name=RULES,
                indexes={
                    PRIMARY_INDEX: IndexSchema(name=PRIMARY_INDEX, field="id", unique=True),
                    "pattern": IndexSchema(name="pattern", field="pattern"),
                },
            ),
        }
    )
