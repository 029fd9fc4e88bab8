"""Assembly of catalog rows into the unified schema model.

Pure merge: no I/O, so it can be fed synthetic adapter output.
"""

import logging
from fnmatch import fnmatchcase
from typing import Dict, List, Optional

from .constraints import group_foreign_keys, primary_key_set
from .models import (
    CatalogRows,
    ColumnDescriptor,
    EngineKind,
    SchemaSnapshot,
    TableDescriptor,
    TableKey,
    TableKind,
)

logger = logging.getLogger(__name__)

# Name patterns (fnmatch, case-insensitive) excluded per engine
SYSTEM_SCHEMAS: Dict[EngineKind, tuple] = {
    EngineKind.POSTGRES: ("information_schema", "pg_*"),
    EngineKind.MYSQL: ("information_schema", "mysql", "performance_schema", "sys"),
    EngineKind.SQLITE: (),
}

INTERNAL_TABLES: Dict[EngineKind, tuple] = {
    EngineKind.POSTGRES: (),
    EngineKind.MYSQL: (),
    EngineKind.SQLITE: ("sqlite_*",),
}


def _matches(name: Optional[str], patterns: tuple) -> bool:
    if not name:
        return False
    lowered = name.lower()
    return any(fnmatchcase(lowered, pattern) for pattern in patterns)


def is_excluded(engine: EngineKind, schema: Optional[str], table: str) -> bool:
    """Check whether a table belongs to the engine's system catalog."""
    return _matches(schema, SYSTEM_SCHEMAS[engine]) or _matches(table, INTERNAL_TABLES[engine])


def _table_kind(table_type: str) -> TableKind:
    return TableKind.VIEW if (table_type or "").strip().upper() == "VIEW" else TableKind.TABLE


def build_snapshot(
    engine: EngineKind,
    rows: CatalogRows,
    database: Optional[str] = None,
) -> SchemaSnapshot:
    """Merge adapter output into a SchemaSnapshot.

    Tables keep the order the adapter reported them in; columns keep the
    engine's ordinal order.

    Args:
        engine: Engine the rows came from
        rows: Raw catalog rows
        database: Optional display name for the database

    Returns:
        SchemaSnapshot for the database
    """
    pk_set = primary_key_set(rows.primary_keys)
    foreign_keys = group_foreign_keys(rows.foreign_keys)

    columns_by_table: Dict[TableKey, List[ColumnDescriptor]] = {}
    for row in rows.columns:
        key = (row.schema, row.table)
        columns_by_table.setdefault(key, []).append(ColumnDescriptor(
            name=row.name,
            data_type=row.data_type,
            nullable=row.nullable,
            default=row.default,
            is_primary_key=(key, row.name) in pk_set,
        ))

    tables = []
    seen = set()
    for row in rows.tables:
        key = (row.schema, row.name)
        if key in seen:
            continue
        seen.add(key)
        if is_excluded(engine, row.schema, row.name):
            logger.debug("Skipping system table %s", ".".join(filter(None, key)))
            continue
        tables.append(TableDescriptor(
            name=row.name,
            schema=row.schema,
            kind=_table_kind(row.table_type),
            columns=tuple(columns_by_table.get(key, ())),
            foreign_keys=foreign_keys.get(key, ()),
        ))

    orphans = (set(columns_by_table) | set(foreign_keys)) - seen
    if orphans:
        logger.debug("Dropped catalog rows for %d unlisted tables", len(orphans))

    return SchemaSnapshot(engine=engine, tables=tuple(tables), database=database)
