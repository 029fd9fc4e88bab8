"""Reconstruction of multi-column constraints from flat catalog rows.

Engines report one row per (constraint, column position) pair. A foreign key
spanning N columns therefore arrives as N rows sharing a constraint
identifier: its name, or for SQLite a small integer group id.
"""

import logging
from typing import Dict, Iterable, List, Set, Tuple

from ..errors import ValidationError
from .models import ForeignKeyDescriptor, ForeignKeyRow, PrimaryKeyRow, TableKey

logger = logging.getLogger(__name__)

ConstraintKey = Tuple[str, object]


def constraint_key(row: ForeignKeyRow) -> ConstraintKey:
    """Return the grouping key for a foreign-key row.

    Named and unnamed constraints live in separate key spaces, so a
    constraint literally named "1" never collides with group id 1.
    """
    if row.constraint_name is not None:
        return ("name", row.constraint_name)
    if row.group_id is not None:
        return ("id", row.group_id)
    raise ValidationError(
        f"Foreign key row on {row.table}.{row.column} has neither a constraint name nor a group id",
        details={"table": row.table, "column": row.column},
    )


class _PendingForeignKey:
    """Accumulates column pairs for one constraint in row order."""

    def __init__(self, row: ForeignKeyRow):
        self.name = row.constraint_name
        self.referenced_schema = row.referenced_schema
        self.referenced_table = row.referenced_table
        self.on_update = row.on_update
        self.on_delete = row.on_delete
        self.columns: List[str] = []
        self.referenced_columns: List[str] = []

    def add(self, row: ForeignKeyRow):
        self.columns.append(row.column)
        self.referenced_columns.append(row.referenced_column)

    def build(self) -> ForeignKeyDescriptor:
        return ForeignKeyDescriptor(
            columns=tuple(self.columns),
            referenced_table=self.referenced_table,
            referenced_columns=tuple(self.referenced_columns),
            name=self.name,
            referenced_schema=self.referenced_schema,
            on_update=self.on_update,
            on_delete=self.on_delete,
        )


def group_foreign_keys(rows: Iterable[ForeignKeyRow]) -> Dict[TableKey, Tuple[ForeignKeyDescriptor, ...]]:
    """Group flat foreign-key rows into structured constraints.

    Rows are grouped first by owning table, then by constraint identifier.
    Both levels keep first-seen order, and column pairs are appended in
    row order, so callers must supply rows in the engine's ordinal order.

    Args:
        rows: Foreign-key rows from any adapter

    Returns:
        Ordered mapping of (schema, table) to that table's foreign keys
    """
    grouped: Dict[TableKey, Dict[ConstraintKey, _PendingForeignKey]] = {}

    for row in rows:
        table_key = (row.schema, row.table)
        constraints = grouped.setdefault(table_key, {})
        key = constraint_key(row)
        pending = constraints.get(key)
        if pending is None:
            pending = _PendingForeignKey(row)
            constraints[key] = pending
        elif (pending.referenced_schema, pending.referenced_table) != (row.referenced_schema, row.referenced_table):
            raise ValidationError(
                f"Constraint {key[1]!r} on {row.table} references both "
                f"{pending.referenced_table} and {row.referenced_table}",
                details={"table": row.table, "constraint": str(key[1])},
            )
        pending.add(row)

    result = {
        table_key: tuple(pending.build() for pending in constraints.values())
        for table_key, constraints in grouped.items()
    }
    logger.debug(
        "Reconstructed %d foreign keys across %d tables",
        sum(len(fks) for fks in result.values()),
        len(result),
    )
    return result


def primary_key_set(rows: Iterable[PrimaryKeyRow]) -> Set[Tuple[TableKey, str]]:
    """Reduce primary-key rows to ((schema, table), column) pairs."""
    return {((row.schema, row.table), row.column) for row in rows}
