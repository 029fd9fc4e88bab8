"""SQLite database adapter.

Introspects SQLite database files using sqlite_master and the
table_info / foreign_key_list pragmas.
"""

import logging
import os
import sqlite3
from pathlib import Path
from typing import Dict, List, Tuple

from ..errors import IntrospectionError, NotFoundError
from .base import EngineAdapter
from .models import (
    ColumnRow,
    EngineKind,
    ForeignKeyRow,
    PrimaryKeyRow,
    TableRow,
)

logger = logging.getLogger(__name__)


def quote_identifier(name: str) -> str:
    """Quote an identifier for use inside SQL text (not as a bind parameter)."""
    return '"' + name.replace('"', '""') + '"'


def read_only_uri(path: str) -> str:
    """Build a read-only sqlite URI; opening it never creates the file."""
    return Path(os.path.abspath(path)).as_uri() + "?mode=ro"


class SQLiteAdapter(EngineAdapter):
    """Reads the schema of a SQLite database file."""

    ENGINE = EngineKind.SQLITE

    def __init__(self, descriptor):
        super().__init__(descriptor)
        self._tables: List[TableRow] = []
        self._table_info: Dict[str, list] = {}

    @property
    def path(self) -> str:
        return self.descriptor.path

    def connect(self):
        """Open the database file read-only.

        The existence check comes first: a writable open would silently
        create an empty database at the path.
        """
        if self._connection is not None:
            return self._connection

        if not os.path.isfile(self.path):
            raise NotFoundError(self.path)

        try:
            connection = sqlite3.connect(read_only_uri(self.path), uri=True)
        except sqlite3.Error as e:
            raise NotFoundError(self.path, reason=str(e)) from e

        # sqlite3 opens lazily; touching the header detects non-database files
        try:
            connection.execute("PRAGMA schema_version").fetchone()
        except sqlite3.Error as e:
            connection.close()
            raise NotFoundError(self.path, reason=str(e)) from e

        self._connection = connection
        return self._connection

    def close(self):
        """Close the SQLite connection."""
        self._tables = []
        self._table_info = {}
        if self._connection is not None:
            try:
                self._connection.close()
            finally:
                self._connection = None

    def execute(self, sql: str, params: tuple = ()) -> list:
        logger.debug("sqlite query: %s", " ".join(sql.split()))
        try:
            return self._connection.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise IntrospectionError(f"SQLite catalog query failed: {e}") from e

    def get_database_name(self) -> str:
        return os.path.basename(self.path)

    def _get_table_info(self, table: str) -> list:
        """PRAGMA table_info rows: cid | name | type | notnull | dflt_value | pk"""
        if table not in self._table_info:
            self._table_info[table] = self.execute(f"PRAGMA table_info({quote_identifier(table)})")
        return self._table_info[table]

    def _primary_key_columns(self, table: str) -> List[str]:
        pk_rows = [row for row in self._get_table_info(table) if row[5]]
        return [row[1] for row in sorted(pk_rows, key=lambda row: row[5])]

    def get_tables(self) -> Tuple[TableRow, ...]:
        rows = self.execute("""
            SELECT name, type
            FROM sqlite_master
            WHERE type IN ('table', 'view')
              AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\'
            ORDER BY name
        """)
        self._tables = [TableRow(schema=None, name=r[0], table_type=r[1]) for r in rows]
        return tuple(self._tables)

    def get_columns(self) -> Tuple[ColumnRow, ...]:
        columns = []
        for table in self._tables:
            for _cid, name, raw_type, notnull, default_val, _pk in self._get_table_info(table.name):
                columns.append(ColumnRow(
                    schema=None,
                    table=table.name,
                    name=name,
                    data_type=raw_type or "",
                    nullable=not bool(notnull),
                    default=None if default_val is None else str(default_val),
                ))
        return tuple(columns)

    def get_primary_keys(self) -> Tuple[PrimaryKeyRow, ...]:
        return tuple(
            PrimaryKeyRow(schema=None, table=table.name, column=column)
            for table in self._tables
            for column in self._primary_key_columns(table.name)
        )

    def get_foreign_keys(self) -> Tuple[ForeignKeyRow, ...]:
        """Foreign keys carry no name in SQLite; the pragma's id groups them.

        PRAGMA foreign_key_list rows:
        id | seq | table | from | to | on_update | on_delete | match
        """
        foreign_keys = []
        for table in self._tables:
            if table.table_type != 'table':
                continue
            rows = self.execute(f"PRAGMA foreign_key_list({quote_identifier(table.name)})")
            for fk_id, seq, parent, column, parent_column, on_update, on_delete, _match in sorted(
                rows, key=lambda row: (row[0], row[1])
            ):
                if parent_column is None:
                    parent_column = self._implicit_parent_column(table.name, parent, seq)
                foreign_keys.append(ForeignKeyRow(
                    schema=None,
                    table=table.name,
                    group_id=fk_id,
                    column=column,
                    referenced_table=parent,
                    referenced_column=parent_column,
                    on_update=on_update,
                    on_delete=on_delete,
                ))
        return tuple(foreign_keys)

    def _implicit_parent_column(self, table: str, parent: str, seq: int) -> str:
        """Resolve a reference that names only the parent table to its primary key."""
        pk_columns = self._primary_key_columns(parent)
        if seq < len(pk_columns):
            return pk_columns[seq]
        logger.warning(
            "Foreign key on %s references %s without columns and %s has no matching primary key",
            table, parent, parent,
        )
        return ""
