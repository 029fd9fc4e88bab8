"""Shared pytest fixtures for sql-context tests."""

import sqlite3
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from sql_context.database.models import (
    ColumnDescriptor,
    EngineKind,
    ForeignKeyDescriptor,
    SchemaSnapshot,
    TableDescriptor,
    TableKind,
)


FIXED_TIMESTAMP = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def generated_at():
    """A fixed generation timestamp so rendered documents are comparable."""
    return FIXED_TIMESTAMP


@pytest.fixture
def sample_snapshot():
    """A postgres snapshot with one table referencing public.accounts."""
    return SchemaSnapshot(
        engine=EngineKind.POSTGRES,
        database="app",
        tables=(
            TableDescriptor(
                name="users",
                schema="public",
                kind=TableKind.TABLE,
                columns=(
                    ColumnDescriptor(name="id", data_type="int", nullable=False, is_primary_key=True),
                    ColumnDescriptor(name="email", data_type="text", nullable=True),
                    ColumnDescriptor(name="author_id", data_type="int", nullable=True),
                ),
                foreign_keys=(
                    ForeignKeyDescriptor(
                        name="users_author_id_fkey",
                        columns=("author_id",),
                        referenced_schema="public",
                        referenced_table="accounts",
                        referenced_columns=("id",),
                        on_update="NO ACTION",
                        on_delete="CASCADE",
                    ),
                ),
            ),
        ),
    )


SQLITE_SCHEMA = """
CREATE TABLE accounts (
    id INTEGER PRIMARY KEY,
    email TEXT NOT NULL DEFAULT 'n/a',
    nickname VARCHAR(40)
);

CREATE TABLE orders (
    region TEXT NOT NULL,
    number INTEGER NOT NULL,
    placed_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (region, number)
);

CREATE TABLE order_lines (
    line_id INTEGER PRIMARY KEY,
    region TEXT NOT NULL,
    order_number INTEGER NOT NULL,
    account_id INTEGER REFERENCES accounts,
    FOREIGN KEY (region, order_number) REFERENCES orders (region, number) ON DELETE CASCADE
);

CREATE TABLE "we""ird" (
    "a|b" TEXT DEFAULT 'x|y'
);

CREATE VIEW active_accounts AS SELECT id, email FROM accounts;
"""


@pytest.fixture
def sqlite_db(tmp_path):
    """Create a SQLite database file covering composite keys, views and odd names."""
    path = tmp_path / "shop.db"
    connection = sqlite3.connect(str(path))
    try:
        connection.executescript(SQLITE_SCHEMA)
        connection.commit()
    finally:
        connection.close()
    return str(path)


def make_connection(results):
    """Build a mock DB-API connection whose cursor returns `results` in turn.

    The cursor is used as a context manager, as psycopg2 and PyMySQL allow.
    """
    cursor = MagicMock(name="cursor")
    cursor.fetchall.side_effect = list(results)
    connection = MagicMock(name="connection")
    connection.cursor.return_value.__enter__.return_value = cursor
    connection.cursor.return_value.__exit__.return_value = False
    return connection, cursor
