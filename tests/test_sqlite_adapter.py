"""Tests for the SQLite adapter against real database files."""

import os
import sqlite3

import pytest

from sql_context.database.models import FileDescriptor, TableKind
from sql_context.database.sqlite import SQLiteAdapter, quote_identifier
from sql_context.errors import NotFoundError
from sql_context.markdown import render_markdown


@pytest.fixture
def snapshot(sqlite_db):
    return SQLiteAdapter(FileDescriptor(path=sqlite_db)).introspect()


class TestSQLiteIntrospection:
    """Introspect the shop fixture database."""

    def test_tables_in_name_order(self, snapshot):
        assert [t.name for t in snapshot.tables] == [
            "accounts",
            "active_accounts",
            "order_lines",
            "orders",
            'we"ird',
        ]
        assert all(t.schema is None for t in snapshot.tables)

    def test_database_name_is_file_name(self, snapshot):
        assert snapshot.database == "shop.db"

    def test_columns_and_defaults(self, snapshot):
        accounts = snapshot.get_table("accounts")

        assert [c.name for c in accounts.columns] == ["id", "email", "nickname"]
        email = accounts.columns[1]
        assert email.data_type == "TEXT"
        assert not email.nullable
        assert email.default == "'n/a'"
        assert accounts.columns[2].data_type == "VARCHAR(40)"
        assert accounts.columns[2].nullable

        placed_at = snapshot.get_table("orders").columns[2]
        assert placed_at.default == "CURRENT_TIMESTAMP"

    def test_composite_primary_key(self, snapshot):
        orders = snapshot.get_table("orders")
        assert [c.name for c in orders.columns if c.is_primary_key] == ["region", "number"]

    def test_composite_foreign_key(self, snapshot):
        fks = snapshot.get_table("order_lines").foreign_keys
        composite = next(fk for fk in fks if fk.referenced_table == "orders")

        assert composite.columns == ("region", "order_number")
        assert composite.referenced_columns == ("region", "number")
        assert composite.on_delete == "CASCADE"
        assert composite.name is None

    def test_implicit_reference_resolves_to_primary_key(self, snapshot):
        fks = snapshot.get_table("order_lines").foreign_keys
        implicit = next(fk for fk in fks if fk.referenced_table == "accounts")

        assert len(fks) == 2
        assert implicit.columns == ("account_id",)
        assert implicit.referenced_columns == ("id",)

    def test_view(self, snapshot):
        view = snapshot.get_table("active_accounts")

        assert view.kind is TableKind.VIEW
        assert [c.name for c in view.columns] == ["id", "email"]
        assert view.foreign_keys == ()

    def test_quoted_names(self, snapshot):
        weird = snapshot.get_table('we"ird')

        assert weird.columns[0].name == "a|b"
        assert weird.columns[0].default == "'x|y'"

    def test_internal_tables_hidden(self, tmp_path):
        path = tmp_path / "auto.db"
        connection = sqlite3.connect(str(path))
        connection.execute("CREATE TABLE things (id INTEGER PRIMARY KEY AUTOINCREMENT, label TEXT)")
        connection.commit()
        connection.close()

        snapshot = SQLiteAdapter(FileDescriptor(path=str(path))).introspect()

        assert [t.name for t in snapshot.tables] == ["things"]

    def test_empty_database(self, tmp_path):
        path = tmp_path / "empty.db"
        sqlite3.connect(str(path)).close()

        snapshot = SQLiteAdapter(FileDescriptor(path=str(path))).introspect()

        assert snapshot.tables == ()

    def test_connection_released(self, sqlite_db):
        adapter = SQLiteAdapter(FileDescriptor(path=sqlite_db))
        adapter.introspect()
        assert adapter._connection is None

    def test_database_is_not_modified(self, sqlite_db):
        before = os.path.getmtime(sqlite_db), os.path.getsize(sqlite_db)
        SQLiteAdapter(FileDescriptor(path=sqlite_db)).introspect()
        assert (os.path.getmtime(sqlite_db), os.path.getsize(sqlite_db)) == before


class TestSQLiteErrors:
    """Missing and malformed database files."""

    def test_missing_file(self, tmp_path):
        path = tmp_path / "missing.db"

        with pytest.raises(NotFoundError) as exc_info:
            SQLiteAdapter(FileDescriptor(path=str(path))).introspect()

        assert exc_info.value.code == "NOT_FOUND"
        assert exc_info.value.path == str(path)
        assert not path.exists()

    def test_directory_is_not_a_database(self, tmp_path):
        with pytest.raises(NotFoundError):
            SQLiteAdapter(FileDescriptor(path=str(tmp_path))).introspect()

    def test_not_a_database(self, tmp_path):
        path = tmp_path / "garbage.db"
        path.write_bytes(b"this is not a sqlite database\n" * 64)

        with pytest.raises(NotFoundError) as exc_info:
            SQLiteAdapter(FileDescriptor(path=str(path))).introspect()

        assert "could not be opened" in exc_info.value.message


class TestSQLiteProbe:

    def test_probe_success(self, sqlite_db):
        result = SQLiteAdapter(FileDescriptor(path=sqlite_db)).probe()

        assert result.success
        assert result.error_code is None

    def test_probe_missing_file(self, tmp_path):
        path = tmp_path / "missing.db"

        result = SQLiteAdapter(FileDescriptor(path=str(path))).probe()

        assert not result.success
        assert result.error_code == "NOT_FOUND"
        assert not path.exists()


class TestQuoteIdentifier:

    def test_plain(self):
        assert quote_identifier("users") == '"users"'

    def test_embedded_quote(self):
        assert quote_identifier('we"ird') == '"we""ird"'


def test_multiline_default_renders_on_one_row(tmp_path, generated_at):
    path = tmp_path / "notes.db"
    connection = sqlite3.connect(str(path))
    connection.execute("CREATE TABLE notes (note TEXT DEFAULT 'line1\nline2')")
    connection.commit()
    connection.close()

    snapshot = SQLiteAdapter(FileDescriptor(path=str(path))).introspect()
    document = render_markdown(snapshot, generated_at=generated_at)

    assert snapshot.tables[0].columns[0].default == "'line1\nline2'"
    assert "| note | TEXT | YES | 'line1 line2' |  |\n" in document
