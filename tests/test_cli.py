"""Tests for the sql-context command line."""

import json

from typer.testing import CliRunner

from sql_context.main import app, build_descriptor
from sql_context.database.models import EngineKind, FileDescriptor, NetworkDescriptor, TlsMode

runner = CliRunner()


class TestIntrospectCommand:

    def test_markdown_to_stdout(self, sqlite_db):
        result = runner.invoke(app, ["introspect", "--engine", "sqlite", "--file", sqlite_db])

        assert result.exit_code == 0, result.output
        assert result.stdout.startswith("# Database Context\n")
        assert "## orders" in result.stdout
        assert "| region | TEXT | NO |  | Yes |" in result.stdout

    def test_json_format(self, sqlite_db):
        result = runner.invoke(app, ["introspect", "-e", "sqlite", "-f", sqlite_db, "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["engine"] == "sqlite"
        assert [t["name"] for t in data["tables"]][:2] == ["accounts", "active_accounts"]

    def test_output_file(self, sqlite_db, tmp_path):
        output = tmp_path / "context.md"

        result = runner.invoke(app, ["introspect", "-e", "sqlite", "-f", sqlite_db, "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert output.read_text(encoding="utf-8").startswith("# Database Context\n")

    def test_missing_database_writes_nothing(self, tmp_path):
        output = tmp_path / "context.md"
        missing = tmp_path / "missing.db"

        result = runner.invoke(app, ["introspect", "-e", "sqlite", "-f", str(missing), "-o", str(output)])

        assert result.exit_code == 1
        assert "NOT_FOUND" in result.output
        assert not output.exists()
        assert not missing.exists()

    def test_unknown_engine(self):
        result = runner.invoke(app, ["introspect", "-e", "oracle", "-h", "db", "-d", "app"])

        assert result.exit_code == 1
        assert "UNSUPPORTED_ENGINE" in result.output

    def test_schema_with_mysql(self):
        result = runner.invoke(app, ["introspect", "-e", "mysql", "-h", "db", "-d", "shop", "-s", "sales"])

        assert result.exit_code == 1
        assert "VALIDATION_ERROR" in result.output

    def test_missing_host(self):
        result = runner.invoke(app, ["introspect", "-e", "postgres", "-d", "app"])

        assert result.exit_code == 1
        assert "VALIDATION_ERROR" in result.output

    def test_unknown_format(self, sqlite_db):
        result = runner.invoke(app, ["introspect", "-e", "sqlite", "-f", sqlite_db, "--format", "yaml"])

        assert result.exit_code != 0


class TestProbeCommand:

    def test_reachable(self, sqlite_db):
        result = runner.invoke(app, ["probe", "-e", "sqlite", "-f", sqlite_db])

        assert result.exit_code == 0, result.output
        assert "Connection succeeded" in result.output

    def test_unreachable(self, tmp_path):
        result = runner.invoke(app, ["probe", "-e", "sqlite", "-f", str(tmp_path / "missing.db")])

        assert result.exit_code == 1
        assert "NOT_FOUND" in result.output


def test_config_command():
    result = runner.invoke(app, ["config"])

    assert result.exit_code == 0
    assert "PostgreSQL port: 5432" in result.output


class TestBuildDescriptor:

    def test_sqlite_path_is_resolved(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        descriptor = build_descriptor("sqlite", file="app.db")

        assert isinstance(descriptor, FileDescriptor)
        assert descriptor.path == str((tmp_path / "app.db").resolve())

    def test_network_defaults(self):
        descriptor = build_descriptor("mysql", host="db", database="shop", ssl=False)

        assert isinstance(descriptor, NetworkDescriptor)
        assert descriptor.engine is EngineKind.MYSQL
        assert descriptor.port == 3306
        assert descriptor.tls is TlsMode.DISABLED

    def test_tls_left_to_driver(self):
        descriptor = build_descriptor("postgres", host="db", database="app")
        assert descriptor.tls is TlsMode.UNSPECIFIED
