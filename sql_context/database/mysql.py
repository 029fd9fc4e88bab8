"""MySQL database adapter."""

import logging
from typing import Optional, Tuple

from ..errors import ConnectionError, IntrospectionError
from .base import EngineAdapter
from .models import (
    ColumnRow,
    EngineKind,
    ForeignKeyRow,
    PrimaryKeyRow,
    TableRow,
    TlsMode,
)

logger = logging.getLogger(__name__)


def _text(value) -> Optional[str]:
    """Some server versions hand back information_schema text as bytes."""
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return value


class MySQLAdapter(EngineAdapter):
    """Introspects one MySQL database through INFORMATION_SCHEMA.

    MySQL has no schemas inside a database, so table rows carry none.
    """

    ENGINE = EngineKind.MYSQL

    def connect(self):
        """Connect to MySQL."""
        if self._connection is not None:
            return self._connection

        try:
            import pymysql
        except ImportError:
            raise ImportError(
                "PyMySQL is required. "
                "Install it with: pip install pymysql"
            )

        params = dict(
            host=self.descriptor.host,
            port=self.descriptor.resolved_port,
            user=self.descriptor.user,
            password=self.descriptor.password or "",
            database=self.descriptor.database,
            init_command="SET SESSION TRANSACTION READ ONLY",
        )
        if self.descriptor.tls is TlsMode.ENABLED:
            params["ssl"] = {"check_hostname": False}
        elif self.descriptor.tls is TlsMode.DISABLED:
            params["ssl_disabled"] = True
        if self.descriptor.connect_timeout is not None:
            params["connect_timeout"] = self.descriptor.connect_timeout

        logger.debug("Connecting to mysql at %s:%s/%s", params["host"], params["port"], params["database"])
        try:
            self._connection = pymysql.connect(**params)
        except pymysql.MySQLError as e:
            raise ConnectionError(
                f"MySQL connection failed: {e}",
                details={"host": self.descriptor.host, "port": self.descriptor.resolved_port},
            ) from e
        return self._connection

    def close(self):
        """Close the MySQL connection."""
        if self._connection is not None:
            try:
                self._connection.close()
            finally:
                self._connection = None

    def execute(self, sql: str, params: tuple = ()) -> list:
        import pymysql

        logger.debug("mysql query: %s", " ".join(sql.split()))
        try:
            with self._connection.cursor() as cursor:
                cursor.execute(sql, params or None)
                return list(cursor.fetchall())
        except pymysql.MySQLError as e:
            raise IntrospectionError(f"MySQL catalog query failed: {e}") from e

    def get_database_name(self) -> str:
        return self.descriptor.database

    def get_tables(self) -> Tuple[TableRow, ...]:
        rows = self.execute("""
            SELECT TABLE_NAME, TABLE_TYPE
            FROM INFORMATION_SCHEMA.TABLES
            WHERE TABLE_SCHEMA = %s
            ORDER BY TABLE_NAME
        """, (self.descriptor.database,))
        return tuple(TableRow(schema=None, name=_text(r[0]), table_type=_text(r[1])) for r in rows)

    def get_columns(self) -> Tuple[ColumnRow, ...]:
        # COLUMN_TYPE keeps length and unsigned details, e.g. varchar(255)
        rows = self.execute("""
            SELECT TABLE_NAME, COLUMN_NAME, COLUMN_TYPE, IS_NULLABLE, COLUMN_DEFAULT
            FROM INFORMATION_SCHEMA.COLUMNS
            WHERE TABLE_SCHEMA = %s
            ORDER BY TABLE_NAME, ORDINAL_POSITION
        """, (self.descriptor.database,))
        return tuple(
            ColumnRow(
                schema=None,
                table=_text(r[0]),
                name=_text(r[1]),
                data_type=_text(r[2]),
                nullable=(_text(r[3]) == 'YES'),
                default=_text(r[4]),
            )
            for r in rows
        )

    def get_primary_keys(self) -> Tuple[PrimaryKeyRow, ...]:
        rows = self.execute("""
            SELECT TABLE_NAME, COLUMN_NAME
            FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE
            WHERE TABLE_SCHEMA = %s AND CONSTRAINT_NAME = 'PRIMARY'
            ORDER BY TABLE_NAME, ORDINAL_POSITION
        """, (self.descriptor.database,))
        return tuple(PrimaryKeyRow(schema=None, table=_text(r[0]), column=_text(r[1])) for r in rows)

    def get_foreign_keys(self) -> Tuple[ForeignKeyRow, ...]:
        rows = self.execute("""
            SELECT
                kcu.TABLE_NAME,
                kcu.CONSTRAINT_NAME,
                kcu.COLUMN_NAME,
                kcu.REFERENCED_TABLE_SCHEMA,
                kcu.REFERENCED_TABLE_NAME,
                kcu.REFERENCED_COLUMN_NAME,
                rc.UPDATE_RULE,
                rc.DELETE_RULE
            FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE kcu
            JOIN INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS rc
              ON rc.CONSTRAINT_SCHEMA = kcu.CONSTRAINT_SCHEMA
              AND rc.CONSTRAINT_NAME = kcu.CONSTRAINT_NAME
              AND rc.TABLE_NAME = kcu.TABLE_NAME
            WHERE kcu.TABLE_SCHEMA = %s
              AND kcu.REFERENCED_TABLE_NAME IS NOT NULL
            ORDER BY kcu.TABLE_NAME, kcu.CONSTRAINT_NAME, kcu.ORDINAL_POSITION
        """, (self.descriptor.database,))

        foreign_keys = []
        for r in rows:
            referenced_schema = _text(r[3])
            # Only qualify references that leave the current database
            if referenced_schema == self.descriptor.database:
                referenced_schema = None
            foreign_keys.append(ForeignKeyRow(
                schema=None,
                table=_text(r[0]),
                constraint_name=_text(r[1]),
                column=_text(r[2]),
                referenced_schema=referenced_schema,
                referenced_table=_text(r[4]),
                referenced_column=_text(r[5]),
                on_update=_text(r[6]),
                on_delete=_text(r[7]),
            ))
        return tuple(foreign_keys)
