"""PostgreSQL database adapter."""

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

_SSL_MODES = {
    TlsMode.ENABLED: "require",
    TlsMode.DISABLED: "disable",
}

# pg_constraint.confupdtype / confdeltype codes
_FK_RULES = {
    "a": "NO ACTION",
    "r": "RESTRICT",
    "c": "CASCADE",
    "n": "SET NULL",
    "d": "SET DEFAULT",
}


def _rule_name(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    return _FK_RULES.get(code, code)


class PostgresAdapter(EngineAdapter):
    """Introspects PostgreSQL through information_schema and pg_catalog."""

    ENGINE = EngineKind.POSTGRES
    EXCLUDED_SCHEMAS = ('information_schema', 'pg_catalog', 'pg_toast')

    def _schema_condition(self, column: str) -> Tuple[str, tuple]:
        """WHERE fragment restricting rows to user schemas."""
        schema = self.descriptor.schema_filter
        if schema:
            return f"{column} = %s", (schema,)
        excluded = ", ".join(["%s"] * len(self.EXCLUDED_SCHEMAS))
        condition = (
            f"{column} NOT IN ({excluded}) "
            f"AND {column} NOT LIKE 'pg\\_temp\\_%%' "
            f"AND {column} NOT LIKE 'pg\\_toast\\_temp\\_%%'"
        )
        return condition, self.EXCLUDED_SCHEMAS

    def connect(self):
        """Connect to PostgreSQL."""
        if self._connection is not None:
            return self._connection

        try:
            import psycopg2
        except ImportError:
            raise ImportError(
                "psycopg2 is required. "
                "Install it with: pip install psycopg2-binary"
            )

        params = dict(
            host=self.descriptor.host,
            port=self.descriptor.resolved_port,
            user=self.descriptor.user,
            password=self.descriptor.password,
            dbname=self.descriptor.database,
            options="-c default_transaction_read_only=on",
        )
        sslmode = _SSL_MODES.get(self.descriptor.tls)
        if sslmode:
            params["sslmode"] = sslmode
        if self.descriptor.connect_timeout is not None:
            params["connect_timeout"] = self.descriptor.connect_timeout

        logger.debug("Connecting to postgres at %s:%s/%s", params["host"], params["port"], params["dbname"])
        try:
            self._connection = psycopg2.connect(**params)
        except psycopg2.Error as e:
            raise ConnectionError(
                f"PostgreSQL connection failed: {e}".strip(),
                details={"host": self.descriptor.host, "port": self.descriptor.resolved_port},
            ) from e
        return self._connection

    def close(self):
        """Close the PostgreSQL connection."""
        if self._connection is not None:
            try:
                self._connection.close()
            finally:
                self._connection = None

    def execute(self, sql: str, params: tuple = ()) -> list:
        import psycopg2

        logger.debug("postgres query: %s", " ".join(sql.split()))
        try:
            with self._connection.cursor() as cursor:
                cursor.execute(sql, params)
                return cursor.fetchall()
        except psycopg2.Error as e:
            raise IntrospectionError(f"PostgreSQL catalog query failed: {e}".strip()) from e

    def get_database_name(self) -> str:
        return self.descriptor.database

    def get_tables(self) -> Tuple[TableRow, ...]:
        condition, params = self._schema_condition("table_schema")
        rows = self.execute(f"""
            SELECT table_schema, table_name, table_type
            FROM information_schema.tables
            WHERE {condition}
            ORDER BY table_schema, table_name
        """, params)
        return tuple(TableRow(schema=r[0], name=r[1], table_type=r[2]) for r in rows)

    def get_columns(self) -> Tuple[ColumnRow, ...]:
        condition, params = self._schema_condition("table_schema")
        rows = self.execute(f"""
            SELECT table_schema, table_name, column_name, data_type, is_nullable, column_default
            FROM information_schema.columns
            WHERE {condition}
            ORDER BY table_schema, table_name, ordinal_position
        """, params)
        return tuple(
            ColumnRow(
                schema=r[0],
                table=r[1],
                name=r[2],
                data_type=r[3],
                nullable=(r[4] == 'YES'),
                default=r[5],
            )
            for r in rows
        )

    def get_primary_keys(self) -> Tuple[PrimaryKeyRow, ...]:
        condition, params = self._schema_condition("tc.table_schema")
        rows = self.execute(f"""
            SELECT tc.table_schema, tc.table_name, kcu.column_name
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
              ON tc.constraint_schema = kcu.constraint_schema
              AND tc.constraint_name = kcu.constraint_name
              AND tc.table_name = kcu.table_name
            WHERE tc.constraint_type = 'PRIMARY KEY'
              AND {condition}
            ORDER BY tc.table_schema, tc.table_name, kcu.ordinal_position
        """, params)
        return tuple(PrimaryKeyRow(schema=r[0], table=r[1], column=r[2]) for r in rows)

    def get_foreign_keys(self) -> Tuple[ForeignKeyRow, ...]:
        """Foreign keys from pg_constraint.

        Constraint names are only unique per table, so rows are keyed on the
        owning relation's oid rather than on (schema, constraint name).
        conkey and confkey are unnested together to keep column pairs aligned.
        """
        condition, params = self._schema_condition("ns.nspname")
        rows = self.execute(f"""
            SELECT
                ns.nspname,
                cls.relname,
                con.conname,
                att.attname,
                fns.nspname,
                fcls.relname,
                fatt.attname,
                con.confupdtype,
                con.confdeltype
            FROM pg_catalog.pg_constraint con
            JOIN pg_catalog.pg_class cls ON cls.oid = con.conrelid
            JOIN pg_catalog.pg_namespace ns ON ns.oid = cls.relnamespace
            JOIN pg_catalog.pg_class fcls ON fcls.oid = con.confrelid
            JOIN pg_catalog.pg_namespace fns ON fns.oid = fcls.relnamespace
            CROSS JOIN LATERAL unnest(con.conkey, con.confkey)
                WITH ORDINALITY AS k(attnum, fattnum, position)
            JOIN pg_catalog.pg_attribute att
              ON att.attrelid = con.conrelid AND att.attnum = k.attnum
            JOIN pg_catalog.pg_attribute fatt
              ON fatt.attrelid = con.confrelid AND fatt.attnum = k.fattnum
            WHERE con.contype = 'f'
              AND {condition}
            ORDER BY ns.nspname, cls.relname, con.conname, k.position
        """, params)
        return tuple(
            ForeignKeyRow(
                schema=r[0],
                table=r[1],
                constraint_name=r[2],
                column=r[3],
                referenced_schema=r[4],
                referenced_table=r[5],
                referenced_column=r[6],
                on_update=_rule_name(r[7]),
                on_delete=_rule_name(r[8]),
            )
            for r in rows
        )
