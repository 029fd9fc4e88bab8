"""Database data models for schema introspection.

Three groups of types live here:

* connection descriptors, built by the caller and never mutated,
* raw catalog rows, the common shape every engine adapter returns,
* the unified schema model (snapshot, tables, columns, foreign keys).
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from ..errors import UnsupportedEngineError, ValidationError


class EngineKind(str, Enum):
    """Supported database engines."""
    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"

    @property
    def is_file_based(self) -> bool:
        return self is EngineKind.SQLITE

    @classmethod
    def parse(cls, value) -> "EngineKind":
        """Accept an EngineKind or its case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedEngineError(value) from None


class TlsMode(str, Enum):
    """TLS preference for networked engines.

    UNSPECIFIED leaves the choice to the driver default.
    """
    ENABLED = "enabled"
    DISABLED = "disabled"
    UNSPECIFIED = "unspecified"

    @classmethod
    def from_flag(cls, flag: Optional[bool]) -> "TlsMode":
        if flag is None:
            return cls.UNSPECIFIED
        return cls.ENABLED if flag else cls.DISABLED

    @classmethod
    def parse(cls, value) -> "TlsMode":
        """Accept a TlsMode or its case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValidationError(
                f"Unknown TLS mode {value!r}; expected one of: {', '.join(m.value for m in cls)}",
                details={"tls": str(value)},
            ) from None


DEFAULT_PORTS = {
    EngineKind.POSTGRES: 5432,
    EngineKind.MYSQL: 3306,
}


@dataclass(frozen=True)
class NetworkDescriptor:
    """Connection descriptor for a networked relational engine."""
    engine: EngineKind
    host: str
    database: str
    user: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    port: Optional[int] = None
    schema: Optional[str] = None
    tls: TlsMode = TlsMode.UNSPECIFIED
    connect_timeout: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "engine", EngineKind.parse(self.engine))
        object.__setattr__(self, "tls", TlsMode.parse(self.tls))
        if self.engine.is_file_based:
            raise ValidationError(
                f"{self.engine.value} is file-based; use FileDescriptor",
                details={"engine": self.engine.value},
            )
        if not self.host or not self.database:
            raise ValidationError(
                f"{self.engine.value} connections require host and database name",
                details={"engine": self.engine.value},
            )
        # MySQL scopes introspection by database; it has no schemas inside one
        if self.engine is EngineKind.MYSQL and self.schema_filter:
            raise ValidationError(
                "mysql has no schemas within a database; select it with the database name instead",
                details={"engine": self.engine.value, "schema": self.schema},
            )

    @property
    def resolved_port(self) -> int:
        return self.port if self.port is not None else DEFAULT_PORTS[self.engine]

    @property
    def schema_filter(self) -> Optional[str]:
        """Schema to restrict introspection to, or None for all schemas."""
        if self.schema and self.schema != "*":
            return self.schema
        return None


@dataclass(frozen=True)
class FileDescriptor:
    """Connection descriptor for a file-based engine."""
    path: str
    engine: EngineKind = EngineKind.SQLITE

    def __post_init__(self):
        object.__setattr__(self, "engine", EngineKind.parse(self.engine))
        if not self.engine.is_file_based:
            raise ValidationError(
                f"{self.engine.value} is a networked engine; use NetworkDescriptor",
                details={"engine": self.engine.value},
            )
        if not self.path:
            raise ValidationError("SQLite connections require a file path")


ConnectionDescriptor = Union[NetworkDescriptor, FileDescriptor]


# Raw catalog rows. Schema is None for engines without namespaces.

TableKey = Tuple[Optional[str], str]


@dataclass(frozen=True)
class TableRow:
    schema: Optional[str]
    name: str
    table_type: str  # engine-native, e.g. 'BASE TABLE', 'VIEW', 'table'


@dataclass(frozen=True)
class ColumnRow:
    schema: Optional[str]
    table: str
    name: str
    data_type: str
    nullable: bool
    default: Optional[str] = None


@dataclass(frozen=True)
class PrimaryKeyRow:
    schema: Optional[str]
    table: str
    column: str


@dataclass(frozen=True)
class ForeignKeyRow:
    """One (constraint, column position) pair of a foreign key."""
    schema: Optional[str]
    table: str
    column: str
    referenced_table: str
    referenced_column: str
    constraint_name: Optional[str] = None
    group_id: Optional[int] = None
    referenced_schema: Optional[str] = None
    on_update: Optional[str] = None
    on_delete: Optional[str] = None


@dataclass(frozen=True)
class CatalogRows:
    """Everything one adapter run returns, before normalization."""
    tables: Tuple[TableRow, ...] = ()
    columns: Tuple[ColumnRow, ...] = ()
    primary_keys: Tuple[PrimaryKeyRow, ...] = ()
    foreign_keys: Tuple[ForeignKeyRow, ...] = ()


# Unified schema model

class TableKind(str, Enum):
    TABLE = "table"
    VIEW = "view"


@dataclass(frozen=True)
class ColumnDescriptor:
    """Represents a table column. data_type keeps the engine's own vocabulary."""
    name: str
    data_type: str
    nullable: bool = True
    default: Optional[str] = None
    is_primary_key: bool = False


@dataclass(frozen=True)
class ForeignKeyDescriptor:
    """A single or multi-column foreign key.

    columns[i] references referenced_columns[i].
    """
    columns: Tuple[str, ...]
    referenced_table: str
    referenced_columns: Tuple[str, ...]
    name: Optional[str] = None
    referenced_schema: Optional[str] = None
    on_update: Optional[str] = None
    on_delete: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "referenced_columns", tuple(self.referenced_columns))
        if not self.columns or len(self.columns) != len(self.referenced_columns):
            raise ValidationError(
                f"Foreign key {self.name or '<unnamed>'} has {len(self.columns)} local "
                f"and {len(self.referenced_columns)} referenced columns",
                details={
                    "columns": list(self.columns),
                    "referenced_columns": list(self.referenced_columns),
                },
            )

    @property
    def qualified_target(self) -> str:
        if self.referenced_schema:
            return f"{self.referenced_schema}.{self.referenced_table}"
        return self.referenced_table


@dataclass(frozen=True)
class TableDescriptor:
    """Represents a table or view."""
    name: str
    kind: TableKind = TableKind.TABLE
    columns: Tuple[ColumnDescriptor, ...] = ()
    schema: Optional[str] = None
    foreign_keys: Tuple[ForeignKeyDescriptor, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "foreign_keys", tuple(self.foreign_keys))
        seen = set()
        for column in self.columns:
            if column.name in seen:
                raise ValidationError(
                    f"Duplicate column {column.name!r} in table {self.qualified_name}",
                    details={"table": self.qualified_name, "column": column.name},
                )
            seen.add(column.name)

    @property
    def qualified_name(self) -> str:
        if self.schema:
            return f"{self.schema}.{self.name}"
        return self.name


@dataclass(frozen=True)
class SchemaSnapshot:
    """Unified, engine-agnostic structure of one database."""
    engine: EngineKind
    tables: Tuple[TableDescriptor, ...] = ()
    database: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "tables", tuple(self.tables))

    def get_table(self, name: str, schema: Optional[str] = None) -> Optional[TableDescriptor]:
        """Find a table by name (and schema, when given)."""
        for table in self.tables:
            if table.name == name and (schema is None or table.schema == schema):
                return table
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["engine"] = self.engine.value
        for table in data["tables"]:
            table["kind"] = TableKind(table["kind"]).value
        return data
