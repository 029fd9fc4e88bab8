"""sql-context - Describe relational database schemas as markdown context."""

__version__ = "0.1.0"

from .database import (
    EngineKind,
    TlsMode,
    NetworkDescriptor,
    FileDescriptor,
    ColumnDescriptor,
    ForeignKeyDescriptor,
    TableDescriptor,
    TableKind,
    SchemaSnapshot,
    ProbeResult,
)
from .errors import (
    SQLContextError,
    ConnectionError,
    NotFoundError,
    IntrospectionError,
    UnsupportedEngineError,
    ValidationError,
)
from .markdown import render_markdown
from .service import introspect, generate_context, check_connection

__all__ = [
    "EngineKind",
    "TlsMode",
    "NetworkDescriptor",
    "FileDescriptor",
    "ColumnDescriptor",
    "ForeignKeyDescriptor",
    "TableDescriptor",
    "TableKind",
    "SchemaSnapshot",
    "ProbeResult",
    "SQLContextError",
    "ConnectionError",
    "NotFoundError",
    "IntrospectionError",
    "UnsupportedEngineError",
    "ValidationError",
    "render_markdown",
    "introspect",
    "generate_context",
    "check_connection",
]
