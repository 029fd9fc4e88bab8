"""Database introspection module for sql-context.

This module provides engine-agnostic introspection with specific
adapters for PostgreSQL, MySQL and SQLite.
"""

from .models import (
    EngineKind,
    TlsMode,
    NetworkDescriptor,
    FileDescriptor,
    ConnectionDescriptor,
    TableRow,
    ColumnRow,
    PrimaryKeyRow,
    ForeignKeyRow,
    CatalogRows,
    TableKind,
    ColumnDescriptor,
    ForeignKeyDescriptor,
    TableDescriptor,
    SchemaSnapshot,
)
from .base import EngineAdapter, ProbeResult
from .constraints import group_foreign_keys, primary_key_set
from .normalizer import build_snapshot
from .postgres import PostgresAdapter
from .mysql import MySQLAdapter
from .sqlite import SQLiteAdapter
from .registry import ADAPTERS, get_adapter, supported_engines

__all__ = [
    # Descriptors
    "EngineKind",
    "TlsMode",
    "NetworkDescriptor",
    "FileDescriptor",
    "ConnectionDescriptor",
    # Catalog rows
    "TableRow",
    "ColumnRow",
    "PrimaryKeyRow",
    "ForeignKeyRow",
    "CatalogRows",
    # Schema model
    "TableKind",
    "ColumnDescriptor",
    "ForeignKeyDescriptor",
    "TableDescriptor",
    "SchemaSnapshot",
    # Reconstruction and normalization
    "group_foreign_keys",
    "primary_key_set",
    "build_snapshot",
    # Adapters
    "EngineAdapter",
    "ProbeResult",
    "PostgresAdapter",
    "MySQLAdapter",
    "SQLiteAdapter",
    "ADAPTERS",
    "get_adapter",
    "supported_engines",
]
