"""Abstract base class for database engine adapters."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from ..errors import ConnectionError, IntrospectionError, NotFoundError
from .models import (
    CatalogRows,
    ColumnRow,
    EngineKind,
    ForeignKeyRow,
    PrimaryKeyRow,
    SchemaSnapshot,
    TableRow,
)
from .normalizer import build_snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a liveness probe."""
    success: bool
    engine: EngineKind
    message: str
    error_code: Optional[str] = None


class EngineAdapter(ABC):
    """Abstract base class for catalog introspection of one engine.

    Subclasses implement the connection handling and the catalog queries;
    this class sequences them and guarantees the connection is released on
    every exit path.
    """

    ENGINE: EngineKind

    PROBE_QUERY = "SELECT 1"

    def __init__(self, descriptor):
        self.descriptor = descriptor
        self._connection = None

    @abstractmethod
    def connect(self):
        """Open the driver connection.

        Raises:
            ConnectionError: Connection or authentication failed
        """
        pass

    @abstractmethod
    def close(self):
        """Close the driver connection if open."""
        pass

    @abstractmethod
    def execute(self, sql: str, params: tuple = ()) -> list:
        """Run a catalog query and return all rows.

        Raises:
            IntrospectionError: The query failed
        """
        pass

    @abstractmethod
    def get_tables(self) -> Tuple[TableRow, ...]:
        """Enumerate tables and views."""
        pass

    @abstractmethod
    def get_columns(self) -> Tuple[ColumnRow, ...]:
        """Enumerate columns in ordinal order."""
        pass

    @abstractmethod
    def get_primary_keys(self) -> Tuple[PrimaryKeyRow, ...]:
        """Enumerate primary-key columns."""
        pass

    @abstractmethod
    def get_foreign_keys(self) -> Tuple[ForeignKeyRow, ...]:
        """Enumerate foreign-key column pairs in constraint ordinal order."""
        pass

    def get_database_name(self) -> Optional[str]:
        """Display name for the introspected database."""
        return None

    def fetch_rows(self) -> CatalogRows:
        """Connect, run every catalog query, and close the connection."""
        self.connect()
        try:
            rows = CatalogRows(
                tables=tuple(self.get_tables()),
                columns=tuple(self.get_columns()),
                primary_keys=tuple(self.get_primary_keys()),
                foreign_keys=tuple(self.get_foreign_keys()),
            )
        finally:
            self.close()

        logger.info(
            "Fetched %d tables, %d columns, %d foreign key rows from %s",
            len(rows.tables), len(rows.columns), len(rows.foreign_keys), self.ENGINE.value,
        )
        return rows

    def introspect(self) -> SchemaSnapshot:
        """Introspect the database and return its normalized structure."""
        rows = self.fetch_rows()
        return build_snapshot(self.ENGINE, rows, database=self.get_database_name())

    def probe(self) -> ProbeResult:
        """Check the descriptor with a trivial round trip, without reading the schema."""
        try:
            self.connect()
            try:
                self.execute(self.PROBE_QUERY)
            finally:
                self.close()
        except (ConnectionError, NotFoundError, IntrospectionError) as e:
            logger.warning("Probe of %s failed: %s", self.ENGINE.value, e.message)
            return ProbeResult(success=False, engine=self.ENGINE, message=e.message, error_code=e.code)

        return ProbeResult(success=True, engine=self.ENGINE, message="Connection succeeded")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
