"""Markdown context document generator."""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from ..database.models import (
    ColumnDescriptor,
    ConnectionDescriptor,
    FileDescriptor,
    ForeignKeyDescriptor,
    SchemaSnapshot,
    TableDescriptor,
    TlsMode,
)

DELIMITER = "|"
NO_TABLES_MARKER = "_No tables found._"
NO_COLUMNS_MARKER = "_No columns discovered._"

COLUMN_HEADERS = ("Column", "Type", "Nullable", "Default", "Primary Key")
RELATION_HEADERS = ("Columns", "References", "On Update", "On Delete", "Constraint")
REFERENCED_BY_HEADERS = ("Table", "Columns", "Referenced Columns", "On Update", "On Delete", "Constraint")


def escape_cell(value: Optional[str]) -> str:
    """Make a value safe for a table cell. None renders as empty.

    Line breaks would end the table row, so each one becomes a single
    space. Only the delimiter escape is reversible.
    """
    if value is None:
        return ""
    text = str(value).replace("\r\n", " ").replace("\r", " ").replace("\n", " ")
    return text.replace(DELIMITER, "\\" + DELIMITER)


def unescape_cell(value: str) -> str:
    """Reverse the delimiter escape of escape_cell."""
    return value.replace("\\" + DELIMITER, DELIMITER)


def _row(cells) -> str:
    return "| " + " | ".join(cells) + " |"


def _format_timestamp(generated_at: datetime) -> str:
    if generated_at.tzinfo is None:
        generated_at = generated_at.replace(tzinfo=timezone.utc)
    return generated_at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class MarkdownGenerator:
    """Generates the markdown context document from a schema snapshot.

    Output depends only on the snapshot, the optional connection descriptor
    and the generation timestamp, which appears on a single header line.
    """

    TITLE = "# Database Context"

    def __init__(self, snapshot: SchemaSnapshot, descriptor: Optional[ConnectionDescriptor] = None):
        self.snapshot = snapshot
        self.descriptor = descriptor
        self._incoming = self._index_incoming()

    def _index_incoming(self) -> Dict[str, List[Tuple[TableDescriptor, ForeignKeyDescriptor]]]:
        """Map each referenced table name to the foreign keys pointing at it, in snapshot order."""
        incoming: Dict[str, List[Tuple[TableDescriptor, ForeignKeyDescriptor]]] = {}
        for table in self.snapshot.tables:
            for fk in table.foreign_keys:
                incoming.setdefault(fk.qualified_target, []).append((table, fk))
        return incoming

    def generate_connection_lines(self) -> List[str]:
        """Where the snapshot came from. Credentials are never rendered."""
        descriptor = self.descriptor
        if descriptor is None:
            return []
        if isinstance(descriptor, FileDescriptor):
            return [f"- File: `{descriptor.path}`"]

        lines = [
            f"- Host: **{descriptor.host}**",
            f"- Port: **{descriptor.resolved_port}**",
        ]
        if descriptor.schema_filter:
            lines.append(f"- Schema: **{descriptor.schema_filter}**")
        if descriptor.tls is not TlsMode.UNSPECIFIED:
            lines.append(f"- SSL: **{descriptor.tls.value}**")
        return lines

    def generate_header(self, generated_at: datetime) -> List[str]:
        lines = [self.TITLE, ""]
        lines.append(f"- Engine: **{self.snapshot.engine.value}**")
        if self.snapshot.database:
            lines.append(f"- Database: **{self.snapshot.database}**")
        lines.extend(self.generate_connection_lines())
        lines.append(f"- Generated: {_format_timestamp(generated_at)}")
        lines.append("")
        return lines

    def generate_column_row(self, column: ColumnDescriptor) -> str:
        return _row([
            escape_cell(column.name),
            escape_cell(column.data_type),
            "YES" if column.nullable else "NO",
            escape_cell(column.default),
            "Yes" if column.is_primary_key else "",
        ])

    def generate_relation_row(self, fk: ForeignKeyDescriptor) -> str:
        references = f"{fk.qualified_target}({', '.join(fk.referenced_columns)})"
        return _row([
            escape_cell(", ".join(fk.columns)),
            escape_cell(references),
            escape_cell(fk.on_update),
            escape_cell(fk.on_delete),
            escape_cell(fk.name),
        ])

    def generate_referenced_by_row(self, source: TableDescriptor, fk: ForeignKeyDescriptor) -> str:
        return _row([
            escape_cell(source.qualified_name),
            escape_cell(", ".join(fk.columns)),
            escape_cell(", ".join(fk.referenced_columns)),
            escape_cell(fk.on_update),
            escape_cell(fk.on_delete),
            escape_cell(fk.name),
        ])

    def generate_table(self, table: TableDescriptor) -> List[str]:
        lines = [f"## {table.qualified_name}", "", f"Type: `{table.kind.value}`", ""]

        if not table.columns:
            lines.extend([NO_COLUMNS_MARKER, ""])
        else:
            lines.append(_row(COLUMN_HEADERS))
            lines.append(_row(["---"] * len(COLUMN_HEADERS)))
            lines.extend(self.generate_column_row(column) for column in table.columns)
            lines.append("")

        if table.foreign_keys:
            lines.extend(["### Relations", ""])
            lines.append(_row(RELATION_HEADERS))
            lines.append(_row(["---"] * len(RELATION_HEADERS)))
            lines.extend(self.generate_relation_row(fk) for fk in table.foreign_keys)
            lines.append("")

        incoming = self._incoming.get(table.qualified_name)
        if incoming:
            lines.extend(["### Referenced By", ""])
            lines.append(_row(REFERENCED_BY_HEADERS))
            lines.append(_row(["---"] * len(REFERENCED_BY_HEADERS)))
            lines.extend(self.generate_referenced_by_row(source, fk) for source, fk in incoming)
            lines.append("")

        return lines

    def generate(self, generated_at: Optional[datetime] = None) -> str:
        """Render the full document.

        Args:
            generated_at: Timestamp for the header line (default: now, UTC)

        Returns:
            Markdown text ending with a newline
        """
        lines = self.generate_header(generated_at or datetime.now(timezone.utc))

        if not self.snapshot.tables:
            lines.extend([NO_TABLES_MARKER, ""])

        for table in self.snapshot.tables:
            lines.extend(self.generate_table(table))

        return "\n".join(lines)


def render_markdown(
    snapshot: SchemaSnapshot,
    generated_at: Optional[datetime] = None,
    descriptor: Optional[ConnectionDescriptor] = None,
) -> str:
    """Render a snapshot as a markdown context document.

    Passing the descriptor the snapshot came from adds its host, port,
    schema and TLS lines (or the file path) to the header.
    """
    return MarkdownGenerator(snapshot, descriptor).generate(generated_at)
