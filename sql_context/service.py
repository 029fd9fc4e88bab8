"""High-level entry points: introspect, render, probe.

Each call opens its own connection and shares no state with other calls.
"""

import logging
from datetime import datetime
from typing import Optional

from .database.base import ProbeResult
from .database.models import ConnectionDescriptor, SchemaSnapshot
from .database.registry import get_adapter
from .markdown.generator import render_markdown

logger = logging.getLogger(__name__)


def introspect(descriptor: ConnectionDescriptor) -> SchemaSnapshot:
    """Introspect the database a descriptor points at."""
    adapter = get_adapter(descriptor)
    snapshot = adapter.introspect()
    logger.info(
        "Introspected %d tables from %s database %s",
        len(snapshot.tables), snapshot.engine.value, snapshot.database or "",
    )
    return snapshot


def generate_context(descriptor: ConnectionDescriptor, generated_at: Optional[datetime] = None) -> str:
    """Introspect and render the markdown context document."""
    return render_markdown(introspect(descriptor), generated_at=generated_at, descriptor=descriptor)


def check_connection(descriptor: ConnectionDescriptor) -> ProbeResult:
    """Validate a descriptor with a liveness probe."""
    return get_adapter(descriptor).probe()
