"""Engine kind to adapter dispatch.

Adding an engine means adding one EngineAdapter subclass and one entry here.
"""

from typing import Dict, Type

from ..errors import UnsupportedEngineError
from .base import EngineAdapter
from .models import ConnectionDescriptor, EngineKind, FileDescriptor, NetworkDescriptor
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter
from .sqlite import SQLiteAdapter

ADAPTERS: Dict[EngineKind, Type[EngineAdapter]] = {
    EngineKind.POSTGRES: PostgresAdapter,
    EngineKind.MYSQL: MySQLAdapter,
    EngineKind.SQLITE: SQLiteAdapter,
}


def get_adapter(descriptor: ConnectionDescriptor) -> EngineAdapter:
    """Create the adapter matching a descriptor's engine kind.

    Raises:
        UnsupportedEngineError: No adapter exists for the engine, or the
            descriptor type does not fit it
    """
    engine = getattr(descriptor, "engine", None)
    if engine is None:
        raise UnsupportedEngineError(type(descriptor).__name__)
    engine = EngineKind.parse(engine)
    adapter_cls = ADAPTERS.get(engine)
    if adapter_cls is None:
        raise UnsupportedEngineError(engine)

    expected = FileDescriptor if engine.is_file_based else NetworkDescriptor
    if not isinstance(descriptor, expected):
        raise UnsupportedEngineError(
            engine,
            details={
                "engine": engine.value,
                "descriptor": type(descriptor).__name__,
                "expected": expected.__name__,
            },
        )
    return adapter_cls(descriptor)


def supported_engines() -> list:
    """Get list of supported engine names."""
    return [engine.value for engine in ADAPTERS]
