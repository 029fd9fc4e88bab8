"""Typed failures raised by sql-context.

Every error carries a stable ``code`` the CLI prints next to the message,
and a ``details`` dict with the structured context (path, engine, host).
"""

from typing import Optional, Dict, Any


class SQLContextError(Exception):
    """Root of the sql-context error hierarchy."""

    def __init__(self, message: str, code: str = "SQL_CONTEXT_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = dict(details) if details else {}

    def to_dict(self) -> Dict[str, Any]:
        """Structured form of the error."""
        return {"code": self.code, "message": self.message, "details": self.details}


class ConnectionError(SQLContextError):
    """Could not establish or authenticate a database connection."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONNECTION_ERROR", details=details)


class NotFoundError(SQLContextError):
    """The database file is missing, unreadable or not a database."""

    def __init__(self, path: str, reason: Optional[str] = None):
        message = f"SQLite database file not found at {path}"
        if reason:
            message = f"SQLite database at {path} could not be opened: {reason}"
        super().__init__(message, code="NOT_FOUND", details={"path": path})
        self.path = path


class IntrospectionError(SQLContextError):
    """A catalog query failed after the connection was established."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INTROSPECTION_ERROR", details=details)


class UnsupportedEngineError(SQLContextError):
    """No adapter is registered for the requested engine kind."""

    def __init__(self, engine: Any, details: Optional[Dict[str, Any]] = None):
        name = getattr(engine, "value", engine)
        super().__init__(
            f"Unsupported database engine: {name}",
            code="UNSUPPORTED_ENGINE",
            details=details or {"engine": str(name)},
        )
        self.engine = engine


class ValidationError(SQLContextError):
    """Structurally invalid descriptor or schema model input."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)
