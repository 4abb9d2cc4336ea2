"""Error definitions and handling for gitsheets."""

from typing import Any, Dict, Optional


class GitSheetsError(Exception):
    """Base exception for gitsheets errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error with code, message, and optional details."""
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ParseError(GitSheetsError):
    """Delimited source data could not be tokenized into a table."""

    def __init__(self, source: str, reason: str, line: Optional[int] = None):
        location = f"{source}:{line}" if line is not None else source
        details: Dict[str, Any] = {"source": source, "reason": reason}
        if line is not None:
            details["line"] = line
        super().__init__(
            code="PARSE_ERROR",
            message=f"Failed to parse {location}: {reason}",
            details=details,
        )


class PersistenceError(GitSheetsError):
    """Reading or writing a snapshot, diff or dependency file failed."""

    def __init__(self, path: str, operation: str, reason: str):
        super().__init__(
            code="IO_ERROR",
            message=f"Failed to {operation} {path}: {reason}",
            details={"path": path, "operation": operation, "reason": reason},
        )


class SerializationError(GitSheetsError):
    """An in-memory value could not be encoded."""

    def __init__(self, kind: str, reason: str):
        super().__init__(
            code="SERIALIZATION_ERROR",
            message=f"Failed to serialize {kind}: {reason}",
            details={"kind": kind, "reason": reason},
        )


class DeserializationError(GitSheetsError):
    """A persisted document is malformed or does not match the schema."""

    def __init__(self, source: str, reason: str, errors: Optional[list] = None):
        details: Dict[str, Any] = {"source": source, "reason": reason}
        if errors:
            details["errors"] = errors
        super().__init__(
            code="DESERIALIZATION_ERROR",
            message=f"Failed to load {source}: {reason}",
            details=details,
        )


class GitCommandError(GitSheetsError):
    """A git subprocess exited unsuccessfully."""

    def __init__(self, command: list[str], reason: str):
        super().__init__(
            code="GIT_COMMAND_FAILED",
            message=f"git {' '.join(command)} failed: {reason}",
            details={"command": command, "reason": reason},
        )
