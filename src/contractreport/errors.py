"""Error types raised by contractreport."""

from pathlib import Path


class SinkError(Exception):
    """Raised when a file-system operation on report output fails."""

    def __init__(self, operation: str, path: Path, cause: OSError | UnicodeError) -> None:
        self.operation = operation
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot {operation} {path}: {cause}")


class ReplayError(Exception):
    """Raised when a recorded event log cannot be parsed."""

    def __init__(self, path: Path, line_number: int, reason: str) -> None:
        self.path = path
        self.line_number = line_number
        super().__init__(f"{path}:{line_number}: {reason}")


class ConfigError(Exception):
    """Raised when the [tool.contractreport] table is invalid."""
