"""
Error Handling - Centralized error policies and custom exceptions.

Every filesystem error the crawler meets is transient from the catalog's
point of view: the entry is skipped and logged. Only the log level varies.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from pathlib import Path


logger = logging.getLogger(__name__)


@dataclass
class ErrorPolicy:
    """Policy for handling a specific error type."""
    log_level: int
    message_template: str = "{file}: {error}"


# Error type to policy mapping (first isinstance match wins)
ERROR_POLICIES: dict[type, ErrorPolicy] = {
    PermissionError: ErrorPolicy(
        log_level=logging.WARNING,
        message_template="Permission denied: {file}"
    ),
    FileNotFoundError: ErrorPolicy(
        log_level=logging.DEBUG,
        message_template="Not found (possibly deleted): {file}"
    ),
    NotADirectoryError: ErrorPolicy(
        log_level=logging.DEBUG,
        message_template="Expected directory, got file: {file}"
    ),
    OSError: ErrorPolicy(
        log_level=logging.WARNING,
        message_template="Cannot access {file} - {error}"
    ),
}

UNEXPECTED_ERROR_POLICY = ErrorPolicy(
    log_level=logging.ERROR,
    message_template="Unexpected error: {file} - {error}"
)


class CatalogError(Exception):
    """Base exception for catalog errors."""
    pass


class PersistenceError(CatalogError):
    """The index file could not be written, read or deleted."""
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class CorruptIndexError(PersistenceError):
    """The index file exists but cannot be parsed."""
    pass


def handle_error(
    error: Exception,
    file_path: Optional[Path] = None,
    context: str = ""
) -> None:
    """
    Log an error at the level its policy assigns.

    The caller always skips the offending path and carries on.

    Args:
        error: The exception that occurred
        file_path: Path being processed (if applicable)
        context: Additional context for logging
    """
    policy = next(
        (p for error_type, p in ERROR_POLICIES.items() if isinstance(error, error_type)),
        UNEXPECTED_ERROR_POLICY,
    )

    file_str = str(file_path) if file_path else "<unknown>"
    message = policy.message_template.format(file=file_str, error=str(error))
    if context:
        message = f"[{context}] {message}"

    logger.log(policy.log_level, message)
