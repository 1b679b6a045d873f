"""
Exceptions raised by the XML importer.

Everything except ExecutionError happens before a transaction is opened.
"""
from __future__ import annotations


class ImporterError(Exception):
    """Base class for all importer errors."""
    pass


class ConfigError(ImporterError):
    """Raised when the importer configuration is invalid."""
    pass


class DatabaseConnectionError(ImporterError):
    """Raised when connecting to the database fails."""
    pass


class NotFoundError(ImporterError):
    """Raised when the source XML file does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"XML file not found: {path}")


class ParseError(ImporterError):
    """
    Raised when the source XML document is not well-formed.

    A broken document usually produces several diagnostics, so all of
    them are kept in ``messages``.
    """

    def __init__(self, path, messages: list[str]):
        self.path = path
        self.messages = list(messages)
        super().__init__(f"Error parsing XML {path}: " + "; ".join(self.messages))


class ExecutionError(ImporterError):
    """Raised when a statement fails inside the import transaction."""

    def __init__(self, message: str, table: str | None = None, group_index: int | None = None):
        self.table = table
        self.group_index = group_index
        super().__init__(message)
