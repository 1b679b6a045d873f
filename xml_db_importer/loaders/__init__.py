"""
Database side of the importer.

- Connection and transaction handling
- Generic upsert statement builder
"""

from .base import DatabaseLoader, get_connection
from .upsert import UpsertStatement, build_upsert, is_key_column, quote_identifier

__all__ = [
    "DatabaseLoader",
    "get_connection",
    "UpsertStatement",
    "build_upsert",
    "is_key_column",
    "quote_identifier",
]
