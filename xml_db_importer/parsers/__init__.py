"""
XML parsing for the importer.

- Document reader yielding record groups and fields
- Sanitizer and text helpers
"""

from .base import direct_text, local_name, sanitize_xml
from .document import XmlDocumentReader
from ..record_types import Field, RecordGroup

__all__ = [
    "Field",
    "RecordGroup",
    "XmlDocumentReader",
    "direct_text",
    "local_name",
    "sanitize_xml",
]
