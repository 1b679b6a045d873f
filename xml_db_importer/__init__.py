"""
XML Database Importer - Load an XML dataset into a relational database.

Every top-level element of the XML file is a row for the table of the same
name, and each of its child elements is a column. All rows are upserted in
a single transaction, so a failure anywhere leaves the database untouched.

Key Features:
- Generic upsert for any table (MySQL and PostgreSQL)
- ID_* columns treated as keys and never overwritten
- Empty values stored as NULL, D/M/YYYY dates stored as ISO dates
- All-or-nothing import with rollback on the first failure

Usage:
    # Import the file named by XML_FILE into DB_URL
    python -m xml_db_importer

    # Import a specific file
    python -m xml_db_importer data/dataset.xml

    # Show the statements without touching the database
    python -m xml_db_importer --dry-run -v
"""

__version__ = "1.0.0"

from .config import ImporterConfig
from .importer import XmlImporter, import_all
from .record_types import ImportSummary

__all__ = ["ImporterConfig", "ImportSummary", "XmlImporter", "import_all", "__version__"]
