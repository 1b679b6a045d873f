#!/usr/bin/env python3
"""
Convenience script to import an XML dataset.

Usage:
    # Import XML_FILE (default dataset.xml) into DB_URL
    python run_xml_import.py

    # Import a specific file
    python run_xml_import.py path/to/dataset.xml

    # Print the statements only
    python run_xml_import.py --dry-run
"""
import sys
from xml_db_importer.importer import main

if __name__ == "__main__":
    sys.exit(main())
