"""
Main entry point for running xml_db_importer as a module.

Usage:
    python -m xml_db_importer [xml_file] [--dry-run] [-v]
"""
import sys
from .importer import main

if __name__ == "__main__":
    sys.exit(main())
