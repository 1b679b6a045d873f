"""
Import orchestration for the XML importer.

Reads every record group from the XML document and upserts it into the
table of the same name, all inside one transaction: either the whole
document is loaded or nothing is.
"""
from __future__ import annotations
import sys
from pathlib import Path
from typing import Any, Callable, Iterable, Optional
from loguru import logger

from .config import ImporterConfig, is_log_level
from .errors import (
    ConfigError,
    DatabaseConnectionError,
    ExecutionError,
    NotFoundError,
    ParseError,
)
from .loaders import DatabaseLoader, UpsertStatement, build_upsert
from .normalize import normalize_value
from .parsers import XmlDocumentReader
from .record_types import Database, ImportSummary, RecordGroup


def collect_values(
    group: RecordGroup,
    normalizer: Callable[[Any], Optional[str]] = normalize_value,
) -> tuple[list[str], dict[str, Optional[str]]]:
    """
    Columns and normalized values for one group.

    A repeated field keeps its first position and its last value.
    """
    values: dict[str, Optional[str]] = {}
    for f in group.fields:
        values[f.name] = normalizer(f.value)
    return list(values), values


def import_all(
    groups: Iterable[RecordGroup],
    db: Database,
    statement_builder: Callable[..., UpsertStatement] = build_upsert,
    normalizer: Callable[[Any], Optional[str]] = normalize_value,
) -> ImportSummary:
    """
    Upsert every record group inside a single transaction.

    Args:
        groups: Record groups in document order
        db: Open database (begin/commit/rollback/execute and ``dialect``)
        statement_builder: Builds the upsert for (table, columns, dialect=...)
        normalizer: Applied to every raw field value

    Returns:
        ImportSummary of the committed run

    Raises:
        ExecutionError: A statement failed; everything was rolled back
    """
    summary = ImportSummary()

    db.begin()
    try:
        for index, group in enumerate(groups):
            columns, values = collect_values(group, normalizer)
            if not columns:
                logger.debug(f"Skipping empty group #{index} <{group.name}>")
                summary.groups_skipped += 1
                continue

            stmt = statement_builder(group.name, columns, dialect=db.dialect)
            logger.debug(f"#{index} {group.name}: {stmt.sql}")
            try:
                rows = db.execute(stmt.sql, stmt.bind(values))
            except ExecutionError as e:
                raise ExecutionError(
                    f"{group.name} (group #{index}): {e}",
                    table=group.name,
                    group_index=index,
                ) from e

            summary.groups_processed += 1
            summary.rows_affected += rows or 0
            summary.tables[group.name] = summary.tables.get(group.name, 0) + 1

        db.commit()
    except BaseException as e:
        logger.warning(f"Rolling back import: {e}")
        try:
            db.rollback()
        except Exception as rollback_error:
            logger.error(f"Rollback failed: {rollback_error}")
        raise

    logger.info(
        f"Committed {summary.groups_processed} groups "
        f"({summary.rows_affected} rows affected, {summary.groups_skipped} skipped)"
    )
    return summary


class XmlImporter:
    """
    Wires configuration, document reader and database together.

    Usage:
        importer = XmlImporter()

        # Load everything in one transaction
        summary = importer.run()

        # Show the statements without touching the database
        importer.preview()
    """

    def __init__(
        self,
        config: Optional[ImporterConfig] = None,
        db: Optional[DatabaseLoader] = None,
    ):
        self.config = config or ImporterConfig.from_env()
        errors = self.config.validate()
        if errors:
            raise ConfigError("; ".join(errors))
        self.reader = XmlDocumentReader(self.config.xml_file, sanitize=self.config.sanitize_xml)
        self.db = db or DatabaseLoader(self.config)

    def run(self) -> ImportSummary:
        """
        Run the import.

        Connection and document errors are raised before the transaction
        starts.
        """
        self.db.connect()
        self.reader.load()
        return import_all(self.reader.groups(), self.db)

    def preview(self) -> list[tuple[str, dict]]:
        """
        Parse the document and return (sql, params) for every non-empty group.

        The SQL is the human-readable form, without driver escaping.
        """
        dialect = self.config.dialect
        statements = []
        for group in self.reader.groups():
            columns, values = collect_values(group)
            if not columns:
                continue
            stmt = build_upsert(group.name, columns, dialect=dialect)
            params = stmt.bind(values)
            logger.info(f"{stmt.display_sql} {params}")
            statements.append((stmt.display_sql, params))
        return statements

    def close(self):
        self.db.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Send loguru output to stderr at ``level`` and optionally to a file.

    The level is checked before the default sink is removed, so a bad
    level still leaves somewhere to report the error.
    """
    if not is_log_level(level):
        raise ConfigError(f"LOG_LEVEL '{level}' is not a valid log level")
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
    if log_file:
        logger.add(log_file, level="DEBUG", rotation="10 MB", retention=5)


def main(argv: Optional[list[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(
        description="Import an XML dataset into a MySQL or PostgreSQL database"
    )
    parser.add_argument(
        "xml_file",
        nargs="?",
        help="XML file to import (default: XML_FILE env var or dataset.xml)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse the file and print the statements without connecting",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args(argv)

    config = ImporterConfig.from_env()
    if args.xml_file:
        config.xml_file = args.xml_file

    try:
        setup_logging("DEBUG" if args.verbose else config.log_level, config.log_file)
        with XmlImporter(config) as importer:
            if args.dry_run:
                for sql, params in importer.preview():
                    print(sql)
                    print(f"  {params}")
                return 0

            summary = importer.run()

    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except DatabaseConnectionError as e:
        logger.error(f"Database connection failed: {e}")
        return 1
    except NotFoundError as e:
        logger.error(f"XML file not found: {Path(e.path)}")
        return 1
    except ParseError as e:
        logger.error("Error parsing XML:\n" + "\n".join(m.strip() for m in e.messages))
        return 1
    except ExecutionError as e:
        logger.error(f"Import failed, transaction rolled back: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Import failed: {e}")
        return 1

    print("Import completed successfully.")
    print(f"  groups processed: {summary.groups_processed}")
    print(f"  groups skipped:   {summary.groups_skipped}")
    print(f"  rows affected:    {summary.rows_affected}")
    for table, count in summary.tables.items():
        print(f"  {table}: {count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
