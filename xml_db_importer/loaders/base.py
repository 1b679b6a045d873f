"""
Database connection and transaction handling.

The driver is picked from the DB_URL scheme: PyMySQL for MySQL/MariaDB,
psycopg for PostgreSQL. Both use the pyformat paramstyle, so the same
statements and parameter dicts work on either.
"""
from __future__ import annotations
from typing import Any, Optional
from urllib.parse import unquote, urlsplit

import psycopg
import pymysql
from loguru import logger

from ..config import ImporterConfig
from ..errors import ConfigError, DatabaseConnectionError, ExecutionError

DRIVER_ERRORS = (psycopg.Error, pymysql.MySQLError)


def _mysql_connect_args(config: ImporterConfig) -> dict:
    url = urlsplit(config.db_url)
    try:
        port = url.port
    except ValueError as e:
        raise ConfigError(f"Invalid DB_URL port: {e}") from e
    return {
        "host": url.hostname or "localhost",
        "port": port or 3306,
        "user": unquote(url.username or "root"),
        "password": unquote(url.password or ""),
        "database": unquote(url.path.lstrip("/")) or None,
        "charset": config.db_charset,
        "autocommit": False,
    }


def get_connection(config: Optional[ImporterConfig] = None):
    """
    Create a database connection with autocommit off.

    Raises:
        ConfigError: If the DB_URL scheme is not supported or the URL is malformed
        DatabaseConnectionError: If the server cannot be reached or refuses us
    """
    config = config or ImporterConfig.from_env()
    dialect = config.dialect
    try:
        if dialect == "mysql":
            return pymysql.connect(**_mysql_connect_args(config))
        if dialect == "postgresql":
            return psycopg.connect(config.db_url, autocommit=False)
    except DRIVER_ERRORS as e:
        raise DatabaseConnectionError(str(e)) from e
    raise ConfigError(f"Unsupported DB_URL: {config.db_url}")


class DatabaseLoader:
    """
    Owns the connection used by one import run.

    Provides:
    - Lazy connection creation
    - Explicit begin/commit/rollback
    - Statement execution with driver errors mapped to ExecutionError
    """

    def __init__(self, config: Optional[ImporterConfig] = None, conn=None):
        self.config = config or ImporterConfig.from_env()
        self.dialect = self.config.dialect
        self._conn = conn

    @property
    def conn(self):
        """Get or create database connection."""
        if self._conn is None:
            self._conn = get_connection(self.config)
            logger.debug(f"Connected to {self.dialect} database")
        return self._conn

    def connect(self):
        """Open the connection now so connection errors surface before any work."""
        return self.conn

    def close(self):
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def begin(self):
        """Start a transaction."""
        # psycopg opens one implicitly on the first statement
        if self.dialect == "mysql":
            self.conn.begin()
        logger.debug("Transaction started")

    def commit(self):
        try:
            self.conn.commit()
        except DRIVER_ERRORS as e:
            raise ExecutionError(f"Commit failed: {e}") from e
        logger.debug("Transaction committed")

    def rollback(self):
        self.conn.rollback()
        logger.debug("Transaction rolled back")

    def execute(self, sql: str, params: Optional[dict[str, Any]] = None) -> int:
        """
        Execute one statement and return the driver's affected row count.

        Raises:
            ExecutionError: If the driver rejects or fails the statement
        """
        try:
            with self.conn.cursor() as cur:
                cur.execute(sql, params)
                return max(cur.rowcount, 0)
        except DRIVER_ERRORS as e:
            raise ExecutionError(str(e)) from e
