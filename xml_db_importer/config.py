"""
Configuration management for the XML importer.

Loads settings from environment variables (and a ``.env`` file) with
defaults matching a local MySQL install.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlsplit
from dotenv import load_dotenv
from loguru import logger

load_dotenv()

# URL scheme -> SQL dialect
DIALECTS = {
    "mysql": "mysql",
    "mysql+pymysql": "mysql",
    "mariadb": "mysql",
    "postgresql": "postgresql",
    "postgres": "postgresql",
}


def is_log_level(name: Optional[str]) -> bool:
    """True if loguru knows a level called ``name`` (any case)."""
    if not name:
        return False
    try:
        logger.level(name.upper())
    except ValueError:
        return False
    return True


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "y")


@dataclass
class ImporterConfig:
    """Configuration settings for the XML importer."""

    # Source document
    xml_file: str = field(default_factory=lambda: os.getenv("XML_FILE", "dataset.xml"))
    sanitize_xml: bool = field(default_factory=lambda: _env_flag("XML_SANITIZE"))

    # Target database
    db_url: str = field(
        default_factory=lambda: os.getenv(
            "DB_URL", "mysql://root:@localhost:3307/bd_autopsias"
        )
    )
    db_charset: str = field(default_factory=lambda: os.getenv("DB_CHARSET", "utf8mb4"))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(
        default_factory=lambda: os.getenv("IMPORTER_LOG_FILE")
    )

    @classmethod
    def from_env(cls) -> "ImporterConfig":
        """Create config from environment variables."""
        return cls()

    @property
    def dialect(self) -> Optional[str]:
        """SQL dialect implied by the DB_URL scheme, or None if unsupported."""
        if not self.db_url:
            return None
        return DIALECTS.get(urlsplit(self.db_url).scheme.lower())

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []
        if not self.xml_file:
            errors.append("XML_FILE is required")
        if not self.db_url:
            errors.append("DB_URL is required")
        elif self.dialect is None:
            scheme = urlsplit(self.db_url).scheme or "<none>"
            errors.append(
                f"DB_URL scheme '{scheme}' is not supported "
                f"(use one of: {', '.join(sorted(DIALECTS))})"
            )
        if not is_log_level(self.log_level):
            errors.append(f"LOG_LEVEL '{self.log_level}' is not a valid log level")
        return errors
