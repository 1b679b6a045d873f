"""
Generic upsert statement generation.

Builds one ``INSERT ... ON DUPLICATE KEY UPDATE`` (MySQL) or
``INSERT ... ON CONFLICT`` (PostgreSQL) statement for any table from the
column names found in the document. Columns named ``ID_*`` are keys: they
are inserted but never overwritten on conflict.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

KEY_PREFIX = "id_"

PLAIN_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

QUOTE_CHARS = {
    "mysql": "`",
    "postgresql": '"',
}


def is_key_column(column: str) -> bool:
    """True for identifier-marker columns (``ID_`` prefix, any case)."""
    return column.lower().startswith(KEY_PREFIX)


def quote_identifier(name: str, dialect: str = "mysql") -> str:
    """
    Quote a table or column name for the given dialect.

    Embedded quote characters are doubled, and so is ``%`` because the
    statement goes through a pyformat driver.
    """
    try:
        q = QUOTE_CHARS[dialect]
    except KeyError:
        raise ValueError(f"Unsupported dialect: {dialect}") from None
    escaped = name.replace(q, q + q).replace("%", "%%")
    return f"{q}{escaped}{q}"


def _placeholder_names(columns: Sequence[str]) -> tuple[str, ...]:
    names = []
    for i, col in enumerate(columns):
        names.append(col if PLAIN_NAME_RE.match(col) else f"col{i}")
    # A plain column could already be called col<N>
    if len(set(names)) != len(names):
        names = [f"col{i}" for i in range(len(columns))]
    return tuple(names)


@dataclass(frozen=True)
class UpsertStatement:
    """SQL text plus the named placeholders it expects, in column order."""

    table: str
    columns: tuple[str, ...]
    placeholders: tuple[str, ...]
    sql: str

    @property
    def display_sql(self) -> str:
        """SQL as a person would read it, with the pyformat ``%%`` escapes undone."""
        return self.sql.replace("%%", "%")

    @property
    def update_columns(self) -> tuple[str, ...]:
        return tuple(c for c in self.columns if not is_key_column(c))

    def bind(self, values: dict[str, Any]) -> dict[str, Any]:
        """Map column values onto placeholder names. Missing columns bind NULL."""
        return {ph: values.get(col) for col, ph in zip(self.columns, self.placeholders)}


def build_upsert(table: str, columns: Sequence[str], dialect: str = "mysql") -> UpsertStatement:
    """
    Build an upsert statement for ``table`` with ``columns``.

    MySQL:
        INSERT INTO `t` (`a`, `b`) VALUES (%(a)s, %(b)s)
        ON DUPLICATE KEY UPDATE `b` = VALUES(`b`)

    PostgreSQL (conflict target is the first ID_ column):
        INSERT INTO "t" ("a", "b") VALUES (%(a)s, %(b)s)
        ON CONFLICT ("a") DO UPDATE SET "b" = EXCLUDED."b"

    The ON DUPLICATE / ON CONFLICT part is left out when nothing can be
    updated (MySQL) or when there is no key column (PostgreSQL).
    """
    columns = tuple(columns)
    if not columns:
        raise ValueError(f"No columns given for table {table}")
    if dialect not in QUOTE_CHARS:
        raise ValueError(f"Unsupported dialect: {dialect}")

    placeholders = _placeholder_names(columns)

    def q(name: str) -> str:
        return quote_identifier(name, dialect)

    columns_str = ", ".join(q(c) for c in columns)
    values_str = ", ".join(f"%({p})s" for p in placeholders)
    sql = f"INSERT INTO {q(table)} ({columns_str}) VALUES ({values_str})"

    update_cols = [c for c in columns if not is_key_column(c)]

    if dialect == "mysql":
        if update_cols:
            sql += " ON DUPLICATE KEY UPDATE " + ", ".join(
                f"{q(c)} = VALUES({q(c)})" for c in update_cols
            )
    else:
        conflict_key: Optional[str] = next((c for c in columns if is_key_column(c)), None)
        if conflict_key is not None:
            if update_cols:
                sql += f" ON CONFLICT ({q(conflict_key)}) DO UPDATE SET " + ", ".join(
                    f"{q(c)} = EXCLUDED.{q(c)}" for c in update_cols
                )
            else:
                sql += f" ON CONFLICT ({q(conflict_key)}) DO NOTHING"

    return UpsertStatement(table=table, columns=columns, placeholders=placeholders, sql=sql)
