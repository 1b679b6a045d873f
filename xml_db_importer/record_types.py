from typing import Any, Optional, Protocol
from pydantic import BaseModel


class Field(BaseModel):
    name: str
    value: str = ""


class RecordGroup(BaseModel):
    name: str                    # target table
    fields: list[Field] = []

    def columns(self) -> list[str]:
        """Column names in document order, each listed once."""
        return list(dict.fromkeys(f.name for f in self.fields))


class ImportSummary(BaseModel):
    groups_processed: int = 0
    groups_skipped: int = 0
    rows_affected: int = 0       # driver rowcount: MySQL counts an update as 2
    tables: dict[str, int] = {}


class Database(Protocol):
    dialect: Optional[str]

    def begin(self) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def execute(self, sql: str, params: Optional[dict[str, Any]] = None) -> int: ...
