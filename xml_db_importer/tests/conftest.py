"""Shared fixtures for importer tests."""
from pathlib import Path
import pytest

from xml_db_importer.errors import ExecutionError

FIXTURES = Path(__file__).parent / "fixtures"


class FakeDatabase:
    """
    In-memory stand-in for DatabaseLoader.

    Executed statements are staged until commit; rollback discards them.
    ``fail_on`` makes the statement for that table raise ExecutionError.
    """

    def __init__(self, dialect="mysql", fail_on=None, rowcount=1):
        self.dialect = dialect
        self.fail_on = fail_on
        self.rowcount = rowcount
        self.calls = []
        self.executed = []
        self.committed = []
        self.in_transaction = False
        self.began = 0
        self.commits = 0
        self.rollbacks = 0

    def begin(self):
        assert not self.in_transaction, "transaction already open"
        self.in_transaction = True
        self.began += 1
        self.calls.append("begin")

    def execute(self, sql, params=None):
        assert self.in_transaction, "execute outside a transaction"
        self.calls.append("execute")
        if self.fail_on and f"INSERT INTO `{self.fail_on}`" in sql:
            raise ExecutionError("Duplicate entry '9' for key 'PRIMARY'")
        self.executed.append((sql, dict(params or {})))
        return self.rowcount

    def commit(self):
        self.calls.append("commit")
        self.committed.extend(self.executed)
        self.executed = []
        self.in_transaction = False
        self.commits += 1

    def rollback(self):
        self.calls.append("rollback")
        self.executed = []
        self.in_transaction = False
        self.rollbacks += 1

    def connect(self):
        self.calls.append("connect")

    def close(self):
        self.calls.append("close")


@pytest.fixture
def fixtures_dir():
    return FIXTURES


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove importer environment variables so defaults apply."""
    for name in ("XML_FILE", "XML_SANITIZE", "DB_URL", "DB_CHARSET", "LOG_LEVEL", "IMPORTER_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
