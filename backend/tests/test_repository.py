# backend/tests/test_repository.py
from tippool.db.repository import TipPoolRepository

EMPLOYEE_ID = "22222222-2222-2222-2222-222222222222"


class FakeCursor:
    def __init__(self, rows, rowcount=1):
        self.rows = list(rows)
        self.rowcount = rowcount
        self.executed = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def cursor(self):
        return self._cursor

    def commit(self):
        self.committed = True


def _repo_with(monkeypatch, cursor):
    conn = FakeConnection(cursor)
    monkeypatch.setattr("tippool.db.repository.psycopg.connect", lambda url: conn)
    return TipPoolRepository("postgresql://localhost/tippool"), conn


def test_create_employee_always_inserts(monkeypatch):
    cursor = FakeCursor([(EMPLOYEE_ID, "Sam")])
    repo, conn = _repo_with(monkeypatch, cursor)

    employee = repo.create_employee(owner_id="default", name="Sam")

    assert employee.id == EMPLOYEE_ID
    assert conn.committed is True
    sql, params = cursor.executed[0]
    assert sql.startswith("INSERT INTO employees")
    assert "ON CONFLICT" not in sql
    assert params == ("default", "Sam")


def test_rename_employee_is_owner_scoped(monkeypatch):
    cursor = FakeCursor([(EMPLOYEE_ID, "Dana")])
    repo, _conn = _repo_with(monkeypatch, cursor)

    employee = repo.rename_employee(owner_id="jane_doe", employee_id=EMPLOYEE_ID, name="Dana")

    assert employee.name == "Dana"
    sql, params = cursor.executed[0]
    assert sql.startswith("UPDATE employees SET name = %s WHERE owner_id = %s AND id = %s")
    assert params == ("Dana", "jane_doe", EMPLOYEE_ID)


def test_rename_missing_employee_returns_none(monkeypatch):
    repo, _conn = _repo_with(monkeypatch, FakeCursor([]))
    assert repo.rename_employee(owner_id="default", employee_id=EMPLOYEE_ID, name="Dana") is None


def test_delete_pay_period_reports_rowcount(monkeypatch):
    cursor = FakeCursor([], rowcount=0)
    repo, conn = _repo_with(monkeypatch, cursor)

    assert repo.delete_pay_period(owner_id="default", period_id=EMPLOYEE_ID) is False
    assert conn.committed is True
    sql, params = cursor.executed[0]
    assert sql.startswith("DELETE FROM pay_periods")
    assert params == ("default", EMPLOYEE_ID)


def test_schema_allows_repeated_names():
    from pathlib import Path

    schema = (Path(__file__).resolve().parents[1] / "schema.sql").read_text()
    assert "UNIQUE (owner_id, name)" not in schema
