"""SQLite datastore for budget documents.

Each budget is one row in the ``budgets`` table. The category tree lives in
a JSON-encoded ``categories`` column so that it is written and replaced as a
whole together with the rest of the budget.
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, NoReturn, Optional, Sequence, Union

from .config import DB_PATH, ensure_data_directories
from .errors import SchemaMismatchError, StorageError

logger = logging.getLogger(__name__)

TABLE = 'budgets'

# Columns every deployment has had since the first release.
BASE_COLUMNS = ('id', 'owner', 'name', 'amount', 'start_date', 'end_date')

# Columns added by later migrations, in the order they were introduced.
OPTIONAL_COLUMNS = (
    ('created_at', 'TEXT'),
    ('categories', 'TEXT'),
)

JSON_COLUMNS = {'categories'}

BUDGET_COLUMNS = BASE_COLUMNS + tuple(name for name, _ in OPTIONAL_COLUMNS)

# What reads fetch; created_at is bookkeeping and never returned by select.
READ_COLUMNS = BASE_COLUMNS + ('categories',)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS budgets (
    id TEXT PRIMARY KEY,
    owner TEXT NOT NULL,
    name TEXT,
    amount REAL NOT NULL DEFAULT 0,
    start_date TEXT NOT NULL,
    end_date TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_budgets_owner_start ON budgets (owner, start_date);
"""

_MISSING_COLUMN_PATTERNS = (
    re.compile(r"no such column: (?:\w+\.)?(\w+)"),
    re.compile(r"has no column named (\w+)"),
)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def missing_column(error: sqlite3.Error) -> Optional[str]:
    """Return the column name an OperationalError complains about, if any."""
    if not isinstance(error, sqlite3.OperationalError):
        return None
    message = str(error)
    for pattern in _MISSING_COLUMN_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


@contextmanager
def connect(db_path: Union[str, Path, None] = None) -> Iterator[sqlite3.Connection]:
    if db_path is None:
        ensure_data_directories()
        db_path = DB_PATH
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Union[str, Path, None] = None, include_categories: bool = True) -> None:
    """Create the budgets table and bring older databases up to date.

    ``include_categories=False`` leaves the JSON column out, which is what
    databases created before category trees existed look like.
    """
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
        _migrate_database(conn, include_categories=include_categories)


def _migrate_database(conn: sqlite3.Connection, include_categories: bool = True) -> None:
    """Add new columns to existing database if they don't exist."""
    cursor = conn.cursor()
    cursor.execute(f"PRAGMA table_info({TABLE})")
    existing_columns = [row[1] for row in cursor.fetchall()]

    for column_name, column_type in OPTIONAL_COLUMNS:
        if column_name == 'categories' and not include_categories:
            continue
        if column_name not in existing_columns:
            try:
                cursor.execute(f"ALTER TABLE {TABLE} ADD COLUMN {column_name} {column_type}")
                logger.info("Added column %s to %s table", column_name, TABLE)
            except sqlite3.OperationalError as e:
                if "duplicate column name" not in str(e):
                    raise StorageError(f"Failed to add column {column_name}: {e}", operation='migrate') from e

    conn.commit()


def table_columns(db_path: Union[str, Path, None] = None) -> List[str]:
    with connect(db_path) as conn:
        rows = conn.execute(f"PRAGMA table_info({TABLE})").fetchall()
    return [row[1] for row in rows]


def _check_identifiers(columns: Sequence[str]) -> None:
    for column in columns:
        if not _IDENTIFIER.match(column):
            raise ValueError(f"Invalid column name: {column!r}")


def _encode(column: str, value: Any) -> Any:
    if column in JSON_COLUMNS and value is not None:
        return json.dumps(value)
    return value


def _decode_row(row: sqlite3.Row) -> Dict[str, Any]:
    record = dict(row)
    for column in JSON_COLUMNS:
        if column not in record:
            continue
        raw = record[column]
        if raw is None or raw == '':
            record[column] = []
            continue
        try:
            record[column] = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Could not decode %s for budget %s: %s", column, record.get('id'), e)
            record[column] = []
    return record


class BudgetStore:
    """Owner-scoped select/insert/update/delete over the ``budgets`` table.

    Every sqlite failure is translated: a reference to a column the table
    does not have becomes :class:`SchemaMismatchError`, anything else
    becomes :class:`StorageError`.
    """

    def __init__(self, db_path: Union[str, Path, None] = None) -> None:
        self.db_path = db_path

    def _run(self, operation: str, sql: str, params: Sequence[Any]) -> _Result:
        try:
            with connect(self.db_path) as conn:
                cursor = conn.execute(sql, tuple(params))
                rows = cursor.fetchall()
                conn.commit()
                return _Result(rows, cursor.rowcount)
        except sqlite3.Error as e:
            self._raise_translated(operation, e)

    @staticmethod
    def _raise_translated(operation: str, error: sqlite3.Error) -> NoReturn:
        column = missing_column(error)
        if column is not None:
            raise SchemaMismatchError(column, operation=operation) from error
        logger.error("Error during budget %s: %s", operation, error)
        raise StorageError(f"Failed to {operation} budget: {error}", operation=operation) from error

    def select(
        self,
        owner: str,
        columns: Sequence[str] = READ_COLUMNS,
        budget_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch the owner's budgets, most recent ``start_date`` first."""
        _check_identifiers(columns)
        sql = f"SELECT {', '.join(columns)} FROM {TABLE} WHERE owner = ?"
        params: List[Any] = [owner]
        if budget_id is not None:
            sql += " AND id = ?"
            params.append(budget_id)
        sql += " ORDER BY start_date DESC, rowid DESC"
        result = self._run('select', sql, params)
        return [_decode_row(row) for row in result.rows]

    def insert(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a budget row and return it as stored.

        ``id`` is assigned here when not supplied; ``created_at`` is stamped
        when the table has that column.
        """
        record = dict(values)
        record.setdefault('id', str(uuid.uuid4()))
        try:
            with connect(self.db_path) as conn:
                columns = list(record)
                if 'created_at' not in record:
                    existing = {row[1] for row in conn.execute(f"PRAGMA table_info({TABLE})")}
                    if 'created_at' in existing:
                        record['created_at'] = datetime.now(timezone.utc).isoformat()
                        columns.append('created_at')
                _check_identifiers(columns)
                placeholders = ', '.join('?' for _ in columns)
                sql = f"INSERT INTO {TABLE} ({', '.join(columns)}) VALUES ({placeholders})"
                conn.execute(sql, [_encode(c, record[c]) for c in columns])
                conn.commit()
                row = conn.execute(f"SELECT * FROM {TABLE} WHERE id = ?", (record['id'],)).fetchone()
        except sqlite3.Error as e:
            self._raise_translated('insert', e)
        if row is None:
            raise StorageError(f"Budget {record['id']} missing after insert", operation='insert')
        return _decode_row(row)

    def update(self, owner: str, budget_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Replace the supplied fields; ``None`` when the owner has no such budget."""
        if not values:
            rows = self.select(owner, BASE_COLUMNS, budget_id=budget_id)
            return self._fetch_by_id(budget_id) if rows else None
        columns = list(values)
        _check_identifiers(columns)
        assignments = ', '.join(f"{c} = ?" for c in columns)
        sql = f"UPDATE {TABLE} SET {assignments} WHERE id = ? AND owner = ?"
        params = [_encode(c, values[c]) for c in columns] + [budget_id, owner]
        result = self._run('update', sql, params)
        if result.rowcount == 0:
            return None
        return self._fetch_by_id(budget_id)

    def delete(self, owner: str, budget_id: str) -> int:
        """Delete the owner's budget and return the number of rows removed."""
        result = self._run('delete', f"DELETE FROM {TABLE} WHERE id = ? AND owner = ?", [budget_id, owner])
        return max(result.rowcount, 0)

    def _fetch_by_id(self, budget_id: str) -> Optional[Dict[str, Any]]:
        result = self._run('select', f"SELECT * FROM {TABLE} WHERE id = ?", [budget_id])
        if not result.rows:
            return None
        return _decode_row(result.rows[0])


class _Result:
    """Rows and rowcount captured before the connection is closed."""

    __slots__ = ('rows', 'rowcount')

    def __init__(self, rows: List[sqlite3.Row], rowcount: int) -> None:
        self.rows = rows
        self.rowcount = rowcount
