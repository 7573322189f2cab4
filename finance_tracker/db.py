"""SQLite-backed transaction, budget and profile stores.

Every query is scoped to a ``user_id``.  Connections are opened per
operation through :func:`connect` and closed when the block exits.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Union

import pandas as pd

from .config import DB_PATH
from .exceptions import RecordNotFoundError, StoreError
from .models import Budget, Transaction

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    date TEXT,
    amount REAL NOT NULL DEFAULT 0,
    category TEXT,
    description TEXT,
    type TEXT NOT NULL,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_txn_user_date ON transactions (user_id, date);

CREATE TABLE IF NOT EXISTS budgets (
    user_id TEXT NOT NULL,
    category TEXT NOT NULL,
    amount REAL NOT NULL DEFAULT 0,
    purpose TEXT,
    description TEXT,
    updated_at TEXT,
    PRIMARY KEY (user_id, category)
);

CREATE TABLE IF NOT EXISTS profiles (
    user_id TEXT PRIMARY KEY,
    currency TEXT NOT NULL,
    updated_at TEXT
);
"""

TRANSACTION_COLUMNS = ['id', 'date', 'amount', 'category', 'description', 'type']
BUDGET_COLUMNS = ['category', 'amount', 'purpose', 'description']


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@contextmanager
def connect(db_path: Optional[PathLike] = None) -> Iterator[sqlite3.Connection]:
    target = Path(db_path) if db_path else DB_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        conn = sqlite3.connect(str(target))
    except sqlite3.Error as exc:
        raise StoreError(f"Could not open database {target}: {exc}") from exc
    try:
        yield conn
    except sqlite3.Error as exc:
        raise StoreError(str(exc)) from exc
    finally:
        conn.close()


def init_db(db_path: Optional[PathLike] = None) -> None:
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()


def _read_frame(db_path: Optional[PathLike], sql: str, params: List[object]) -> pd.DataFrame:
    with connect(db_path) as conn:
        try:
            return pd.read_sql_query(sql, conn, params=params)
        except pd.errors.DatabaseError as exc:
            raise StoreError(str(exc)) from exc


class TransactionStore:
    """Create, read, update and delete a user's transactions."""

    def __init__(self, db_path: Optional[PathLike] = None):
        self.db_path = Path(db_path) if db_path else DB_PATH
        init_db(self.db_path)

    def load(self, user_id: str) -> List[Transaction]:
        """All of ``user_id``'s transactions, newest first."""
        sql = (
            f"SELECT {', '.join(TRANSACTION_COLUMNS)} FROM transactions "
            "WHERE user_id = ? ORDER BY date DESC, created_at DESC"
        )
        df = _read_frame(self.db_path, sql, [user_id])
        if df.empty:
            return []
        df = df.astype(object).where(df.notna(), None)
        return [Transaction.from_record(row) for row in df.to_dict('records')]

    def create(self, transaction: Transaction, user_id: str) -> Transaction:
        """Insert ``transaction`` under a fresh id and return the stored copy."""
        stored = replace(transaction, id=uuid.uuid4().hex)
        with connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO transactions (id, user_id, date, amount, category, description, type, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    stored.id,
                    user_id,
                    stored.date,
                    float(stored.amount),
                    stored.category,
                    stored.description,
                    stored.type,
                    _now(),
                ),
            )
            conn.commit()
        logger.debug("Created transaction %s for user %s", stored.id, user_id)
        return stored

    def update(self, transaction: Transaction, user_id: str) -> None:
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE transactions SET date = ?, amount = ?, category = ?, description = ?, type = ? "
                "WHERE id = ? AND user_id = ?",
                (
                    transaction.date,
                    float(transaction.amount),
                    transaction.category,
                    transaction.description,
                    transaction.type,
                    transaction.id,
                    user_id,
                ),
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise RecordNotFoundError(f"Transaction {transaction.id!r} not found")

    def delete(self, transaction_id: str, user_id: str) -> None:
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE id = ? AND user_id = ?",
                (transaction_id, user_id),
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise RecordNotFoundError(f"Transaction {transaction_id!r} not found")


class BudgetStore:
    """A user's budgets, keyed by category."""

    def __init__(self, db_path: Optional[PathLike] = None):
        self.db_path = Path(db_path) if db_path else DB_PATH
        init_db(self.db_path)

    def load(self, user_id: str) -> List[Budget]:
        sql = (
            f"SELECT {', '.join(BUDGET_COLUMNS)} FROM budgets "
            "WHERE user_id = ? ORDER BY category"
        )
        df = _read_frame(self.db_path, sql, [user_id])
        if df.empty:
            return []
        df = df.astype(object).where(df.notna(), None)
        return [Budget.from_record(row) for row in df.to_dict('records')]

    def upsert(self, budget: Budget, user_id: str) -> Budget:
        """Insert ``budget`` or overwrite the existing one for its category."""
        with connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO budgets (user_id, category, amount, purpose, description, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(user_id, category) DO UPDATE SET "
                "amount = excluded.amount, purpose = excluded.purpose, "
                "description = excluded.description, updated_at = excluded.updated_at",
                (
                    user_id,
                    budget.category,
                    float(budget.amount),
                    budget.purpose,
                    budget.description,
                    _now(),
                ),
            )
            conn.commit()
        return budget

    def update(self, budget: Budget, user_id: str) -> None:
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE budgets SET amount = ?, purpose = ?, description = ?, updated_at = ? "
                "WHERE user_id = ? AND category = ?",
                (float(budget.amount), budget.purpose, budget.description, _now(), user_id, budget.category),
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise RecordNotFoundError(f"Budget for {budget.category!r} not found")

    def delete(self, category: str, user_id: str) -> None:
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM budgets WHERE user_id = ? AND category = ?",
                (user_id, category),
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise RecordNotFoundError(f"Budget for {category!r} not found")


class ProfileStore:
    """Per-user display preferences.  Only the currency code is kept."""

    def __init__(self, db_path: Optional[PathLike] = None):
        self.db_path = Path(db_path) if db_path else DB_PATH
        init_db(self.db_path)

    def get_currency(self, user_id: str, default: str) -> str:
        with connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT currency FROM profiles WHERE user_id = ?", (user_id,)
            ).fetchone()
        if row is None or not row[0]:
            return default
        return str(row[0]).upper()

    def set_currency(self, user_id: str, currency: str) -> None:
        with connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO profiles (user_id, currency, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(user_id) DO UPDATE SET "
                "currency = excluded.currency, updated_at = excluded.updated_at",
                (user_id, currency.upper(), _now()),
            )
            conn.commit()
        logger.debug("Saved currency %s for user %s", currency, user_id)
