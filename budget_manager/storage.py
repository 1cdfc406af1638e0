"""Durable record store for the ledger.

``Budgeting`` writes every mutation through a ``LedgerStore`` before it
touches its in-memory state, so nothing a caller sees can be lost. Records
are passed in with ``id == 0`` and come back with the id the store assigned;
ids are never reused.
"""

from __future__ import annotations

import itertools
import logging
import sqlite3
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from budget_manager import config
from budget_manager.domain import Budget, Category, Transaction, Transfer
from budget_manager.errors import StoreError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    initial_amount REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    budget_id INTEGER NOT NULL REFERENCES budgets (id),
    name TEXT NOT NULL,
    allocated REAL NOT NULL,
    UNIQUE (budget_id, name)
);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    category_id INTEGER NOT NULL REFERENCES categories (id),
    amount REAL NOT NULL,
    payee TEXT NOT NULL DEFAULT '',
    note TEXT NOT NULL DEFAULT '',
    date_created TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS transfers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    from_category_id INTEGER NOT NULL REFERENCES categories (id),
    to_category_id INTEGER NOT NULL REFERENCES categories (id),
    amount REAL NOT NULL,
    date_created TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_categories_budget ON categories (budget_id);
CREATE INDEX IF NOT EXISTS ix_transactions_category ON transactions (category_id);
"""


class LedgerStore(Protocol):
    def add_budget(
        self, budget: Budget, categories: Sequence[Category]
    ) -> Tuple[Budget, List[Category]]:
        """Persist a budget and its initial categories in one write."""
        ...

    def find_budget(self, name: str) -> Optional[Budget]: ...

    def list_budgets(self) -> List[Budget]: ...

    def add_category(self, category: Category) -> Category: ...

    def list_categories(self, budget_id: int) -> List[Category]: ...

    def add_transaction(self, transaction: Transaction) -> Transaction: ...

    def list_transactions(self, budget_id: int) -> List[Transaction]: ...

    def add_transfer(self, transfer: Transfer) -> Transfer: ...

    def list_transfers(self, budget_id: int) -> List[Transfer]: ...


def _check_new(obj) -> None:
    if getattr(obj, 'id', None) != 0:
        raise ValueError(f'Trying to add object {obj} with filled `id` attribute')


class InMemoryStore:
    """A ``LedgerStore`` that lives and dies with the process."""

    def __init__(self):
        self._ids = itertools.count(1)
        self._budgets: List[Budget] = []
        self._categories: List[Category] = []
        self._transactions: List[Transaction] = []
        self._transfers: List[Transfer] = []

    def add_budget(self, budget, categories):
        _check_new(budget)
        for c in categories:
            _check_new(c)
        if self.find_budget(budget.name) is not None:
            raise ValueError(f'Budget {budget.name!r} is already stored')
        stored = replace(budget, id=next(self._ids))
        stored_categories = [
            replace(c, id=next(self._ids), budget_id=stored.id) for c in categories
        ]
        self._budgets.append(stored)
        self._categories.extend(stored_categories)
        return stored, stored_categories

    def find_budget(self, name):
        return next((b for b in self._budgets if b.name == name), None)

    def list_budgets(self):
        return list(self._budgets)

    def add_category(self, category):
        _check_new(category)
        stored = replace(category, id=next(self._ids))
        self._categories.append(stored)
        return stored

    def list_categories(self, budget_id):
        return [c for c in self._categories if c.budget_id == budget_id]

    def _category_ids(self, budget_id: int) -> set[int]:
        return {c.id for c in self.list_categories(budget_id)}

    def add_transaction(self, transaction):
        _check_new(transaction)
        stored = replace(transaction, id=next(self._ids))
        self._transactions.append(stored)
        return stored

    def list_transactions(self, budget_id):
        ids = self._category_ids(budget_id)
        return [t for t in self._transactions if t.category_id in ids]

    def add_transfer(self, transfer):
        _check_new(transfer)
        stored = replace(transfer, id=next(self._ids))
        self._transfers.append(stored)
        return stored

    def list_transfers(self, budget_id):
        ids = self._category_ids(budget_id)
        return [t for t in self._transfers if t.to_category_id in ids]


class SQLiteStore:
    """A ``LedgerStore`` backed by an SQLite connection.

    Each ``add_*`` runs in its own transaction and is committed before the
    method returns. The connection must have been migrated with
    ``run_migrations``.
    """

    DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def _date(self, value: datetime) -> str:
        return value.strftime(self.DATE_FORMAT)

    def _parse_date(self, value: str) -> datetime:
        return datetime.strptime(value, self.DATE_FORMAT)

    def add_budget(self, budget, categories):
        _check_new(budget)
        for c in categories:
            _check_new(c)
        with self._conn:
            cur = self._conn.execute(
                'INSERT INTO budgets (name, initial_amount) VALUES (?, ?)',
                (budget.name, budget.initial_amount),
            )
            stored = replace(budget, id=cur.lastrowid)
            stored_categories = []
            for c in categories:
                stored_categories.append(self._insert_category(replace(c, budget_id=stored.id)))
        logger.debug("Stored budget %r with id %d", stored.name, stored.id)
        return stored, stored_categories

    def find_budget(self, name):
        row = self._conn.execute(
            'SELECT id, name, initial_amount FROM budgets WHERE name = ?', (name,)
        ).fetchone()
        return None if row is None else Budget(*row)

    def list_budgets(self):
        rows = self._conn.execute(
            'SELECT id, name, initial_amount FROM budgets ORDER BY id'
        ).fetchall()
        return [Budget(*row) for row in rows]

    def _insert_category(self, category: Category) -> Category:
        cur = self._conn.execute(
            'INSERT INTO categories (budget_id, name, allocated) VALUES (?, ?, ?)',
            (category.budget_id, category.name, category.allocated),
        )
        return replace(category, id=cur.lastrowid)

    def add_category(self, category):
        _check_new(category)
        with self._conn:
            return self._insert_category(category)

    def list_categories(self, budget_id):
        rows = self._conn.execute(
            'SELECT id, budget_id, name, allocated FROM categories '
            'WHERE budget_id = ? ORDER BY id',
            (budget_id,),
        ).fetchall()
        return [Category(*row) for row in rows]

    def add_transaction(self, transaction):
        _check_new(transaction)
        with self._conn:
            cur = self._conn.execute(
                'INSERT INTO transactions (category_id, amount, payee, note, date_created) '
                'VALUES (?, ?, ?, ?, ?)',
                (
                    transaction.category_id,
                    transaction.amount,
                    transaction.payee,
                    transaction.note,
                    self._date(transaction.date_created),
                ),
            )
        return replace(transaction, id=cur.lastrowid)

    def list_transactions(self, budget_id):
        rows = self._conn.execute(
            'SELECT t.id, t.category_id, t.amount, t.payee, t.note, t.date_created '
            'FROM transactions t JOIN categories c ON t.category_id = c.id '
            'WHERE c.budget_id = ? ORDER BY t.id',
            (budget_id,),
        ).fetchall()
        return [
            Transaction(
                id=row[0],
                category_id=row[1],
                amount=row[2],
                payee=row[3],
                note=row[4],
                date_created=self._parse_date(row[5]),
            )
            for row in rows
        ]

    def add_transfer(self, transfer):
        _check_new(transfer)
        with self._conn:
            cur = self._conn.execute(
                'INSERT INTO transfers (from_category_id, to_category_id, amount, date_created) '
                'VALUES (?, ?, ?, ?)',
                (
                    transfer.from_category_id,
                    transfer.to_category_id,
                    transfer.amount,
                    self._date(transfer.date_created),
                ),
            )
        return replace(transfer, id=cur.lastrowid)

    def list_transfers(self, budget_id):
        rows = self._conn.execute(
            'SELECT t.id, t.from_category_id, t.to_category_id, t.amount, t.date_created '
            'FROM transfers t JOIN categories c ON t.to_category_id = c.id '
            'WHERE c.budget_id = ? ORDER BY t.id',
            (budget_id,),
        ).fetchall()
        return [
            Transfer(
                id=row[0],
                from_category_id=row[1],
                to_category_id=row[2],
                amount=row[3],
                date_created=self._parse_date(row[4]),
            )
            for row in rows
        ]


def establish_connection(path: str | Path | None = None) -> sqlite3.Connection:
    """Open the ledger database, ``config.DB_PATH`` unless ``path`` is given."""
    if path is None:
        config.ensure_data_directories()
        path = config.DB_PATH
    try:
        conn = sqlite3.connect(str(path))
        conn.execute('PRAGMA foreign_keys = ON')
    except sqlite3.Error as e:
        raise StoreError(f"Cannot open ledger database {path}: {e}") from e
    logger.debug("Connected to ledger database %s", path)
    return conn


def run_migrations(conn: sqlite3.Connection) -> None:
    """Create the schema if needed. Safe to call on every start-up."""
    try:
        (version,) = conn.execute('PRAGMA user_version').fetchone()
        if version > SCHEMA_VERSION:
            raise StoreError(
                f"Ledger database schema {version} is newer than supported {SCHEMA_VERSION}"
            )
        conn.executescript(SCHEMA_SQL)
        conn.execute(f'PRAGMA user_version = {SCHEMA_VERSION}')
        conn.commit()
    except sqlite3.Error as e:
        raise StoreError(f"Ledger database migration failed: {e}") from e
    logger.debug("Ledger schema at version %d", SCHEMA_VERSION)
