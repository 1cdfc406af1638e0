import sqlite3
from datetime import datetime

import pytest

from budget_manager.budgeting import Budgeting, open_budget
from budget_manager.domain import DEFAULT_CATEGORY, UNALLOCATED_CATEGORY, Budget, Category
from budget_manager.errors import StoreError
from budget_manager.storage import (
    SCHEMA_VERSION, InMemoryStore, SQLiteStore, establish_connection, run_migrations,
)


def open_store(path):
    conn = establish_connection(path)
    run_migrations(conn)
    return SQLiteStore(conn)


def test_migrations_are_idempotent(tmp_path):
    conn = establish_connection(tmp_path / "ledger.db")
    run_migrations(conn)
    run_migrations(conn)
    (version,) = conn.execute("PRAGMA user_version").fetchone()
    assert version == SCHEMA_VERSION
    tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert {"budgets", "categories", "transactions", "transfers"} <= tables


def test_newer_schema_is_refused(tmp_path):
    conn = establish_connection(tmp_path / "ledger.db")
    conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
    with pytest.raises(StoreError):
        run_migrations(conn)


def test_unreachable_database(tmp_path):
    with pytest.raises(StoreError):
        establish_connection(tmp_path / "missing" / "ledger.db")


def test_ledger_survives_reopening(tmp_path):
    path = tmp_path / "ledger.db"
    budgeting = Budgeting(open_store(path))
    budgeting.new_budget("main", 100.0)
    budgeting.new_category("Groceries", 50.0)
    budgeting.fund_from_unallocated("Groceries").unwrap()
    when = datetime(2024, 2, 29, 18, 45, 12, 500)
    t = budgeting.new_transaction_to_category("Groceries") \
        .payee("Alice").note("lunch").expense(12.5).date_created(when).done().unwrap()

    reopened = open_budget(open_store(path), "main")

    assert [c.name for c in reopened.all_categories()] == [
        UNALLOCATED_CATEGORY, DEFAULT_CATEGORY, "Groceries",
    ]
    assert reopened.transactions() == [t]
    assert reopened.transfers() == budgeting.transfers()
    groceries = reopened.get_category_by_name("Groceries").get_or_else(None)
    assert reopened.category_model(groceries).balance == 37.5
    assert reopened.unallocated_balance() == 50.0


def test_budgets_are_kept_apart(tmp_path):
    store = open_store(tmp_path / "ledger.db")
    budgeting = Budgeting(store)
    budgeting.new_budget("home", 10.0)
    budgeting.new_transaction_to_category(DEFAULT_CATEGORY).income(3).done()
    budgeting.new_budget("trip", 10.0)

    assert budgeting.transactions() == []
    budgeting.set_current_budget("home")
    assert len(budgeting.transactions()) == 1
    assert [b.name for b in store.list_budgets()] == ["home", "trip"]


def test_duplicate_category_rejected_by_schema(tmp_path):
    store = open_store(tmp_path / "ledger.db")
    budget, _ = store.add_budget(Budget(0, "main", 0.0), [])
    store.add_category(Category(0, budget.id, "Food", 1.0))
    with pytest.raises(sqlite3.IntegrityError):
        store.add_category(Category(0, budget.id, "Food", 2.0))


def test_records_with_ids_are_refused():
    store = InMemoryStore()
    with pytest.raises(ValueError):
        store.add_budget(Budget(5, "main", 0.0), [])


def test_in_memory_ids_are_never_reused():
    store = InMemoryStore()
    budget, cats = store.add_budget(
        Budget(0, "main", 0.0), [Category(0, 0, UNALLOCATED_CATEGORY, 0.0)]
    )
    other = store.add_category(Category(0, budget.id, "Food", 1.0))
    ids = [budget.id, cats[0].id, other.id]
    assert len(set(ids)) == 3
    assert cats[0].budget_id == budget.id
