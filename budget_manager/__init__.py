"""Envelope-budgeting ledger engine.

Typical start-up for a host application::

    conn = establish_connection()
    run_migrations(conn)
    budgeting = open_budget(SQLiteStore(conn))

``reports`` needs pandas and is not imported here.
"""

from budget_manager.budgeting import Budgeting, LedgerState, open_budget
from budget_manager.builder import TransactionBuilder
from budget_manager.domain import (
    DEFAULT_CATEGORY,
    UNALLOCATED_CATEGORY,
    Budget,
    Category,
    Transaction,
    Transfer,
)
from budget_manager.errors import (
    AlreadyFunded,
    BudgetAlreadyExists,
    BudgetingError,
    BudgetNotFound,
    CategoryAlreadyExists,
    CategoryNotFound,
    InvalidBudget,
    InvalidCategory,
    InvalidTransaction,
    OverFundingError,
    StoreError,
)
from budget_manager.events import EventBus
from budget_manager.functional import Either, Left, Maybe, Nothing, Right, Some
from budget_manager.models import CategoryModel, SummaryData, TransactionModel
from budget_manager.storage import (
    InMemoryStore,
    LedgerStore,
    SQLiteStore,
    establish_connection,
    run_migrations,
)

__all__ = [
    "Budgeting", "LedgerState", "open_budget", "TransactionBuilder",
    "DEFAULT_CATEGORY", "UNALLOCATED_CATEGORY",
    "Budget", "Category", "Transaction", "Transfer",
    "BudgetingError", "BudgetNotFound", "BudgetAlreadyExists", "InvalidBudget",
    "CategoryNotFound", "CategoryAlreadyExists", "InvalidCategory",
    "AlreadyFunded", "OverFundingError", "InvalidTransaction", "StoreError",
    "EventBus", "Either", "Left", "Right", "Maybe", "Some", "Nothing",
    "CategoryModel", "SummaryData", "TransactionModel",
    "LedgerStore", "InMemoryStore", "SQLiteStore",
    "establish_connection", "run_migrations",
]
