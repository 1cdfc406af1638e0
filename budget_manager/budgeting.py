"""The ledger engine.

``Budgeting`` is the only writer of ledger state. Every mutation is first
written to the ``LedgerStore`` and only then applied to the in-memory
``LedgerState``, so a failed write leaves nothing half-applied and a
successful one is durable by the time the method returns.

Domain failures are returned as ``Left(BudgetingError)``; store failures
raise.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Union

from budget_manager import config, transforms
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
)
from budget_manager.events import (
    BUDGET_CHANGED,
    CATEGORY_ADDED,
    FUNDS_TRANSFERRED,
    TRANSACTION_ADDED,
    EventBus,
)
from budget_manager.functional import (
    Either,
    Left,
    Maybe,
    Right,
    safe_category,
    safe_category_by_id,
)
from budget_manager.models import CategoryModel, SummaryData, TransactionModel
from budget_manager.money import money_sum, normalize
from budget_manager.storage import InMemoryStore, LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class LedgerState:
    """Everything loaded for the current budget."""

    budget: Optional[Budget] = None
    categories: List[Category] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)
    transfers: List[Transfer] = field(default_factory=list)


class Budgeting:

    def __init__(self, store: Optional[LedgerStore] = None, bus: Optional[EventBus] = None):
        self.store = store if store is not None else InMemoryStore()
        self.bus = bus if bus is not None else EventBus()
        self._state = LedgerState()

    # -- budgets ---------------------------------------------------------

    def new_budget(self, name: str, initial_amount: float) -> Either[BudgetingError, Budget]:
        """Create a budget with its Unallocated pool and default category, and select it."""
        name = name.strip()
        if not name:
            return Left(InvalidBudget("Budget name cannot be empty"))
        if not math.isfinite(initial_amount) or initial_amount < 0:
            return Left(InvalidBudget(f"Invalid initial amount {initial_amount} for {name!r}"))
        if self.store.find_budget(name) is not None:
            return Left(BudgetAlreadyExists(name))

        initial_amount = normalize(initial_amount)
        budget, categories = self.store.add_budget(
            Budget(id=0, name=name, initial_amount=initial_amount),
            [
                Category(id=0, budget_id=0, name=UNALLOCATED_CATEGORY, allocated=initial_amount),
                Category(id=0, budget_id=0, name=DEFAULT_CATEGORY, allocated=0.0),
            ],
        )
        self._state = LedgerState(budget=budget, categories=categories)
        logger.info("Created budget %r with %s unallocated", name, initial_amount)
        self.bus.publish(BUDGET_CHANGED, {"budget": name, "created": True})
        return Right(budget)

    def set_current_budget(self, name: str) -> Either[BudgetingError, Budget]:
        budget = self.store.find_budget(name)
        if budget is None:
            return Left(BudgetNotFound(name))

        self._state = LedgerState(
            budget=budget,
            categories=self.store.list_categories(budget.id),
            transactions=self.store.list_transactions(budget.id),
            transfers=self.store.list_transfers(budget.id),
        )
        logger.debug(
            "Loaded budget %r: %d categories, %d transactions, %d transfers",
            name,
            len(self._state.categories),
            len(self._state.transactions),
            len(self._state.transfers),
        )
        self.bus.publish(BUDGET_CHANGED, {"budget": name, "created": False})
        return Right(budget)

    def budgets(self) -> List[Budget]:
        return self.store.list_budgets()

    def current_budget(self) -> Optional[Budget]:
        return self._state.budget

    def _require_budget(self) -> Either[BudgetingError, Budget]:
        if self._state.budget is None:
            return Left(BudgetNotFound(None))
        return Right(self._state.budget)

    # -- categories ------------------------------------------------------

    def all_categories(self) -> List[Category]:
        return list(self._state.categories)

    def categories(self) -> List[Category]:
        """Categories a transaction can be posted to (everything but the pool)."""
        return [c for c in self._state.categories if not c.is_unallocated]

    def get_category_by_name(self, name: str) -> Maybe[Category]:
        return safe_category(self._state.categories, name)

    def new_category(self, name: str, allocated: float) -> Either[BudgetingError, Category]:
        name = name.strip()
        if not name:
            return Left(InvalidCategory("Category name cannot be empty"))
        if not math.isfinite(allocated) or allocated <= 0:
            return Left(InvalidCategory(f"Invalid allocation {allocated} for {name!r}"))
        return self._require_budget().bind(lambda budget: self._add_category(budget, name, allocated))

    def _add_category(self, budget: Budget, name: str, allocated: float) -> Either[BudgetingError, Category]:
        if self.get_category_by_name(name).is_some():
            return Left(CategoryAlreadyExists(name))
        category = self.store.add_category(
            Category(id=0, budget_id=budget.id, name=name, allocated=normalize(allocated))
        )
        self._state.categories.append(category)
        logger.info("Added category %r allocated %s to %r", name, category.allocated, budget.name)
        self.bus.publish(CATEGORY_ADDED, {"category_id": category.id, "name": name})
        return Right(category)

    def category_model(self, category: Category) -> CategoryModel:
        return CategoryModel(category, self._state.transactions, self._state.transfers)

    def category_models(self) -> List[CategoryModel]:
        return [self.category_model(c) for c in self._state.categories]

    def get_category_model_by_id(self, cat_id: int) -> Either[BudgetingError, CategoryModel]:
        found = safe_category_by_id(self._state.categories, cat_id).map(self.category_model)
        if found.is_none():
            return Left(CategoryNotFound(cat_id))
        return Right(found.get_or_else(None))

    # -- transactions ----------------------------------------------------

    def transactions(self) -> List[Transaction]:
        return list(self._state.transactions)

    def transfers(self) -> List[Transfer]:
        return list(self._state.transfers)

    def transaction_model(self, transaction: Transaction) -> TransactionModel:
        category = safe_category_by_id(self._state.categories, transaction.category_id)
        if category.is_none():
            raise ValueError(f"{transaction!r} does not belong to the current budget")
        return TransactionModel(transaction, self.category_model(category.get_or_else(None)))

    def new_transaction_to_category(self, category: Union[str, Category]) -> TransactionBuilder:
        """Start a transaction posted to ``category`` (a name or a ``Category``).

        A name that matches no category posts to ``DEFAULT_CATEGORY``. The
        Unallocated pool only moves money through transfers, so a builder
        aimed at it has no category and ``done()`` fails.
        """
        name = category.name if isinstance(category, Category) else category
        if name == UNALLOCATED_CATEGORY:
            logger.warning("Refusing to post a transaction to %r", UNALLOCATED_CATEGORY)
            return TransactionBuilder(None, self._post_transaction, self._announce_transaction)
        resolved = self.get_category_by_name(name)
        if resolved.is_none() and name != DEFAULT_CATEGORY:
            logger.warning("Unknown category %r, posting to %r", name, DEFAULT_CATEGORY)
        resolved = resolved.or_else(lambda: self.get_category_by_name(DEFAULT_CATEGORY))
        return TransactionBuilder(
            resolved.get_or_else(None), self._post_transaction, self._announce_transaction
        )

    def _post_transaction(self, transaction: Transaction) -> Either[BudgetingError, Transaction]:
        # a builder may outlive a budget switch; its category must still be ours
        target = safe_category_by_id(self._state.categories, transaction.category_id)
        if target.is_none() or target.get_or_else(None).is_unallocated:
            return Left(InvalidTransaction(
                f"Category {transaction.category_id} is not a posting target in the current budget"
            ))
        stored = self.store.add_transaction(transaction)
        self._state.transactions.append(stored)
        return Right(stored)

    def _announce_transaction(self, stored: Transaction) -> None:
        self.bus.publish(TRANSACTION_ADDED, {
            "transaction_id": stored.id,
            "category_id": stored.category_id,
            "amount": stored.amount,
        })

    # -- fund transfers --------------------------------------------------

    def fund_from_unallocated(self, category_name: str) -> Either[BudgetingError, Transfer]:
        """Top ``category_name`` up to its allocation from the Unallocated pool.

        Fails without any change when the category already holds its
        allocation or when the pool cannot cover the shortfall.
        """
        target = self.get_category_by_name(category_name)
        pool = self.get_category_by_name(UNALLOCATED_CATEGORY)
        if target.is_none() or pool.is_none():
            return Left(CategoryNotFound(category_name))
        target_model = self.category_model(target.get_or_else(None))
        pool_model = self.category_model(pool.get_or_else(None))
        if target_model == pool_model:
            return Left(InvalidCategory("The Unallocated pool cannot fund itself"))

        balance = target_model.balance
        if balance >= target_model.allocated:
            logger.warning("Not funding %r: already holds %s", category_name, balance)
            return Left(AlreadyFunded(category_name, balance, target_model.allocated))

        needed = money_sum([target_model.allocated, -balance])
        available = pool_model.balance
        if available < needed:
            logger.warning("Not funding %r: needs %s, %s available", category_name, needed, available)
            return Left(OverFundingError(category_name, needed, available))

        transfer = self.store.add_transfer(Transfer(
            id=0,
            from_category_id=pool_model.id,
            to_category_id=target_model.id,
            amount=needed,
        ))
        self._state.transfers.append(transfer)
        logger.info("Funded %r with %s from %r", category_name, needed, UNALLOCATED_CATEGORY)
        self.bus.publish(FUNDS_TRANSFERRED, {
            "transfer_id": transfer.id,
            "from_category_id": transfer.from_category_id,
            "to_category_id": transfer.to_category_id,
            "amount": transfer.amount,
        })
        return Right(transfer)

    # -- aggregates ------------------------------------------------------

    def actual_total_balance(self) -> float:
        return money_sum(m.balance for m in self.category_models())

    def _balance_of(self, name: str) -> float:
        return self.get_category_by_name(name).map(
            lambda c: self.category_model(c).balance
        ).get_or_else(0.0)

    def uncategorized_balance(self) -> float:
        return self._balance_of(DEFAULT_CATEGORY)

    def unallocated_balance(self) -> float:
        return self._balance_of(UNALLOCATED_CATEGORY)

    def total_allocated(self) -> float:
        return money_sum(c.allocated for c in self.categories())

    def total_income(self) -> float:
        return transforms.total_income(self._state.transactions)

    def total_expense(self) -> float:
        """Sum of all expenses, negative (or zero)."""
        return transforms.total_expense(self._state.transactions)

    def summary(self) -> SummaryData:
        moved = money_sum(t.amount for t in self._state.transfers)
        return SummaryData(
            transfer_in=moved,
            transfer_out=moved,
            total_income=self.total_income(),
            total_expense=abs(self.total_expense()),
        )


def open_budget(
    store: LedgerStore,
    name: Optional[str] = None,
    bus: Optional[EventBus] = None,
) -> Budgeting:
    """Return a ``Budgeting`` with ``name`` selected, creating it empty if missing."""
    name = name or config.DEFAULT_BUDGET_NAME
    budgeting = Budgeting(store, bus)
    if budgeting.set_current_budget(name).is_left():
        budgeting.new_budget(name, 0.0).unwrap()
    return budgeting
