"""Read views over the ledger.

Views borrow the engine's live collections and recompute on every access,
so a view held by the presentation layer always reflects the latest
postings. They never mutate anything.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from budget_manager import transforms
from budget_manager.domain import Category, Transaction, Transfer
from budget_manager.money import format_amount, money_sum, normalize, signum


@dataclass(frozen=True)
class SummaryData:
    transfer_in: float
    transfer_out: float
    total_income: float
    total_expense: float


class CategoryModel:
    """Balance and income/expense/transfer aggregates of one category.

    ``balance = opening + income + expense + transfer_in - transfer_out``,
    where ``opening`` is the allocation of the Unallocated pool (its money)
    and zero for every other category (their allocation is a target).
    """

    def __init__(
        self,
        category: Category,
        transactions: Sequence[Transaction],
        transfers: Sequence[Transfer],
    ):
        self.category = category
        self._transactions = transactions
        self._transfers = transfers

    @property
    def id(self) -> int:
        return self.category.id

    @property
    def name(self) -> str:
        return self.category.name

    @property
    def allocated(self) -> float:
        return self.category.allocated

    @property
    def is_unallocated(self) -> bool:
        return self.category.is_unallocated

    @property
    def is_default(self) -> bool:
        return self.category.is_default

    @property
    def opening(self) -> float:
        return self.category.allocated if self.is_unallocated else 0.0

    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(filter(transforms.by_category(self.id), self._transactions))

    @property
    def income(self) -> float:
        return transforms.total_income(self.transactions())

    @property
    def expense(self) -> float:
        return transforms.total_expense(self.transactions())

    @property
    def transfer_in(self) -> float:
        return transforms.transfers_into(self._transfers, self.id)

    @property
    def transfer_out(self) -> float:
        return transforms.transfers_out_of(self._transfers, self.id)

    @property
    def balance(self) -> float:
        return money_sum([
            self.opening,
            self.income,
            self.expense,
            self.transfer_in,
            -self.transfer_out,
        ])

    @property
    def total_expense(self) -> float:
        expense = self.expense
        return normalize(expense * signum(expense))

    @property
    def total_transfer_out(self) -> float:
        out = self.transfer_out
        return normalize(out * signum(out))

    def summary(self) -> SummaryData:
        return SummaryData(
            transfer_in=self.transfer_in,
            transfer_out=self.total_transfer_out,
            total_income=self.income,
            total_expense=self.total_expense,
        )

    def __eq__(self, other) -> bool:
        return isinstance(other, CategoryModel) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"CategoryModel(id={self.id}, name={self.name!r}, balance={self.balance})"


class TransactionModel:
    """A transaction together with the category it was posted to."""

    def __init__(self, transaction: Transaction, category_model: CategoryModel):
        self.transaction = transaction
        self.category_model = category_model

    @property
    def id(self) -> int:
        return self.transaction.id

    @property
    def payee(self) -> str:
        return self.transaction.payee

    @property
    def note(self) -> str:
        return self.transaction.note

    @property
    def amount(self) -> float:
        return self.transaction.amount

    @property
    def is_income(self) -> bool:
        return self.transaction.is_income

    @property
    def category_id(self) -> int:
        return self.transaction.category_id

    @property
    def category_name(self) -> str:
        return self.category_model.name

    @property
    def date_created(self) -> datetime:
        return self.transaction.date_created

    @property
    def amount_label(self) -> str:
        # the sign is shown by the row style, not the label
        return format_amount(abs(self.amount))

    @property
    def date_label(self) -> str:
        return self.date_created.strftime("%Y-%m-%d %H:%M")

    def __eq__(self, other) -> bool:
        return isinstance(other, TransactionModel) and self.transaction == other.transaction

    def __hash__(self) -> int:
        return hash(self.transaction.id)

    def __repr__(self) -> str:
        return f"TransactionModel({self.transaction!r}, category={self.category_name!r})"
