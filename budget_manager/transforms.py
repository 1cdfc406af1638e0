from typing import Iterable, Tuple

from budget_manager.domain import Transaction, Transfer
from budget_manager.money import money_sum


def by_category(cat_id: int):
    def _filter(t: Transaction) -> bool:
        return t.category_id == cat_id

    return _filter


def income_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.amount > 0, trans))


def expense_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.amount < 0, trans))


def transaction_amounts(trans: Iterable[Transaction]) -> Tuple[float, ...]:
    return tuple(map(lambda t: t.amount, trans))


def total_income(trans: Iterable[Transaction]) -> float:
    return money_sum(transaction_amounts(income_transactions(trans)))


def total_expense(trans: Iterable[Transaction]) -> float:
    """Sum of expenses, kept negative."""
    return money_sum(transaction_amounts(expense_transactions(trans)))


def transfers_into(transfers: Iterable[Transfer], cat_id: int) -> float:
    return money_sum(t.amount for t in transfers if t.to_category_id == cat_id)


def transfers_out_of(transfers: Iterable[Transfer], cat_id: int) -> float:
    return money_sum(t.amount for t in transfers if t.from_category_id == cat_id)
