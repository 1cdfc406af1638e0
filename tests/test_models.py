from datetime import datetime

from budget_manager.domain import Category, Transaction, Transfer
from budget_manager.models import CategoryModel, SummaryData, TransactionModel


def make_sample():
    pool = Category(1, 1, "Unallocated", 200.0)
    food = Category(3, 1, "Food", 80.0)
    trans = [
        Transaction(10, 3, -30.0, "Market", "veg"),
        Transaction(11, 3, 5.0, "Friend", "payback"),
        Transaction(12, 2, 100.0, "Employer", "salary"),
        Transaction(13, 3, -12.25, "Bakery", "bread"),
    ]
    transfers = [Transfer(20, 1, 3, 80.0)]
    return pool, food, trans, transfers


def test_category_aggregates():
    pool, food, trans, transfers = make_sample()
    m = CategoryModel(food, trans, transfers)

    assert m.income == 5.0
    assert m.expense == -42.25
    assert m.total_expense == 42.25
    assert m.transfer_in == 80.0
    assert m.transfer_out == 0.0
    assert m.opening == 0.0
    assert m.balance == 42.75
    assert [t.id for t in m.transactions()] == [10, 11, 13]


def test_pool_opening_is_its_allocation():
    pool, food, trans, transfers = make_sample()
    m = CategoryModel(pool, trans, transfers)

    assert m.is_unallocated
    assert m.opening == 200.0
    assert m.transfer_out == 80.0
    assert m.total_transfer_out == 80.0
    assert m.balance == 120.0


def test_model_sees_later_postings():
    pool, food, trans, transfers = make_sample()
    m = CategoryModel(food, trans, transfers)
    before = m.balance
    trans.append(Transaction(14, 3, -2.75, "Kiosk", "gum"))
    assert m.balance == before - 2.75


def test_summary():
    pool, food, trans, transfers = make_sample()
    assert CategoryModel(food, trans, transfers).summary() == SummaryData(
        transfer_in=80.0, transfer_out=0.0, total_income=5.0, total_expense=42.25
    )


def test_equality_by_category_id():
    pool, food, trans, transfers = make_sample()
    renamed = Category(3, 1, "Groceries", 10.0)
    assert CategoryModel(food, trans, transfers) == CategoryModel(renamed, [], [])
    assert CategoryModel(food, trans, transfers) != CategoryModel(pool, trans, transfers)
    assert len({CategoryModel(food, [], []), CategoryModel(renamed, [], [])}) == 1


def test_transaction_model_labels():
    pool, food, trans, transfers = make_sample()
    t = Transaction(15, 3, -7.5, "Cafe", "coffee", datetime(2024, 3, 9, 8, 5))
    m = TransactionModel(t, CategoryModel(food, trans, transfers))

    assert m.category_name == "Food"
    assert m.category_id == 3
    assert not m.is_income
    assert m.amount_label == "7.50"
    assert m.date_label == "2024-03-09 08:05"
