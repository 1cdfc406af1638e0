from budget_manager.budgeting import Budgeting
from budget_manager.domain import DEFAULT_CATEGORY, UNALLOCATED_CATEGORY
from budget_manager.errors import AlreadyFunded, CategoryNotFound, InvalidCategory, OverFundingError
from budget_manager.money import money_sum


def make_budgeting(initial, **allocations):
    budgeting = Budgeting()
    budgeting.new_budget("main", initial)
    for name, allocated in allocations.items():
        budgeting.new_category(name, allocated)
    return budgeting


def balances(budgeting):
    return {m.name: m.balance for m in budgeting.category_models()}


def model(budgeting, name):
    return budgeting.category_model(budgeting.get_category_by_name(name).get_or_else(None))


def assert_balance_invariant(budgeting):
    for m in budgeting.category_models():
        expected = money_sum([m.opening, m.income, m.expense, m.transfer_in, -m.transfer_out])
        assert m.balance == expected, m


def test_over_funding_with_empty_pool():
    budgeting = make_budgeting(0.0, Groceries=50.0)
    before = balances(budgeting)

    result = budgeting.fund_from_unallocated("Groceries")

    assert isinstance(result.get_error(), OverFundingError)
    assert result.get_error().needed == 50.0
    assert balances(budgeting) == before
    assert budgeting.transfers() == []


def test_funding_succeeds_with_enough_unallocated():
    budgeting = make_budgeting(100.0, Groceries=50.0)

    transfer = budgeting.fund_from_unallocated("Groceries").unwrap()

    assert transfer.amount == 50.0
    assert model(budgeting, "Groceries").balance == 50.0
    assert model(budgeting, UNALLOCATED_CATEGORY).balance == 50.0
    assert_balance_invariant(budgeting)


def test_already_funded_category_is_left_alone():
    budgeting = make_budgeting(100.0, Groceries=50.0)
    budgeting.fund_from_unallocated("Groceries").unwrap()
    before = balances(budgeting)

    result = budgeting.fund_from_unallocated("Groceries")

    assert isinstance(result.get_error(), AlreadyFunded)
    assert balances(budgeting) == before
    assert len(budgeting.transfers()) == 1


def test_income_can_make_a_category_already_funded():
    budgeting = make_budgeting(100.0, Gifts=20.0)
    budgeting.new_transaction_to_category("Gifts").income(25).done()
    assert isinstance(budgeting.fund_from_unallocated("Gifts").get_error(), AlreadyFunded)


def test_refill_after_spending_moves_only_the_shortfall():
    budgeting = make_budgeting(100.0, Groceries=50.0)
    budgeting.fund_from_unallocated("Groceries").unwrap()
    budgeting.new_transaction_to_category("Groceries").expense(12.5).done()
    groceries = model(budgeting, "Groceries")
    pool = model(budgeting, UNALLOCATED_CATEGORY)
    balance_before = groceries.balance
    transfer_in_before = groceries.transfer_in
    pool_before = pool.balance
    total_before = budgeting.actual_total_balance()

    transfer = budgeting.fund_from_unallocated("Groceries").unwrap()

    assert transfer.amount == 12.5
    assert groceries.transfer_in == transfer_in_before + (groceries.allocated - balance_before)
    assert groceries.balance == groceries.allocated
    assert pool.balance == pool_before - 12.5
    assert budgeting.actual_total_balance() == total_before
    assert_balance_invariant(budgeting)


def test_partial_pool_is_not_drained():
    budgeting = make_budgeting(30.0, Rent=50.0)
    before = balances(budgeting)

    error = budgeting.fund_from_unallocated("Rent").get_error()

    assert isinstance(error, OverFundingError)
    assert error.available == 30.0
    assert balances(budgeting) == before


def test_pool_never_goes_negative():
    budgeting = make_budgeting(60.0, Food=40.0, Rent=30.0)
    budgeting.fund_from_unallocated("Food").unwrap()
    assert budgeting.fund_from_unallocated("Rent").is_left()
    assert budgeting.unallocated_balance() == 20.0


def test_unknown_category():
    budgeting = make_budgeting(10.0)
    result = budgeting.fund_from_unallocated("Nope")
    assert isinstance(result.get_error(), CategoryNotFound)


def test_pool_cannot_fund_itself():
    budgeting = make_budgeting(10.0)
    result = budgeting.fund_from_unallocated(UNALLOCATED_CATEGORY)
    assert isinstance(result.get_error(), InvalidCategory)


def test_default_category_has_nothing_to_fund():
    budgeting = make_budgeting(10.0)
    result = budgeting.fund_from_unallocated(DEFAULT_CATEGORY)
    assert isinstance(result.get_error(), AlreadyFunded)


def test_invariant_holds_through_a_busy_month():
    budgeting = make_budgeting(500.0, Food=120.0, Rent=300.0, Fun=45.5)
    for name in ("Food", "Rent", "Fun"):
        budgeting.fund_from_unallocated(name).unwrap()
    budgeting.new_transaction_to_category("Food").expense(33.33).done()
    budgeting.new_transaction_to_category("Food").expense(0.67).done()
    budgeting.new_transaction_to_category("Fun").expense(45.5).done()
    budgeting.new_transaction_to_category(DEFAULT_CATEGORY).income(1000).done()
    budgeting.fund_from_unallocated("Food").unwrap()

    assert_balance_invariant(budgeting)
    assert model(budgeting, "Food").balance == 120.0
    assert model(budgeting, "Food").transfer_in == 154.0
    assert budgeting.unallocated_balance() == 0.5
    assert budgeting.actual_total_balance() == 1420.5
