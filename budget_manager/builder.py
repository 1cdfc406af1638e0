import math
from datetime import datetime
from typing import Callable, List, Optional

from budget_manager.domain import Category, Transaction
from budget_manager.errors import BudgetingError, InvalidTransaction
from budget_manager.functional import Either, Left, Right
from budget_manager.money import normalize


class TransactionBuilder:
    """Collects the fields of a new transaction and posts it on ``done()``.

    Setters never fail; every check is deferred to ``done()``. The amount
    must be set exactly once, through either ``income`` or ``expense``:
    setting it twice (including income then expense) is rejected rather
    than letting the last call win. The method decides the sign, the
    argument only the magnitude; a zero amount is rejected.

    ``commit`` stores the transaction and may refuse it; ``on_posted`` runs
    after a successful commit, once the builder already counts as posted.

        budgeting.new_transaction_to_category("Groceries") \\
            .expense(12.5).payee("Market").note("weekly").done()
    """

    def __init__(
        self,
        category: Optional[Category],
        commit: Callable[[Transaction], Either[BudgetingError, Transaction]],
        on_posted: Optional[Callable[[Transaction], None]] = None,
    ):
        self._category = category
        self._commit = commit
        self._on_posted = on_posted
        self._amounts: List[float] = []
        self._payee = ""
        self._note = ""
        self._date_created: Optional[datetime] = None
        self._posted = False

    def income(self, amount: float) -> 'TransactionBuilder':
        self._amounts.append(abs(amount))
        return self

    def expense(self, amount: float) -> 'TransactionBuilder':
        self._amounts.append(-abs(amount))
        return self

    def payee(self, payee: str) -> 'TransactionBuilder':
        self._payee = payee
        return self

    def note(self, note: str) -> 'TransactionBuilder':
        self._note = note
        return self

    def date_created(self, date_created: datetime) -> 'TransactionBuilder':
        self._date_created = date_created
        return self

    def validate(self) -> Either[BudgetingError, Transaction]:
        """Check the collected fields and return the unsaved transaction."""
        if not self._amounts:
            return Left(InvalidTransaction("Transaction amount was never set"))
        if len(self._amounts) > 1:
            return Left(InvalidTransaction(
                f"Transaction amount was set {len(self._amounts)} times"
            ))
        (amount,) = self._amounts
        if not math.isfinite(amount):
            return Left(InvalidTransaction(f"Transaction amount {amount} is not a number"))
        if normalize(amount) == 0:
            return Left(InvalidTransaction("Transaction amount cannot be zero"))
        if self._category is None:
            return Left(InvalidTransaction("No category to post the transaction to"))
        return Right(Transaction(
            id=0,
            category_id=self._category.id,
            amount=normalize(amount),
            payee=self._payee,
            note=self._note,
            date_created=self._date_created or datetime.now(),
        ))

    def done(self) -> Either[BudgetingError, Transaction]:
        if self._posted:
            return Left(InvalidTransaction("Transaction was already posted"))
        result = self.validate().bind(self._commit)
        if result.is_right():
            self._posted = True
            if self._on_posted is not None:
                self._on_posted(result.unwrap())
        return result
