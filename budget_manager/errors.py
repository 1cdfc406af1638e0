"""Domain failures of the budgeting engine.

These are returned inside ``Left`` by ``Budgeting`` and the transaction
builder; they are exceptions only so a caller may ``raise`` one it cannot
handle. ``StoreError`` is the odd one out: it is raised by the storage
layer and is not recoverable in-process.
"""


class BudgetingError(Exception):
    code = "budgeting_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.message == other.message

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class BudgetNotFound(BudgetingError):
    code = "budget_not_found"

    def __init__(self, name: str | None):
        if name is None:
            super().__init__("No budget is selected")
        else:
            super().__init__(f"Budget {name!r} does not exist")
        self.name = name


class BudgetAlreadyExists(BudgetingError):
    code = "budget_already_exists"

    def __init__(self, name: str):
        super().__init__(f"Budget {name!r} already exists")
        self.name = name


class InvalidBudget(BudgetingError):
    code = "invalid_budget"


class CategoryNotFound(BudgetingError):
    code = "category_not_found"

    def __init__(self, key):
        super().__init__(f"Category {key!r} does not exist")
        self.key = key


class CategoryAlreadyExists(BudgetingError):
    code = "category_already_exists"

    def __init__(self, name: str):
        super().__init__(f"Category {name!r} already exists")
        self.name = name


class InvalidCategory(BudgetingError):
    code = "invalid_category"


class AlreadyFunded(BudgetingError):
    code = "already_funded"

    def __init__(self, name: str, balance: float, allocated: float):
        super().__init__(
            f"Category {name!r} already holds {balance} of its {allocated} allocation"
        )
        self.name = name
        self.balance = balance
        self.allocated = allocated


class OverFundingError(BudgetingError):
    code = "over_funding"

    def __init__(self, name: str, needed: float, available: float):
        super().__init__(
            f"Funding {name!r} needs {needed} but only {available} is unallocated"
        )
        self.name = name
        self.needed = needed
        self.available = available


class InvalidTransaction(BudgetingError):
    code = "invalid_transaction"


class StoreError(RuntimeError):
    """The durable store could not be reached or migrated."""
