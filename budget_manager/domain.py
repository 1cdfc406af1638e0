from dataclasses import dataclass, field, replace
from datetime import datetime

# Distinguished categories every budget is created with
DEFAULT_CATEGORY = "Uncategorized"
UNALLOCATED_CATEGORY = "Unallocated"


@dataclass(frozen=True)
class Budget:
    id: int
    name: str              # unique key
    initial_amount: float  # funds the Unallocated pool starts with


@dataclass(frozen=True)
class Category:
    id: int
    budget_id: int
    name: str         # unique within the budget
    allocated: float  # amount budgeted to this category

    @property
    def is_unallocated(self) -> bool:
        return self.name == UNALLOCATED_CATEGORY

    @property
    def is_default(self) -> bool:
        return self.name == DEFAULT_CATEGORY


@dataclass(frozen=True)
class Transaction:
    id: int
    category_id: int
    amount: float  # + for income, - for expense
    payee: str = ""
    note: str = ""
    date_created: datetime = field(default_factory=datetime.now)

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    # Fixture helpers: return a copy with one field replaced.
    def set_amount(self, amount: float) -> "Transaction":
        return replace(self, amount=amount)

    def set_note(self, note: str) -> "Transaction":
        return replace(self, note=note)


# Moving money between categories is one record: the transfer-out of the
# source and the transfer-in of the target are never stored apart.
@dataclass(frozen=True)
class Transfer:
    id: int
    from_category_id: int
    to_category_id: int
    amount: float  # always positive
    date_created: datetime = field(default_factory=datetime.now)
