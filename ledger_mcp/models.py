"""
Ledger data models.
Canonical shapes for the records returned by the ledger. Amounts are integer
cents (negative = outflow), dates are ISO "YYYY-MM-DD" strings.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict


class LedgerModel(BaseModel):
    """Base for ledger records; unknown fields from the ledger are ignored."""
    model_config = ConfigDict(extra="ignore")


class Account(LedgerModel):
    id: str
    name: str
    type: Optional[str] = None
    offbudget: bool = False
    closed: bool = False
    balance: Optional[int] = None  # None until fetched

    @property
    def on_budget(self) -> bool:
        return not self.offbudget and not self.closed


class Transaction(LedgerModel):
    id: Optional[str] = None
    account: str
    date: str
    amount: int
    payee: Optional[str] = None
    payee_name: Optional[str] = None
    category: Optional[str] = None
    category_name: Optional[str] = None
    notes: Optional[str] = None
    transfer_id: Optional[str] = None
    cleared: Optional[bool] = None

    @property
    def is_pure_transfer(self) -> bool:
        """Transfer between own accounts with no budget category attached."""
        return bool(self.transfer_id) and not self.category


class Category(LedgerModel):
    id: str
    name: str
    group_id: str
    is_income: bool = False


class CategoryGroup(LedgerModel):
    id: str
    name: str
    is_income: bool = False
    categories: list[Category] = []


class Payee(LedgerModel):
    id: str
    name: str
    category: Optional[str] = None
    transfer_acct: Optional[str] = None
