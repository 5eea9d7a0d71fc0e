"""
Transaction Records Module

A transaction is the append-only record of one balance change on one
account. Deposits and withdrawals produce one record; a transfer produces two
(debit on the source, credit on the destination).
"""

from datetime import datetime
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum

from .currency import Money, Currency
from .storage import StorageRecord
from .accounts import Account


class OperationType(Enum):
    """Kinds of balance-changing operations"""
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER = "TRANSFER"


@dataclass
class Transaction(StorageRecord):
    """
    Posted transaction. ``balance_after`` is the account balance immediately
    after this posting; ``sequence`` is assigned by the store on insert.
    """
    account_id: str
    operation_type: OperationType
    amount: Money
    currency: Currency
    performed_by: str
    balance_after: Money
    sequence: int = 0
    account: Optional[Account] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if not self.amount.is_positive():
            raise ValueError("Transaction amount must be positive")

        if self.amount.currency != self.currency:
            raise ValueError("Transaction amount currency must match transaction currency")

        if self.balance_after.currency != self.currency:
            raise ValueError("Balance after currency must match transaction currency")

        if self.account is not None and self.account.id != self.account_id:
            raise ValueError("Transaction account reference does not match account_id")

    @property
    def date(self) -> datetime:
        """Posting timestamp"""
        return self.created_at

    @property
    def sort_key(self):
        return (self.created_at, self.sequence)
