"""
Account Management Module

An account holds a balance in a single currency and may go negative down to
its overdraft limit. Balances change only through the ledger operations in
``ledger.py``; this module covers the account record itself and onboarding.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING
import uuid

from .currency import Money, Currency, AmountInput, parse_amount
from .storage import StorageRecord
from .errors import InvalidArgumentError, NotFoundError
from .logging_config import get_logger, log_action

if TYPE_CHECKING:
    from .store import LedgerStore
    from .transactions import Transaction


@dataclass
class Account(StorageRecord):
    """
    Bank account with an overdraft floor.

    ``transactions`` is loaded on demand by the store (most recent first) and
    is not part of the stored account record.
    """
    account_number: str
    customer_id: str
    currency: Currency
    balance: Money
    overdraft_limit: Money
    transactions: List['Transaction'] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self):
        if self.balance.currency != self.currency:
            raise ValueError("Balance currency must match account currency")

        if self.overdraft_limit.currency != self.currency:
            raise ValueError("Overdraft limit currency must match account currency")

        if self.overdraft_limit.is_positive():
            raise ValueError("Overdraft limit must be zero or negative")

    def is_owned_by(self, customer_id: str) -> bool:
        """Check if the account belongs to the given customer"""
        return self.customer_id == customer_id

    def can_debit(self, amount: Money) -> bool:
        """Check if debiting amount keeps the balance at or above the overdraft limit"""
        return amount <= self.available_to_spend

    @property
    def available_to_spend(self) -> Money:
        """Headroom between the balance and the overdraft limit"""
        return self.balance - self.overdraft_limit


class AccountManager:
    """
    Opens accounts and answers account lookups
    """

    def __init__(self, store: 'LedgerStore', default_currency: Currency = Currency.EUR):
        self.store = store
        self.default_currency = default_currency
        self.logger = get_logger("bank_ledger.accounts")

    def open_account(
        self,
        customer_id: str,
        currency: Optional[Currency] = None,
        overdraft_limit: AmountInput = Decimal('0'),
        opening_balance: AmountInput = Decimal('0'),
        account_number: Optional[str] = None
    ) -> Account:
        """
        Open a new account for an existing customer

        Args:
            customer_id: ID of account owner
            currency: Account currency (the manager default if not provided)
            overdraft_limit: Lowest balance allowed (zero or negative)
            opening_balance: Initial balance, must respect the overdraft limit
            account_number: Specific account number (generated if not provided)

        Returns:
            Created Account object
        """
        if currency is None:
            currency = self.default_currency

        try:
            limit = Money(parse_amount(overdraft_limit), currency)
            balance = Money(parse_amount(opening_balance), currency)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e

        if limit.is_positive():
            raise InvalidArgumentError("Overdraft limit must be zero or negative")

        if balance < limit:
            raise InvalidArgumentError("Opening balance is below the overdraft limit")

        now = datetime.now(timezone.utc)

        with self.store.atomic():
            if not self.store.get_customer(customer_id):
                raise NotFoundError("Customer not found")

            if account_number:
                if self.store.find_account_by_number(account_number):
                    raise InvalidArgumentError(f"Account number {account_number} is already in use")
            else:
                account_number = self._generate_account_number()

            account = Account(
                id=str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
                account_number=account_number,
                customer_id=customer_id,
                currency=currency,
                balance=balance,
                overdraft_limit=limit
            )
            self.store.save_account(account)

        log_action(
            self.logger, "info", "Account opened",
            action="open_account", resource=f"account:{account.id}",
            extra={
                "account_number": account.account_number,
                "customer_id": customer_id,
                "currency": currency.code,
                "overdraft_limit": str(limit.amount)
            }
        )
        return account

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID"""
        return self.store.get_account(account_id)

    def get_account_by_number(self, account_number: str) -> Optional[Account]:
        """Get account by account number"""
        return self.store.find_account_by_number(account_number)

    def get_customer_accounts(self, customer_id: str) -> List[Account]:
        """Get all accounts for a customer"""
        return self.store.find_accounts_by_customer(customer_id)

    def _generate_account_number(self) -> str:
        """Generate a unique account number"""
        timestamp = int(datetime.now(timezone.utc).timestamp())
        while True:
            candidate = f"ACC{timestamp}{uuid.uuid4().hex[:4].upper()}"
            if not self.store.find_account_by_number(candidate):
                return candidate
