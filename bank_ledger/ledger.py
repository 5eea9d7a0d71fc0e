"""
Ledger Core Module

Ownership-checked, overdraft-checked balance mutations and the read paths
over accounts and their transaction history.

Every operation runs as one unit of work on the store: all reads, checks and
writes either commit together or not at all. Every check happens before the
first in-memory mutation, so a rejected operation never leaves a changed
balance behind. The store serializes units of work, which keeps two
concurrent withdrawals on the same account from both passing the overdraft
check.
"""

from datetime import datetime, timezone
from contextlib import contextmanager
from typing import List, Optional
import uuid

from .currency import Money, Currency, AmountInput, parse_amount
from .accounts import Account
from .transactions import Transaction, OperationType
from .identity import CallerIdentity, IdentityResolver
from .store import LedgerStore
from .errors import (
    LedgerError, NotFoundError, AccessDeniedError, InvalidArgumentError
)
from .logging_config import get_logger, log_action


class LedgerService:
    """
    Deposits, withdrawals and transfers over single-currency accounts
    """

    def __init__(self, store: LedgerStore, identity_resolver: IdentityResolver):
        self.store = store
        self.identity_resolver = identity_resolver
        self.logger = get_logger("bank_ledger.ledger")

    def accounts_of(self, caller: CallerIdentity, customer_id: str) -> List[Account]:
        """
        List a customer's accounts, each loaded with its transactions

        Raises:
            AccessDeniedError: If customer_id is not the caller's own customer
        """
        with self._unit_of_work("accounts_of", caller, f"customer:{customer_id}"):
            customer = self.identity_resolver.current_customer(caller)
            if customer.id != customer_id:
                raise AccessDeniedError("You are not allowed to access accounts of another customer")
            return self.store.find_accounts_by_customer(customer_id, with_transactions=True)

    def transactions_of(self, caller: CallerIdentity, account_id: str) -> List[Transaction]:
        """
        List an account's transactions, most recent first

        Raises:
            AccessDeniedError: If the account does not exist or is not the caller's
        """
        with self._unit_of_work("transactions_of", caller, f"account:{account_id}"):
            customer = self.identity_resolver.current_customer(caller)
            if not self.store.exists_account_owned_by(account_id, customer.id):
                raise AccessDeniedError("You are not allowed to access this account's transactions")
            return self.store.find_transactions_by_account(account_id)

    def deposit(
        self,
        caller: CallerIdentity,
        account_id: str,
        amount: AmountInput,
        performed_by: Optional[str] = None
    ) -> Transaction:
        """
        Credit an owned account

        Returns:
            The DEPOSIT transaction

        Raises:
            NotFoundError: Account does not exist
            AccessDeniedError: Account is not the caller's
            InvalidArgumentError: Amount is not positive
        """
        with self._unit_of_work("deposit", caller, f"account:{account_id}"):
            account = self._load_owned_account(caller, account_id, "Account not found")
            money = self._positive_amount(amount, account.currency)

            now = datetime.now(timezone.utc)
            account.balance = account.balance + money
            account.updated_at = now

            transaction = self._new_transaction(
                account, OperationType.DEPOSIT, money, performed_by or caller.display_name, now
            )
            self.store.save_posting(account, transaction)

        self._log_posted("deposit", caller, transaction)
        return transaction

    def withdraw(
        self,
        caller: CallerIdentity,
        account_id: str,
        amount: AmountInput,
        performed_by: Optional[str] = None
    ) -> Transaction:
        """
        Debit an owned account, never below its overdraft limit

        Returns:
            The WITHDRAWAL transaction

        Raises:
            NotFoundError: Account does not exist
            AccessDeniedError: Account is not the caller's
            InvalidArgumentError: Amount is not positive or would exceed the overdraft limit
        """
        with self._unit_of_work("withdraw", caller, f"account:{account_id}"):
            account = self._load_owned_account(caller, account_id, "Account not found")
            money = self._positive_amount(amount, account.currency)

            if not account.can_debit(money):
                raise InvalidArgumentError("Withdrawal would exceed overdraft limit")

            now = datetime.now(timezone.utc)
            account.balance = account.balance - money
            account.updated_at = now

            transaction = self._new_transaction(
                account, OperationType.WITHDRAWAL, money, performed_by or caller.display_name, now
            )
            self.store.save_posting(account, transaction)

        self._log_posted("withdraw", caller, transaction)
        return transaction

    def transfer(
        self,
        caller: CallerIdentity,
        from_account_id: str,
        to_account_id: str,
        amount: AmountInput,
        performed_by: Optional[str] = None
    ) -> List[Transaction]:
        """
        Move funds from an owned account to any existing account

        The destination's owner and overdraft limit are not checked; only
        the source can go down.

        Returns:
            ``[debit, credit]`` TRANSFER transactions

        Raises:
            NotFoundError: Either account does not exist
            AccessDeniedError: Source account is not the caller's
            InvalidArgumentError: Same account, non-positive amount, currency
                mismatch, or source overdraft would be exceeded
        """
        resource = f"account:{from_account_id}->account:{to_account_id}"
        with self._unit_of_work("transfer", caller, resource):
            from_account = self._load_owned_account(caller, from_account_id, "From account not found")

            to_account = self.store.get_account(to_account_id)
            if not to_account:
                raise NotFoundError("To account not found")

            if from_account_id == to_account_id:
                raise InvalidArgumentError("Cannot transfer to the same account")

            money = self._positive_amount(amount, from_account.currency)

            if to_account.currency != from_account.currency:
                raise InvalidArgumentError("Cannot transfer between accounts with different currencies")

            if not from_account.can_debit(money):
                raise InvalidArgumentError("Transfer would exceed overdraft limit")

            now = datetime.now(timezone.utc)
            performer = performed_by or caller.display_name

            from_account.balance = from_account.balance - money
            from_account.updated_at = now
            to_account.balance = to_account.balance + money
            to_account.updated_at = now

            debit = self._new_transaction(from_account, OperationType.TRANSFER, money, performer, now)
            credit = self._new_transaction(to_account, OperationType.TRANSFER, money, performer, now)
            self.store.save_transfer(from_account, to_account, debit, credit)

        self._log_posted("transfer", caller, debit, extra={"credit_transaction_id": credit.id,
                                                          "to_account_id": to_account_id})
        return [debit, credit]

    @contextmanager
    def _unit_of_work(self, action: str, caller: CallerIdentity, resource: str):
        try:
            with self.store.atomic():
                yield
        except LedgerError as e:
            log_action(
                self.logger, "warning", f"{action} rejected: {e.message}",
                performed_by=caller.display_name, action=action, resource=resource,
                extra={"error": e.kind}
            )
            raise

    def _load_owned_account(self, caller: CallerIdentity, account_id: str, missing_message: str) -> Account:
        account = self.store.get_account(account_id)
        if not account:
            raise NotFoundError(missing_message)

        customer = self.identity_resolver.current_customer(caller)
        if not account.is_owned_by(customer.id):
            raise AccessDeniedError("Account does not belong to the current customer")

        return account

    def _positive_amount(self, amount: AmountInput, currency: Currency) -> Money:
        try:
            money = Money(parse_amount(amount), currency)
        except ValueError as e:
            raise InvalidArgumentError("Amount must be a valid number") from e

        if not money.is_positive():
            raise InvalidArgumentError("Amount must be positive")
        return money

    def _new_transaction(
        self,
        account: Account,
        operation_type: OperationType,
        amount: Money,
        performed_by: str,
        now: datetime
    ) -> Transaction:
        return Transaction(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            account_id=account.id,
            operation_type=operation_type,
            amount=amount,
            currency=account.currency,
            performed_by=performed_by,
            balance_after=account.balance,
            account=account
        )

    def _log_posted(self, action: str, caller: CallerIdentity, transaction: Transaction,
                    extra: Optional[dict] = None) -> None:
        details = {
            "transaction_id": transaction.id,
            "account_id": transaction.account_id,
            "amount": transaction.amount.to_string(),
            "balance_after": transaction.balance_after.to_string(),
        }
        if extra:
            details.update(extra)
        log_action(
            self.logger, "info", f"{transaction.operation_type.value} posted",
            performed_by=caller.display_name, action=action,
            resource=f"account:{transaction.account_id}", extra=details
        )
