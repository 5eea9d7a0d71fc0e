"""
Projection Layer

Externally safe views of accounts and transactions. An account embeds its
transactions and each transaction embeds its account, so views come in two
depths:

- ``FullAccountView`` carries the transaction list
- ``ShallowAccountView`` has no transaction list at all

A transaction view always embeds the shallow view of its account, so the
view graph is finite and acyclic no matter how long the history is.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple, Union

from .accounts import Account
from .transactions import Transaction


class ProjectionDepth(Enum):
    FULL = "full"
    SHALLOW = "shallow"


@dataclass(frozen=True)
class _AccountFields:
    id: str
    number: str
    balance: str
    currency: str

    def _fields_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "balance": self.balance,
            "currency": self.currency,
        }


@dataclass(frozen=True)
class ShallowAccountView(_AccountFields):
    depth = ProjectionDepth.SHALLOW

    def to_dict(self) -> Dict[str, Any]:
        result = self._fields_dict()
        # null, not [], so clients can tell "omitted" from "no transactions"
        result["transactions"] = None
        return result


@dataclass(frozen=True)
class TransactionView:
    id: str
    date: datetime
    amount: str
    type: str
    currency: str
    performed_by: str
    balance_after: str
    account: ShallowAccountView

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "amount": self.amount,
            "type": self.type,
            "currency": self.currency,
            "performed_by": self.performed_by,
            "balance_after": self.balance_after,
            "account": self.account.to_dict(),
        }


@dataclass(frozen=True)
class FullAccountView(_AccountFields):
    transactions: Tuple[TransactionView, ...] = ()

    depth = ProjectionDepth.FULL

    def to_dict(self) -> Dict[str, Any]:
        result = self._fields_dict()
        result["transactions"] = [tx.to_dict() for tx in self.transactions]
        return result


AccountView = Union[FullAccountView, ShallowAccountView]


def _shallow(account: Account) -> ShallowAccountView:
    return ShallowAccountView(
        id=account.id,
        number=account.account_number,
        balance=str(account.balance.amount),
        currency=account.currency.code,
    )


def project_account(account: Account, depth: ProjectionDepth = ProjectionDepth.FULL) -> AccountView:
    """Project an account at the requested depth"""
    if depth is ProjectionDepth.SHALLOW:
        return _shallow(account)

    shallow = _shallow(account)
    return FullAccountView(
        id=shallow.id,
        number=shallow.number,
        balance=shallow.balance,
        currency=shallow.currency,
        transactions=tuple(_project_transaction(tx, shallow) for tx in account.transactions),
    )


def project_transaction(transaction: Transaction) -> TransactionView:
    """Project a transaction; its account is always shallow"""
    if transaction.account is None:
        raise ValueError(f"Transaction {transaction.id} is not attached to an account")
    return _project_transaction(transaction, _shallow(transaction.account))


def _project_transaction(transaction: Transaction, account_view: ShallowAccountView) -> TransactionView:
    return TransactionView(
        id=transaction.id,
        date=transaction.date,
        amount=str(transaction.amount.amount),
        type=transaction.operation_type.value,
        currency=transaction.currency.code,
        performed_by=transaction.performed_by,
        balance_after=str(transaction.balance_after.amount),
        account=account_view,
    )


def project_accounts(accounts: Iterable[Account],
                     depth: ProjectionDepth = ProjectionDepth.FULL) -> List[AccountView]:
    return [project_account(account, depth) for account in accounts]


def project_transactions(transactions: Iterable[Transaction]) -> List[TransactionView]:
    return [project_transaction(tx) for tx in transactions]
