"""
Ledger Store Module

Typed access to customer, account and transaction records on top of a
``StorageInterface`` backend. Owns the record <-> dict mapping and the batched
writes the ledger core relies on (one account + one transaction, or two
accounts + two transactions, always inside one unit of work).
"""

from decimal import Decimal
from typing import Dict, List, Optional, Any

from .currency import Money, Currency
from .storage import StorageInterface, parse_timestamp
from .customers import Customer
from .accounts import Account
from .transactions import Transaction, OperationType


class LedgerStore:
    """
    Keyed storage for Customer, Account and Transaction records
    """

    customers_table = "customers"
    accounts_table = "accounts"
    transactions_table = "transactions"

    def __init__(self, storage: StorageInterface):
        self.storage = storage

    def atomic(self):
        """Open a unit of work on the underlying backend"""
        return self.storage.atomic()

    # Customers

    def save_customer(self, customer: Customer) -> None:
        self.storage.save(self.customers_table, customer.id, self._customer_to_dict(customer))

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        data = self.storage.load(self.customers_table, customer_id)
        if data:
            return self._customer_from_dict(data)
        return None

    def find_customer_by_identity_ref(self, identity_ref: str) -> Optional[Customer]:
        found = self.storage.find(self.customers_table, {"identity_ref": identity_ref})
        if found:
            return self._customer_from_dict(found[0])
        return None

    def list_customers(self) -> List[Customer]:
        customers = [self._customer_from_dict(data) for data in self.storage.load_all(self.customers_table)]
        customers.sort(key=lambda c: c.created_at)
        return customers

    # Accounts

    def save_account(self, account: Account) -> None:
        self.storage.save(self.accounts_table, account.id, self._account_to_dict(account))

    def get_account(self, account_id: str, with_transactions: bool = False) -> Optional[Account]:
        data = self.storage.load(self.accounts_table, account_id)
        if not data:
            return None
        account = self._account_from_dict(data)
        if with_transactions:
            self._attach_transactions(account)
        return account

    def find_account_by_number(self, account_number: str) -> Optional[Account]:
        found = self.storage.find(self.accounts_table, {"account_number": account_number})
        if found:
            return self._account_from_dict(found[0])
        return None

    def find_accounts_by_customer(self, customer_id: str, with_transactions: bool = False) -> List[Account]:
        accounts = [
            self._account_from_dict(data)
            for data in self.storage.find(self.accounts_table, {"customer_id": customer_id})
        ]
        accounts.sort(key=lambda a: (a.created_at, a.account_number))
        if with_transactions:
            for account in accounts:
                self._attach_transactions(account)
        return accounts

    def exists_account_owned_by(self, account_id: str, customer_id: str) -> bool:
        data = self.storage.load(self.accounts_table, account_id)
        return bool(data) and data.get("customer_id") == customer_id

    # Transactions

    def find_transactions_by_account(self, account_id: str) -> List[Transaction]:
        """Transactions of an account, most recent first"""
        account = self.get_account(account_id, with_transactions=True)
        if not account:
            return []
        return list(account.transactions)

    def save_posting(self, account: Account, transaction: Transaction) -> None:
        """Persist an account and its new transaction as one unit"""
        with self.atomic():
            self._insert_transaction(transaction)
            self.save_account(account)
        account.transactions.insert(0, transaction)

    def save_transfer(
        self,
        from_account: Account,
        to_account: Account,
        debit: Transaction,
        credit: Transaction
    ) -> None:
        """Persist both legs of a transfer as one unit"""
        with self.atomic():
            self._insert_transaction(debit)
            self._insert_transaction(credit)
            self.save_account(from_account)
            self.save_account(to_account)
        from_account.transactions.insert(0, debit)
        to_account.transactions.insert(0, credit)

    def _insert_transaction(self, transaction: Transaction) -> None:
        if self.storage.exists(self.transactions_table, transaction.id):
            raise ValueError(f"Transaction {transaction.id} already exists; transactions are append-only")
        transaction.sequence = self.storage.count(self.transactions_table) + 1
        self.storage.save(self.transactions_table, transaction.id, self._transaction_to_dict(transaction))

    def _attach_transactions(self, account: Account) -> None:
        transactions = [
            self._transaction_from_dict(data, account)
            for data in self.storage.find(self.transactions_table, {"account_id": account.id})
        ]
        transactions.sort(key=lambda t: t.sort_key, reverse=True)
        account.transactions = transactions

    # Mapping

    def _customer_to_dict(self, customer: Customer) -> Dict[str, Any]:
        result = customer.base_dict()
        result.update({
            'identity_ref': customer.identity_ref,
            'name': customer.name,
            'email': customer.email,
        })
        return result

    def _customer_from_dict(self, data: Dict[str, Any]) -> Customer:
        return Customer(
            id=data['id'],
            created_at=parse_timestamp(data['created_at']),
            updated_at=parse_timestamp(data['updated_at']),
            identity_ref=data['identity_ref'],
            name=data['name'],
            email=data['email']
        )

    def _account_to_dict(self, account: Account) -> Dict[str, Any]:
        result = account.base_dict()
        result.update({
            'account_number': account.account_number,
            'customer_id': account.customer_id,
            'currency': account.currency.code,
            'balance': str(account.balance.amount),
            'overdraft_limit': str(account.overdraft_limit.amount),
        })
        return result

    def _account_from_dict(self, data: Dict[str, Any]) -> Account:
        currency = Currency[data['currency']]
        return Account(
            id=data['id'],
            created_at=parse_timestamp(data['created_at']),
            updated_at=parse_timestamp(data['updated_at']),
            account_number=data['account_number'],
            customer_id=data['customer_id'],
            currency=currency,
            balance=Money(Decimal(data['balance']), currency),
            overdraft_limit=Money(Decimal(data['overdraft_limit']), currency)
        )

    def _transaction_to_dict(self, transaction: Transaction) -> Dict[str, Any]:
        result = transaction.base_dict()
        result.update({
            'account_id': transaction.account_id,
            'operation_type': transaction.operation_type.value,
            'amount': str(transaction.amount.amount),
            'currency': transaction.currency.code,
            'performed_by': transaction.performed_by,
            'balance_after': str(transaction.balance_after.amount),
            'sequence': transaction.sequence,
        })
        return result

    def _transaction_from_dict(self, data: Dict[str, Any], account: Optional[Account] = None) -> Transaction:
        currency = Currency[data['currency']]
        return Transaction(
            id=data['id'],
            created_at=parse_timestamp(data['created_at']),
            updated_at=parse_timestamp(data['updated_at']),
            account_id=data['account_id'],
            operation_type=OperationType(data['operation_type']),
            amount=Money(Decimal(data['amount']), currency),
            currency=currency,
            performed_by=data['performed_by'],
            balance_after=Money(Decimal(data['balance_after']), currency),
            sequence=data.get('sequence', 0),
            account=account
        )
