"""
Account and posting endpoints
"""

from fastapi import APIRouter, Depends, status

from .auth import get_ledger_system, require_customer
from .schemas import DepositRequest, WithdrawRequest, TransferRequest
from ..identity import CallerIdentity
from ..projection import project_accounts, project_transaction, project_transactions
from ..system import LedgerSystem


router = APIRouter()


@router.get("/customer/{customer_id}")
def get_customer_accounts(
    customer_id: str,
    caller: CallerIdentity = Depends(require_customer),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Get a customer's accounts with their transactions"""
    accounts = system.ledger.accounts_of(caller, customer_id)
    return [view.to_dict() for view in project_accounts(accounts)]


@router.get("/{account_id}/transactions")
def get_account_transactions(
    account_id: str,
    caller: CallerIdentity = Depends(require_customer),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Get transaction history for an account, most recent first"""
    transactions = system.ledger.transactions_of(caller, account_id)
    return [view.to_dict() for view in project_transactions(transactions)]


@router.post("/{account_id}/deposit", status_code=status.HTTP_201_CREATED)
def deposit(
    account_id: str,
    request: DepositRequest,
    caller: CallerIdentity = Depends(require_customer),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Deposit funds into an account"""
    transaction = system.ledger.deposit(caller, account_id, request.amount)
    return project_transaction(transaction).to_dict()


@router.post("/{account_id}/withdraw", status_code=status.HTTP_201_CREATED)
def withdraw(
    account_id: str,
    request: WithdrawRequest,
    caller: CallerIdentity = Depends(require_customer),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Withdraw funds from an account"""
    transaction = system.ledger.withdraw(caller, account_id, request.amount)
    return project_transaction(transaction).to_dict()


@router.post("/{account_id}/transfer", status_code=status.HTTP_201_CREATED)
def transfer(
    account_id: str,
    request: TransferRequest,
    caller: CallerIdentity = Depends(require_customer),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Transfer funds to another account; returns the debit and credit legs"""
    transactions = system.ledger.transfer(caller, account_id, request.to_account_id, request.amount)
    return [view.to_dict() for view in project_transactions(transactions)]
