"""
Customer endpoints
"""

from fastapi import APIRouter, Depends

from .auth import get_ledger_system, require_customer
from ..identity import CallerIdentity
from ..system import LedgerSystem


router = APIRouter()


@router.get("/public/customers")
def list_customers(system: LedgerSystem = Depends(get_ledger_system)):
    """List customers (public, used by the login screen)"""
    return [
        {
            "id": customer.id,
            "name": customer.name,
            "email": customer.email
        }
        for customer in system.customer_manager.list_customers()
    ]


@router.get("/customer")
def get_current_customer_id(
    caller: CallerIdentity = Depends(require_customer),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Get the ID of the customer behind the access token"""
    customer = system.identity_resolver.current_customer(caller)
    return customer.id
