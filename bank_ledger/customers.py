"""
Customer Management Module

Customers are created at onboarding and are immutable afterwards. Each
customer carries an opaque identity reference (the subject of the caller's
access token) used to resolve "who is calling".
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING
import uuid
import re

from .storage import StorageRecord
from .errors import InvalidArgumentError
from .logging_config import get_logger, log_action

if TYPE_CHECKING:
    from .store import LedgerStore


EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


@dataclass
class Customer(StorageRecord):
    """
    Customer profile
    """
    identity_ref: str
    name: str
    email: str

    def __post_init__(self):
        if not self.identity_ref or not self.identity_ref.strip():
            raise ValueError("Customer identity reference is required")

        if not self.name or not self.name.strip():
            raise ValueError("Customer name is required")

        if not EMAIL_PATTERN.match(self.email):
            raise ValueError("Invalid email format")


class CustomerManager:
    """
    Onboards customers and answers customer lookups
    """

    def __init__(self, store: 'LedgerStore'):
        self.store = store
        self.logger = get_logger("bank_ledger.customers")

    def create_customer(self, identity_ref: str, name: str, email: str) -> Customer:
        """
        Onboard a new customer

        Args:
            identity_ref: External identity reference (token subject)
            name: Display name
            email: Contact email

        Returns:
            Created Customer object

        Raises:
            InvalidArgumentError: If the identity reference is already taken
                or a field is invalid
        """
        now = datetime.now(timezone.utc)

        try:
            customer = Customer(
                id=str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
                identity_ref=identity_ref,
                name=name,
                email=email
            )
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e

        with self.store.atomic():
            if self.store.find_customer_by_identity_ref(identity_ref):
                raise InvalidArgumentError("A customer with this identity reference already exists")
            self.store.save_customer(customer)

        log_action(
            self.logger, "info", "Customer created",
            action="create_customer", resource=f"customer:{customer.id}",
            extra={"customer_id": customer.id}
        )
        return customer

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        """Get customer by ID"""
        return self.store.get_customer(customer_id)

    def get_customer_by_identity_ref(self, identity_ref: str) -> Optional[Customer]:
        """Get customer by external identity reference"""
        return self.store.find_customer_by_identity_ref(identity_ref)

    def list_customers(self) -> List[Customer]:
        """List all customers"""
        return self.store.list_customers()
