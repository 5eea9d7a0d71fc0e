"""
Ledger System Wiring

Builds storage, the ledger store, managers and the ledger service from
configuration, so the API, demo seeding and tests all share one assembly.
"""

from typing import Optional

from .config import LedgerConfig, get_config
from .currency import Currency
from .storage import StorageInterface, create_storage
from .store import LedgerStore
from .customers import CustomerManager
from .accounts import AccountManager
from .identity import IdentityResolver
from .ledger import LedgerService


class LedgerSystem:
    """Bank ledger with all components initialized"""

    def __init__(self, storage: Optional[StorageInterface] = None, config: Optional[LedgerConfig] = None):
        self.config = config or get_config()

        # Initialize storage
        if storage is None:
            storage = create_storage(self.config.database_url)
        self.storage = storage

        # Initialize core components
        self.store = LedgerStore(self.storage)
        self.customer_manager = CustomerManager(self.store)
        self.account_manager = AccountManager(
            self.store, default_currency=Currency.from_code(self.config.default_currency)
        )
        self.identity_resolver = IdentityResolver(self.store)
        self.ledger = LedgerService(self.store, self.identity_resolver)

    def close(self) -> None:
        self.storage.close()
