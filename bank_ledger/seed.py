"""
Demo Data Module

Creates two demo customers with three EUR accounts and posts a handful of
random deposits, withdrawals and transfers through the ledger service as the
owning customer, so every seeded transaction passes the same checks as a real
request.
"""

import random
from decimal import Decimal
from typing import Optional

from .currency import Currency
from .errors import InvalidArgumentError
from .identity import CallerIdentity
from .logging_config import get_logger, log_action
from .system import LedgerSystem


logger = get_logger("bank_ledger.seed")


DEMO_CUSTOMERS = [
    {
        "identity_ref": "11111111-1111-1111-1111-111111111111",
        "name": "Jane Smith",
        "email": "jane@example.com",
    },
    {
        "identity_ref": "22222222-2222-2222-2222-222222222222",
        "name": "John Doe",
        "email": "john@example.com",
    },
]

# (owner identity_ref, account number, opening balance, overdraft limit)
DEMO_ACCOUNTS = [
    ("11111111-1111-1111-1111-111111111111", "ACC-JANE-001", Decimal("1000.00"), Decimal("-100.00")),
    ("11111111-1111-1111-1111-111111111111", "ACC-JANE-002", Decimal("1500.00"), Decimal("-200.00")),
    ("22222222-2222-2222-2222-222222222222", "ACC-JOHN-001", Decimal("2000.00"), Decimal("-150.00")),
]


def seed_demo_data(
    system: LedgerSystem,
    rng: Optional[random.Random] = None,
    postings_per_account: int = 10
) -> bool:
    """
    Populate an empty ledger with demo customers, accounts and postings

    Args:
        system: Ledger system to populate
        rng: Random source for the postings (seeded in tests)
        postings_per_account: Attempted postings per account

    Returns:
        False if the ledger already had customers and nothing was done
    """
    if system.customer_manager.list_customers():
        logger.info("Ledger already has customers, skipping demo data")
        return False

    rng = rng or random.Random()
    role = system.config.required_role

    callers = {}
    customer_ids = {}
    for profile in DEMO_CUSTOMERS:
        customer = system.customer_manager.create_customer(**profile)
        customer_ids[customer.identity_ref] = customer.id
        callers[customer.id] = CallerIdentity(
            subject=customer.identity_ref,
            username=customer.name,
            roles=frozenset({role})
        )

    accounts = []
    for identity_ref, number, balance, limit in DEMO_ACCOUNTS:
        accounts.append(system.account_manager.open_account(
            customer_id=customer_ids[identity_ref],
            currency=Currency.EUR,
            overdraft_limit=limit,
            opening_balance=balance,
            account_number=number
        ))

    posted = 0
    for account in accounts:
        caller = callers[account.customer_id]
        others = [other for other in accounts if other.id != account.id]
        for _ in range(postings_per_account):
            amount = Decimal(50 + rng.randrange(500))
            operation = rng.choice(("deposit", "withdraw", "transfer"))
            try:
                if operation == "deposit":
                    system.ledger.deposit(caller, account.id, amount)
                elif operation == "withdraw":
                    system.ledger.withdraw(caller, account.id, amount)
                else:
                    target = rng.choice(others)
                    system.ledger.transfer(caller, account.id, target.id, amount)
                posted += 1
            except InvalidArgumentError as e:
                # overdraft limit reached, skip this posting
                logger.debug(f"Skipped demo {operation} on {account.account_number}: {e.message}")

    log_action(
        logger, "info", "Demo data initialized",
        action="seed_demo_data",
        extra={"customers": len(DEMO_CUSTOMERS), "accounts": len(accounts), "postings": posted}
    )
    return True
