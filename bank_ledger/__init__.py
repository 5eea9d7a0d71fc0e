"""
Bank Ledger

A small account-ledger service: customers own accounts, accounts hold a
Decimal balance above an overdraft floor, and every balance change is
recorded as an append-only transaction.
"""

__version__ = "1.0.0"
