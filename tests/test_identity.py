"""
Tests for caller identity and customer resolution
"""

import pytest

from bank_ledger.storage import InMemoryStorage
from bank_ledger.store import LedgerStore
from bank_ledger.customers import CustomerManager
from bank_ledger.identity import CallerIdentity, IdentityResolver
from bank_ledger.errors import NotFoundError


class TestCallerIdentity:
    """Test building identities from token claims"""

    def test_from_claims(self):
        """Test subject, username and realm roles are read"""
        caller = CallerIdentity.from_claims({
            "sub": "11111111-1111-1111-1111-111111111111",
            "preferred_username": "jane",
            "realm_access": {"roles": ["customer", "offline_access"]},
        })

        assert caller.subject == "11111111-1111-1111-1111-111111111111"
        assert caller.username == "jane"
        assert caller.has_role("customer")
        assert not caller.has_role("admin")
        assert caller.display_name == "jane"

    def test_from_minimal_claims(self):
        """Test a token with only a subject"""
        caller = CallerIdentity.from_claims({"sub": "kc-1"})

        assert caller.username is None
        assert caller.roles == frozenset()
        assert caller.display_name == "kc-1"

    def test_missing_subject_rejected(self):
        """Test a token without subject cannot identify a caller"""
        with pytest.raises(ValueError, match="no subject"):
            CallerIdentity.from_claims({"preferred_username": "jane"})

    def test_identity_is_immutable(self):
        """Test identities are frozen values"""
        caller = CallerIdentity(subject="kc-1")
        with pytest.raises(AttributeError):
            caller.subject = "kc-2"
        assert caller == CallerIdentity(subject="kc-1")


class TestIdentityResolver:
    """Test resolving callers to customers"""

    def setup_method(self):
        """Set up test environment"""
        self.store = LedgerStore(InMemoryStorage())
        self.customer = CustomerManager(self.store).create_customer(
            "kc-jane", "Jane Smith", "jane@example.com"
        )
        self.resolver = IdentityResolver(self.store)

    def test_current_customer(self):
        """Test the caller's subject selects their customer"""
        customer = self.resolver.current_customer(CallerIdentity(subject="kc-jane"))
        assert customer == self.customer

    def test_unknown_caller(self):
        """Test callers without a customer record"""
        with pytest.raises(NotFoundError, match="Customer not found"):
            self.resolver.current_customer(CallerIdentity(subject="kc-nobody"))
