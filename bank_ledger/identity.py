"""
Caller identity and customer resolution.

The authenticated caller is passed explicitly into every ledger operation
as a ``CallerIdentity``; there is no process-wide security context.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, TYPE_CHECKING

from .customers import Customer
from .errors import NotFoundError

if TYPE_CHECKING:
    from .store import LedgerStore


@dataclass(frozen=True)
class CallerIdentity:
    """Who is calling: token subject, preferred username and realm roles"""
    subject: str
    username: Optional[str] = None
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def display_name(self) -> str:
        """Name recorded as the performer of a transaction"""
        return self.username or self.subject

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> 'CallerIdentity':
        """
        Build an identity from decoded token claims.

        Roles are read from ``realm_access.roles``.
        """
        subject = claims.get("sub")
        if not subject:
            raise ValueError("Token has no subject")

        realm_access = claims.get("realm_access") or {}
        roles = realm_access.get("roles") or []

        return cls(
            subject=str(subject),
            username=claims.get("preferred_username"),
            roles=frozenset(str(role) for role in roles)
        )


class IdentityResolver:
    """Maps an authenticated caller to their Customer record"""

    def __init__(self, store: 'LedgerStore'):
        self.store = store

    def current_customer(self, caller: CallerIdentity) -> Customer:
        """
        Resolve the caller's customer record

        Raises:
            NotFoundError: If no customer matches the caller's subject
        """
        customer = self.store.find_customer_by_identity_ref(caller.subject)
        if not customer:
            raise NotFoundError("Customer not found")
        return customer
