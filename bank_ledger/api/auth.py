"""
Authentication and authorization dependencies
"""

from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import LedgerConfig
from ..identity import CallerIdentity
from ..system import LedgerSystem


# JWT Security
security = HTTPBearer(auto_error=False)


# Dependency to get the ledger system
def get_ledger_system(request: Request) -> LedgerSystem:
    return request.app.state.ledger_system


def decode_token(token: str, config: LedgerConfig) -> Dict[str, Any]:
    """Verify a bearer token's signature, expiry and (if configured) audience"""
    return jwt.decode(
        token,
        config.jwt_secret,
        algorithms=[config.jwt_algorithm],
        audience=config.jwt_audience,
        options={"verify_aud": config.jwt_audience is not None}
    )


# Authentication Dependencies
def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    system: LedgerSystem = Depends(get_ledger_system)
) -> CallerIdentity:
    """Dependency that validates the JWT and returns the calling identity"""
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        claims = decode_token(credentials.credentials, system.config)
        return CallerIdentity.from_claims(claims)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except (jwt.InvalidTokenError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")


def require_customer(
    caller: CallerIdentity = Depends(get_caller),
    system: LedgerSystem = Depends(get_ledger_system)
) -> CallerIdentity:
    """Dependency that additionally requires the configured customer role"""
    if not caller.has_role(system.config.required_role):
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return caller
