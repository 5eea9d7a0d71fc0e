"""
Pydantic schemas for API requests
"""

from decimal import Decimal
from pydantic import BaseModel, Field, field_validator


class AmountModel(BaseModel):
    amount: Decimal = Field(..., description="Positive decimal amount in the account currency")

    @field_validator("amount")
    @classmethod
    def amount_must_be_positive(cls, value: Decimal) -> Decimal:
        if not value.is_finite() or value <= 0:
            raise ValueError("amount must be greater than 0")
        return value


# Posting schemas
class DepositRequest(AmountModel):
    pass


class WithdrawRequest(AmountModel):
    pass


class TransferRequest(AmountModel):
    to_account_id: str = Field(..., min_length=1, description="Destination account ID")
