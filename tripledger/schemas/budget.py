"""Budget schemas"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from tripledger.schemas.common import check_currency, to_decimal


class BudgetCreate(BaseModel):
    """Schema for creating a budget"""

    trip_id: UUID
    name: str = Field(..., min_length=2, max_length=100)
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    currency: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        return to_decimal(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return check_currency(v)


class BudgetUpdate(BaseModel):
    """Schema for updating a budget; `spent` is not writable"""

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    amount: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    currency: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        return to_decimal(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return check_currency(v)


class BudgetResponse(BaseModel):
    """Response schema for a budget"""

    id: UUID
    trip_id: UUID
    name: str
    amount: Decimal
    currency: str
    spent: Decimal
    created_by_user_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def remaining(self) -> Decimal:
        return self.amount - self.spent
