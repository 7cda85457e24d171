"""Expense schemas"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from tripledger.models.expense import ExpenseStatus, PaymentMethod, SplitType
from tripledger.schemas.common import check_currency, normalise_email, to_decimal


class ParticipantPayer(BaseModel):
    """Expense paid by a participant of the trip"""

    type: Literal["participant"] = "participant"
    participant_id: UUID


class ThirdPartyPayer(BaseModel):
    """Expense paid by someone outside the trip"""

    type: Literal["third_party"] = "third_party"
    name: str = Field(..., min_length=2, max_length=100)
    email: Optional[EmailStr] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return normalise_email(v)


Payer = Annotated[Union[ParticipantPayer, ThirdPartyPayer], Field(discriminator="type")]


class SplitInput(BaseModel):
    """
    Input schema for one split line.

    `amount` is required for manual splits and ignored for equal splits.
    """

    participant_id: UUID
    amount: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)

    @field_validator("amount", "percentage", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal"""
        return to_decimal(v)


class ExpenseCreate(BaseModel):
    """Schema for creating an expense"""

    trip_id: UUID
    budget_id: Optional[UUID] = None
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency: Optional[str] = None
    description: str = Field(..., min_length=3, max_length=500)
    merchant_name: Optional[str] = Field(default=None, max_length=100)
    tags: List[str] = Field(default_factory=list)
    category: Optional[str] = Field(default=None, max_length=50)
    payer: Payer
    status: Optional[ExpenseStatus] = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    card_id: Optional[UUID] = None
    is_divisible: bool = False
    split_type: Optional[SplitType] = None
    splits: Optional[List[SplitInput]] = None
    expense_date: Optional[date] = None

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        return to_decimal(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return check_currency(v)


class ExpenseUpdate(BaseModel):
    """
    Schema for updating an expense.

    Every field is optional; only fields present in the request are applied.
    The trip and the status cannot be changed here (see settle).
    Sending `budget_id: null` unassigns the expense from its budget.
    """

    budget_id: Optional[UUID] = None
    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    currency: Optional[str] = None
    description: Optional[str] = Field(default=None, min_length=3, max_length=500)
    merchant_name: Optional[str] = Field(default=None, max_length=100)
    tags: Optional[List[str]] = None
    category: Optional[str] = Field(default=None, max_length=50)
    payer: Optional[Payer] = None
    payment_method: Optional[PaymentMethod] = None
    card_id: Optional[UUID] = None
    is_divisible: Optional[bool] = None
    split_type: Optional[SplitType] = None
    splits: Optional[List[SplitInput]] = None
    expense_date: Optional[date] = None

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        return to_decimal(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return check_currency(v)


class SplitResponse(BaseModel):
    """Response schema for a split line"""

    participant_id: UUID
    amount: Decimal
    percentage: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)


class ExpenseResponse(BaseModel):
    """Complete expense response schema"""

    id: UUID
    trip_id: UUID
    budget_id: Optional[UUID] = None
    amount: Decimal
    currency: str
    description: str
    merchant_name: Optional[str] = None
    tags: List[str] = []
    category: Optional[str] = None
    payer: Payer
    status: ExpenseStatus
    payment_method: PaymentMethod
    card_id: Optional[UUID] = None
    is_divisible: bool
    split_type: Optional[SplitType] = None
    splits: List[SplitResponse] = []
    created_by_user_id: UUID
    expense_date: date
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
