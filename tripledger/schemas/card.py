"""Card schemas"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tripledger.models.card import CardType


class CardCreate(BaseModel):
    """Schema for registering a card"""

    name: str = Field(..., min_length=1, max_length=100)
    last_four_digits: str = Field(..., pattern=r"^\d{4}$")
    type: CardType = CardType.OTHER
    trip_id: Optional[UUID] = None


class CardUpdate(BaseModel):
    """Schema for updating a card"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    type: Optional[CardType] = None
    is_active: Optional[bool] = None


class CardResponse(BaseModel):
    """Response schema for a card"""

    id: UUID
    user_id: UUID
    trip_id: Optional[UUID] = None
    name: str
    last_four_digits: str
    type: CardType
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
