"""Trip schemas"""
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tripledger.models.participant import ParticipantRole
from tripledger.schemas.common import check_currency


class TripBase(BaseModel):
    """Fields shared by trip create/update"""

    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class TripCreate(TripBase):
    """Schema for creating a trip"""

    base_currency: Optional[str] = None

    @field_validator("base_currency")
    @classmethod
    def validate_currency(cls, v):
        """Only supported currency codes"""
        return check_currency(v)


class TripUpdate(BaseModel):
    """Schema for updating a trip; every field optional"""

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    base_currency: Optional[str] = None

    @field_validator("base_currency")
    @classmethod
    def validate_currency(cls, v):
        """Only supported currency codes"""
        return check_currency(v)


class TripResponse(BaseModel):
    """Trip response schema"""

    id: UUID
    name: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    base_currency: str
    created_by_user_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TripListItem(TripResponse):
    """Trip as listed for a user, with the user's role in it"""

    user_role: ParticipantRole
