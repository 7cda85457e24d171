"""Participant and invitation schemas"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from tripledger.models.invitation import InvitationStatus
from tripledger.models.participant import ParticipantRole
from tripledger.schemas.common import normalise_email


class GuestParticipantCreate(BaseModel):
    """Schema for adding a guest (no account) to a trip"""

    trip_id: UUID
    guest_name: str = Field(..., min_length=2, max_length=100)
    guest_email: Optional[EmailStr] = None

    @field_validator("guest_email")
    @classmethod
    def lower_email(cls, v):
        return normalise_email(v)


class ParticipantResponse(BaseModel):
    """Response schema for a trip participant"""

    id: UUID
    trip_id: UUID
    user_id: Optional[UUID] = None
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    role: ParticipantRole
    invitation_id: Optional[UUID] = None
    is_guest: bool
    display_name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvitationCreate(BaseModel):
    """Schema for inviting an email address to a trip"""

    trip_id: UUID
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return normalise_email(v)


class GuestInvitationCreate(BaseModel):
    """Schema for inviting an existing guest to link an account"""

    email: EmailStr

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return normalise_email(v)


class InvitationResponse(BaseModel):
    """Response schema for an invitation"""

    id: UUID
    trip_id: UUID
    email: str
    token: str
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvitationInfo(BaseModel):
    """Public details behind an invitation link"""

    trip_id: UUID
    trip_name: str
    email: str
    invited_by: str
    expires_at: datetime
    user_exists: bool


class AcceptInvitationResponse(BaseModel):
    """Outcome of accepting an invitation"""

    message: str
    participant: ParticipantResponse
