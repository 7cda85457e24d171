"""Participant and invitation endpoints"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.api.deps import get_current_user
from tripledger.database import get_db
from tripledger.models.user import User
from tripledger.schemas.participant import (AcceptInvitationResponse,
                                            GuestInvitationCreate,
                                            GuestParticipantCreate,
                                            InvitationCreate, InvitationInfo,
                                            InvitationResponse,
                                            ParticipantResponse)
from tripledger.services.invitation_service import InvitationService
from tripledger.services.participant_service import ParticipantService

router = APIRouter(prefix="/participants", tags=["Participants"])


@router.get("/trip/{trip_id}", response_model=List[ParticipantResponse])
async def list_participants(
    trip_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List the participants of a trip.

    Raises:
        403: If the caller is not a participant of the trip
    """
    participants = await ParticipantService.list_participants(trip_id, current_user.id, db)
    return [ParticipantResponse.model_validate(p) for p in participants]


@router.post("/guest", response_model=ParticipantResponse, status_code=status.HTTP_201_CREATED)
async def add_guest(
    guest_data: GuestParticipantCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Add a guest (a person without an account) to a trip.

    Raises:
        403: If the caller is not a participant of the trip
        409: If the email already belongs to a guest or member of the trip
    """
    guest = await ParticipantService.add_guest(guest_data, current_user.id, db)
    return ParticipantResponse.model_validate(guest)


@router.delete(
    "/trip/{trip_id}/participant/{participant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_participant(
    trip_id: UUID,
    participant_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Remove a participant from a trip (owner only).

    Raises:
        400: Self-removal, or the participant has expenses
        403: If the caller is not the trip owner
        404: If the participant is not in the trip
    """
    await ParticipantService.remove_participant(trip_id, participant_id, current_user.id, db)


@router.post("/invite", response_model=InvitationResponse, status_code=status.HTTP_201_CREATED)
async def invite(
    invitation_data: InvitationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invitation = await InvitationService.invite(invitation_data, current_user.id, db)
    return InvitationResponse.model_validate(invitation)


@router.post(
    "/guest/{participant_id}/invite",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_guest(
    participant_id: UUID,
    trip_id: UUID,
    invitation_data: GuestInvitationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Invite a guest to link an account; accepting keeps the same participant.

    Args:
        participant_id: Guest participant ID
        trip_id: Trip of the guest (query parameter)
    """
    invitation = await InvitationService.invite_guest(
        trip_id, participant_id, invitation_data, current_user.id, db
    )
    return InvitationResponse.model_validate(invitation)


@router.get("/invitation/{token}", response_model=InvitationInfo)
async def get_invitation(token: str, db: AsyncSession = Depends(get_db)):
    """Public details of an invitation link; no authentication required."""
    return await InvitationService.get_invitation_info(token, db)


@router.post("/invitation/{token}/accept", response_model=AcceptInvitationResponse)
async def accept_invitation(
    token: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Accept an invitation as the authenticated user.

    Raises:
        400: Invitation no longer pending or expired
        403: Invitation addressed to another email
        404: Unknown token
    """
    message, participant = await InvitationService.accept_invitation(token, current_user, db)
    return AcceptInvitationResponse(
        message=message, participant=ParticipantResponse.model_validate(participant)
    )


@router.delete("/invitation/{invitation_id}", response_model=InvitationResponse)
async def cancel_invitation(
    invitation_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invitation = await InvitationService.cancel_invitation(invitation_id, current_user.id, db)
    return InvitationResponse.model_validate(invitation)


@router.get("/trip/{trip_id}/invitations", response_model=List[InvitationResponse])
async def list_pending_invitations(
    trip_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invitations = await InvitationService.list_pending(trip_id, current_user.id, db)
    return [InvitationResponse.model_validate(i) for i in invitations]
