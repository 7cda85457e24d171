"""Trip invitations and guest upgrades"""
import secrets
from datetime import datetime, timedelta
from typing import List, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.config import get_settings
from tripledger.core.exceptions import (AuthorizationError, ConflictError,
                                        NotFoundError, ValidationError)
from tripledger.models.invitation import Invitation, InvitationStatus
from tripledger.models.participant import Participant, ParticipantRole
from tripledger.models.user import User
from tripledger.repositories.invitation_repository import InvitationRepository
from tripledger.repositories.participant_repository import ParticipantRepository
from tripledger.repositories.trip_repository import TripRepository
from tripledger.repositories.user_repository import UserRepository
from tripledger.schemas.participant import (GuestInvitationCreate,
                                            InvitationCreate, InvitationInfo)
from tripledger.services.participant_service import ParticipantService

settings = get_settings()


class InvitationService:
    """Service for invitation operations"""

    @staticmethod
    async def _issue(
        trip_id: UUID, email: str, invited_by: UUID, db: AsyncSession
    ) -> Invitation:
        """Create a pending invitation after the duplicate checks."""
        existing_member = await ParticipantRepository.get_by_trip_and_email(db, trip_id, email)
        if existing_member:
            raise ConflictError("This user is already a participant of the trip")

        pending = await InvitationRepository.get_pending_for_email(db, trip_id, email)
        if pending:
            raise ConflictError("There is already a pending invitation for this email")

        invitation = await InvitationRepository.create(
            db,
            Invitation(
                trip_id=trip_id,
                email=email,
                invited_by_user_id=invited_by,
                token=secrets.token_hex(32),
                status=InvitationStatus.PENDING,
                expires_at=datetime.utcnow() + timedelta(days=settings.invitation_expire_days),
            ),
        )
        # Delivery is handled outside this service; the token is returned to the owner
        logger.info("Invitation {} issued to {} for trip {}", invitation.id, email, trip_id)
        return invitation

    @staticmethod
    async def invite(
        invitation_data: InvitationCreate, user_id: UUID, db: AsyncSession
    ) -> Invitation:
        """
        Invite an email address to a trip (owner only).

        Raises:
            AuthorizationError: If the caller is not the trip owner
            ConflictError: If the email is already a participant or invited
        """
        await ParticipantService.ensure_owner(
            invitation_data.trip_id, user_id, db, action="invite participants"
        )
        invitation = await InvitationService._issue(
            invitation_data.trip_id, invitation_data.email, user_id, db
        )
        await db.commit()
        return invitation

    @staticmethod
    async def invite_guest(
        trip_id: UUID,
        participant_id: UUID,
        invitation_data: GuestInvitationCreate,
        user_id: UUID,
        db: AsyncSession,
    ) -> Invitation:
        """
        Invite a guest participant to link an account.

        Accepting the invitation upgrades the same participant record.

        Raises:
            AuthorizationError: If the caller is not the trip owner
            NotFoundError: If the participant is not in the trip
            ValidationError: If the participant is not a guest
            ConflictError: If the email is already a participant or invited
        """
        await ParticipantService.ensure_owner(trip_id, user_id, db, action="invite participants")

        guest = await ParticipantRepository.get_in_trip(db, trip_id, participant_id)
        if not guest:
            raise NotFoundError("Participant not found")
        if not guest.is_guest:
            raise ValidationError("Participant is already linked to an account")

        other_guest = await ParticipantRepository.get_guest_by_email(
            db, trip_id, invitation_data.email
        )
        if other_guest and other_guest.id != guest.id:
            raise ConflictError(
                f"A guest with email '{invitation_data.email}' is already in this trip"
            )

        invitation = await InvitationService._issue(trip_id, invitation_data.email, user_id, db)
        guest.guest_email = invitation_data.email
        guest.invitation_id = invitation.id
        await db.commit()
        return invitation

    @staticmethod
    async def _get_pending(token: str, db: AsyncSession) -> Invitation:
        invitation = await InvitationRepository.get_by_token(db, token)
        if not invitation:
            raise NotFoundError("Invitation not found")

        if invitation.status != InvitationStatus.PENDING:
            raise ValidationError(f"This invitation is already {invitation.status.value}")

        if datetime.utcnow() > invitation.expires_at:
            await InvitationRepository.set_status(db, invitation, InvitationStatus.EXPIRED)
            await db.commit()
            raise ValidationError("This invitation has expired")

        return invitation

    @staticmethod
    async def get_invitation_info(token: str, db: AsyncSession) -> InvitationInfo:
        """
        Public details behind an invitation link.

        Raises:
            NotFoundError: Unknown token
            ValidationError: Invitation no longer pending or expired
        """
        invitation = await InvitationService._get_pending(token, db)
        trip = await TripRepository.get_by_id(db, invitation.trip_id)
        inviter = await UserRepository.get_by_id(db, invitation.invited_by_user_id)
        invitee = await UserRepository.get_by_email(db, invitation.email)

        return InvitationInfo(
            trip_id=invitation.trip_id,
            trip_name=trip.name if trip else "",
            email=invitation.email,
            invited_by=inviter.display_name if inviter else "",
            expires_at=invitation.expires_at,
            user_exists=invitee is not None,
        )

    @staticmethod
    async def accept_invitation(
        token: str, user: User, db: AsyncSession
    ) -> Tuple[str, Participant]:
        """
        Accept an invitation as the authenticated user.

        A guest linked to the invitation is upgraded in place; otherwise a new
        member participant is created unless the user already participates.

        Returns:
            (message, participant)

        Raises:
            NotFoundError: Unknown token
            ValidationError: Invitation no longer pending or expired
            AuthorizationError: Invitation addressed to another email
        """
        invitation = await InvitationService._get_pending(token, db)

        if user.email.lower() != invitation.email.lower():
            raise AuthorizationError(
                "This invitation was sent to a different email address"
            )

        existing = await ParticipantRepository.get_by_trip_and_user(db, invitation.trip_id, user.id)
        guest = await ParticipantRepository.get_by_invitation(db, invitation.id)

        if existing:
            message = "You are already a participant of this trip"
            participant = existing
            if guest is not None:
                guest.invitation_id = None
        elif guest is not None:
            message = "Your guest profile is now linked to your account"
            participant = await ParticipantService.upgrade_guest_to_account(guest, user, db)
        else:
            message = "You have joined the trip"
            participant = await ParticipantRepository.create(
                db,
                Participant(
                    trip_id=invitation.trip_id,
                    user_id=user.id,
                    role=ParticipantRole.MEMBER,
                ),
            )

        await InvitationRepository.set_status(db, invitation, InvitationStatus.ACCEPTED)
        await db.commit()

        logger.info("Invitation {} accepted by user {}", invitation.id, user.id)
        return message, participant

    @staticmethod
    async def cancel_invitation(
        invitation_id: UUID, user_id: UUID, db: AsyncSession
    ) -> Invitation:
        """
        Cancel a pending invitation (owner only).

        Raises:
            NotFoundError: Unknown invitation
            AuthorizationError: Caller is not the trip owner
            ValidationError: Invitation is not pending
        """
        invitation = await InvitationRepository.get_by_id(db, invitation_id)
        if not invitation:
            raise NotFoundError("Invitation not found")

        await ParticipantService.ensure_owner(
            invitation.trip_id, user_id, db, action="cancel invitations"
        )

        if invitation.status != InvitationStatus.PENDING:
            raise ValidationError("Only pending invitations can be cancelled")

        await InvitationRepository.set_status(db, invitation, InvitationStatus.CANCELLED)

        guest = await ParticipantRepository.get_by_invitation(db, invitation.id)
        if guest is not None:
            guest.invitation_id = None

        await db.commit()
        logger.info("Invitation {} cancelled", invitation_id)
        return invitation

    @staticmethod
    async def list_pending(trip_id: UUID, user_id: UUID, db: AsyncSession) -> List[Invitation]:
        await ParticipantService.ensure_owner(
            trip_id, user_id, db, action="view pending invitations"
        )
        return await InvitationRepository.get_pending_by_trip(db, trip_id)
