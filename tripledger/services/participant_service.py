"""Participant registry: trip membership and access gating"""
from typing import List
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.core.exceptions import (AuthorizationError, ConflictError,
                                        NotFoundError, ValidationError)
from tripledger.models.invitation import InvitationStatus
from tripledger.models.participant import Participant, ParticipantRole
from tripledger.models.user import User
from tripledger.repositories.invitation_repository import InvitationRepository
from tripledger.repositories.participant_repository import ParticipantRepository
from tripledger.schemas.participant import GuestParticipantCreate

NO_ACCESS_MESSAGE = "You do not have access to this trip or it does not exist"


class ParticipantService:
    """Service for participant operations"""

    @staticmethod
    async def ensure_access(trip_id: UUID, user_id: UUID, db: AsyncSession) -> Participant:
        """
        Resolve the caller's participant record for a trip.

        A missing trip and a trip the caller is not part of look the same,
        so non-members learn nothing about which trips exist.

        Args:
            trip_id: Trip ID
            user_id: Acting user ID
            db: Database session

        Returns:
            The caller's participant record

        Raises:
            AuthorizationError: If the caller is not a participant
        """
        participant = await ParticipantRepository.get_by_trip_and_user(db, trip_id, user_id)
        if not participant:
            raise AuthorizationError(NO_ACCESS_MESSAGE)
        return participant

    @staticmethod
    async def ensure_owner(
        trip_id: UUID, user_id: UUID, db: AsyncSession, action: str = "perform this action"
    ) -> Participant:
        """
        Like ensure_access, but the caller must own the trip.

        Raises:
            AuthorizationError: If the caller is not a participant or not the owner
        """
        participant = await ParticipantService.ensure_access(trip_id, user_id, db)
        if participant.role != ParticipantRole.OWNER:
            raise AuthorizationError(f"Only the trip owner can {action}")
        return participant

    @staticmethod
    async def list_participants(
        trip_id: UUID, user_id: UUID, db: AsyncSession
    ) -> List[Participant]:
        await ParticipantService.ensure_access(trip_id, user_id, db)
        return await ParticipantRepository.get_by_trip(db, trip_id)

    @staticmethod
    async def add_guest(
        guest_data: GuestParticipantCreate, user_id: UUID, db: AsyncSession
    ) -> Participant:
        """
        Add a guest (a person without an account) to a trip.

        Args:
            guest_data: Guest name and optional email
            user_id: Acting user ID
            db: Database session

        Returns:
            Created guest participant

        Raises:
            AuthorizationError: If the caller is not a participant
            ConflictError: If the email already belongs to a guest or a
                registered participant of the trip
        """
        await ParticipantService.ensure_access(guest_data.trip_id, user_id, db)

        if guest_data.guest_email:
            existing_guest = await ParticipantRepository.get_guest_by_email(
                db, guest_data.trip_id, guest_data.guest_email
            )
            if existing_guest:
                raise ConflictError(
                    f"A guest with email '{guest_data.guest_email}' is already in this trip"
                )

            existing_member = await ParticipantRepository.get_by_trip_and_email(
                db, guest_data.trip_id, guest_data.guest_email
            )
            if existing_member:
                raise ConflictError(
                    f"A registered user with email '{guest_data.guest_email}' is already in this trip"
                )

        participant = await ParticipantRepository.create(
            db,
            Participant(
                trip_id=guest_data.trip_id,
                guest_name=guest_data.guest_name.strip(),
                guest_email=guest_data.guest_email,
                role=ParticipantRole.MEMBER,
            ),
        )
        await db.commit()

        logger.info("Guest {} added to trip {}", participant.guest_name, guest_data.trip_id)
        return participant

    @staticmethod
    async def upgrade_guest_to_account(
        guest: Participant, user: User, db: AsyncSession
    ) -> Participant:
        """
        Link a guest participant to an account in place.

        The row keeps its id, guest name and email, so every split and payer
        reference to it stays valid. The linked invitation is cleared.

        Raises:
            ValidationError: If the participant is already linked to an account
            ConflictError: If the account already participates in the trip
        """
        if not guest.is_guest:
            raise ValidationError("Participant is already linked to an account")

        existing = await ParticipantRepository.get_by_trip_and_user(db, guest.trip_id, user.id)
        if existing:
            raise ConflictError("This account is already a participant of the trip")

        guest.user_id = user.id
        guest.invitation_id = None
        await db.flush()
        await db.refresh(guest)

        logger.info("Guest participant {} linked to user {}", guest.id, user.id)
        return guest

    @staticmethod
    async def remove_participant(
        trip_id: UUID, participant_id: UUID, requester_id: UUID, db: AsyncSession
    ) -> None:
        """
        Remove a participant from a trip (owner only).

        Args:
            trip_id: Trip ID
            participant_id: Participant to remove
            requester_id: Acting user ID
            db: Database session

        Raises:
            AuthorizationError: If the requester is not the trip owner
            ValidationError: If the requester targets themself, or the
                participant still appears in expenses
            NotFoundError: If the participant is not in the trip
        """
        await ParticipantService.ensure_owner(
            trip_id, requester_id, db, action="remove participants"
        )

        target = await ParticipantRepository.get_in_trip(db, trip_id, participant_id)
        if not target:
            raise NotFoundError("Participant not found")

        if target.user_id == requester_id:
            raise ValidationError("You cannot remove yourself from the trip")

        if await ParticipantRepository.has_ledger_entries(db, target.id):
            raise ValidationError(
                "Participant is the payer or part of a split of existing expenses"
            )

        if target.invitation_id:
            invitation = await InvitationRepository.get_by_id(db, target.invitation_id)
            if invitation and invitation.status == InvitationStatus.PENDING:
                await InvitationRepository.set_status(
                    db, invitation, InvitationStatus.CANCELLED
                )

        await ParticipantRepository.delete(db, target)
        await db.commit()

        logger.info("Participant {} removed from trip {}", participant_id, trip_id)

