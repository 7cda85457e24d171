"""Participant data access"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.models.expense import Expense
from tripledger.models.expense_split import ExpenseSplit
from tripledger.models.participant import Participant
from tripledger.models.user import User


class ParticipantRepository:
    """Repository for Participant database operations"""

    @staticmethod
    async def create(db: AsyncSession, participant: Participant) -> Participant:
        """
        Create a new participant.

        Args:
            db: Database session
            participant: Participant object to create

        Returns:
            Created participant
        """
        db.add(participant)
        await db.flush()
        await db.refresh(participant)
        return participant

    @staticmethod
    async def get_by_id(db: AsyncSession, participant_id: UUID) -> Optional[Participant]:
        result = await db.execute(
            select(Participant).where(Participant.id == participant_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_in_trip(
        db: AsyncSession, trip_id: UUID, participant_id: UUID
    ) -> Optional[Participant]:
        """
        Get a participant only if it belongs to the given trip.

        Args:
            db: Database session
            trip_id: Trip UUID
            participant_id: Participant UUID

        Returns:
            Participant if found in the trip, None otherwise
        """
        result = await db.execute(
            select(Participant).where(
                and_(Participant.id == participant_id, Participant.trip_id == trip_id)
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_trip_and_user(
        db: AsyncSession, trip_id: UUID, user_id: UUID
    ) -> Optional[Participant]:
        """
        Get the participant record of an account in a trip.

        Args:
            db: Database session
            trip_id: Trip UUID
            user_id: User UUID

        Returns:
            Participant if the user belongs to the trip, None otherwise
        """
        result = await db.execute(
            select(Participant).where(
                and_(Participant.trip_id == trip_id, Participant.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_guest_by_email(
        db: AsyncSession, trip_id: UUID, email: str
    ) -> Optional[Participant]:
        """Get a not-yet-upgraded guest of a trip by email."""
        result = await db.execute(
            select(Participant).where(
                and_(
                    Participant.trip_id == trip_id,
                    Participant.user_id.is_(None),
                    func.lower(Participant.guest_email) == email.lower(),
                )
            )
        )
        return result.scalars().first()

    @staticmethod
    async def get_by_trip_and_email(
        db: AsyncSession, trip_id: UUID, email: str
    ) -> Optional[Participant]:
        """Get the participant of a trip whose linked account has this email."""
        result = await db.execute(
            select(Participant)
            .join(User, User.id == Participant.user_id)
            .where(
                and_(
                    Participant.trip_id == trip_id,
                    func.lower(User.email) == email.lower(),
                )
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_invitation(
        db: AsyncSession, invitation_id: UUID
    ) -> Optional[Participant]:
        result = await db.execute(
            select(Participant).where(Participant.invitation_id == invitation_id)
        )
        return result.scalars().first()

    @staticmethod
    async def get_by_trip(db: AsyncSession, trip_id: UUID) -> List[Participant]:
        """
        Get all participants of a trip in creation order.

        Args:
            db: Database session
            trip_id: Trip UUID

        Returns:
            List of participants
        """
        result = await db.execute(
            select(Participant)
            .where(Participant.trip_id == trip_id)
            .order_by(Participant.created_at, Participant.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def has_ledger_entries(db: AsyncSession, participant_id: UUID) -> bool:
        """True if the participant paid for, or shares in, any expense."""
        result = await db.execute(
            select(func.count(Expense.id)).where(
                or_(
                    Expense.paid_by_participant_id == participant_id,
                    Expense.id.in_(
                        select(ExpenseSplit.expense_id).where(
                            ExpenseSplit.participant_id == participant_id
                        )
                    ),
                )
            )
        )
        return result.scalar_one() > 0

    @staticmethod
    async def delete(db: AsyncSession, participant: Participant) -> None:
        await db.delete(participant)
        await db.flush()
