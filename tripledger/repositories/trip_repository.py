"""Trip data access"""
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete as sql_delete
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.models.budget import Budget
from tripledger.models.card import Card
from tripledger.models.expense import Expense
from tripledger.models.expense_split import ExpenseSplit
from tripledger.models.invitation import Invitation
from tripledger.models.participant import Participant, ParticipantRole
from tripledger.models.trip import Trip


class TripRepository:
    """Repository for Trip database operations"""

    @staticmethod
    async def create(db: AsyncSession, trip: Trip) -> Trip:
        db.add(trip)
        await db.flush()
        await db.refresh(trip)
        return trip

    @staticmethod
    async def get_by_id(db: AsyncSession, trip_id: UUID) -> Optional[Trip]:
        result = await db.execute(select(Trip).where(Trip.id == trip_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_trips(
        db: AsyncSession, user_id: UUID
    ) -> List[Tuple[Trip, ParticipantRole]]:
        """
        Get trips the user participates in, newest first.

        Returns:
            List of (trip, role of the user in that trip)
        """
        result = await db.execute(
            select(Trip, Participant.role)
            .join(Participant, Participant.trip_id == Trip.id)
            .where(Participant.user_id == user_id)
            .order_by(Trip.created_at.desc())
        )
        return [(trip, role) for trip, role in result.all()]

    @staticmethod
    async def delete_cascade(db: AsyncSession, trip_id: UUID) -> None:
        """
        Delete a trip and everything that belongs to it.

        Children are removed explicitly so the cascade does not depend on the
        backend enforcing ON DELETE rules.
        """
        expense_ids = select(Expense.id).where(Expense.trip_id == trip_id)
        await db.execute(
            sql_delete(ExpenseSplit).where(ExpenseSplit.expense_id.in_(expense_ids))
        )
        await db.execute(sql_delete(Expense).where(Expense.trip_id == trip_id))
        await db.execute(sql_delete(Budget).where(Budget.trip_id == trip_id))
        await db.execute(
            update(Card).where(Card.trip_id == trip_id).values(trip_id=None)
        )
        await db.execute(sql_delete(Participant).where(Participant.trip_id == trip_id))
        await db.execute(sql_delete(Invitation).where(Invitation.trip_id == trip_id))
        await db.execute(sql_delete(Trip).where(Trip.id == trip_id))
        await db.flush()
