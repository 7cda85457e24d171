"""Card data access"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.models.card import Card
from tripledger.models.participant import Participant


class CardRepository:
    """Repository for Card database operations"""

    @staticmethod
    async def create(db: AsyncSession, card: Card) -> Card:
        db.add(card)
        await db.flush()
        await db.refresh(card)
        return card

    @staticmethod
    async def get_by_id(db: AsyncSession, card_id: UUID) -> Optional[Card]:
        result = await db.execute(select(Card).where(Card.id == card_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_cards(db: AsyncSession, user_id: UUID) -> List[Card]:
        result = await db.execute(
            select(Card)
            .where(and_(Card.user_id == user_id, Card.is_active.is_(True)))
            .order_by(Card.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_trip_cards(db: AsyncSession, trip_id: UUID) -> List[Card]:
        """
        Active cards usable on a trip.

        That is cards scoped to the trip, plus unscoped cards belonging to
        account participants of the trip.
        """
        member_ids = select(Participant.user_id).where(
            and_(Participant.trip_id == trip_id, Participant.user_id.is_not(None))
        )
        result = await db.execute(
            select(Card)
            .where(
                and_(
                    Card.is_active.is_(True),
                    or_(
                        Card.trip_id == trip_id,
                        and_(Card.trip_id.is_(None), Card.user_id.in_(member_ids)),
                    ),
                )
            )
            .order_by(Card.created_at.desc())
        )
        return list(result.scalars().all())
