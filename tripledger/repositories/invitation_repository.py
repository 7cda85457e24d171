"""Invitation data access"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.models.invitation import Invitation, InvitationStatus


class InvitationRepository:
    """Repository for Invitation database operations"""

    @staticmethod
    async def create(db: AsyncSession, invitation: Invitation) -> Invitation:
        db.add(invitation)
        await db.flush()
        await db.refresh(invitation)
        return invitation

    @staticmethod
    async def get_by_id(db: AsyncSession, invitation_id: UUID) -> Optional[Invitation]:
        result = await db.execute(select(Invitation).where(Invitation.id == invitation_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_token(db: AsyncSession, token: str) -> Optional[Invitation]:
        result = await db.execute(select(Invitation).where(Invitation.token == token))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_pending_for_email(
        db: AsyncSession, trip_id: UUID, email: str
    ) -> Optional[Invitation]:
        result = await db.execute(
            select(Invitation).where(
                and_(
                    Invitation.trip_id == trip_id,
                    Invitation.email == email,
                    Invitation.status == InvitationStatus.PENDING,
                )
            )
        )
        return result.scalars().first()

    @staticmethod
    async def get_pending_by_trip(db: AsyncSession, trip_id: UUID) -> List[Invitation]:
        result = await db.execute(
            select(Invitation)
            .where(
                and_(
                    Invitation.trip_id == trip_id,
                    Invitation.status == InvitationStatus.PENDING,
                )
            )
            .order_by(Invitation.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def set_status(
        db: AsyncSession, invitation: Invitation, status: InvitationStatus
    ) -> Invitation:
        invitation.status = status
        await db.flush()
        return invitation
