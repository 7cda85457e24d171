"""Trip business logic"""
from typing import List, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.config import get_settings
from tripledger.core.exceptions import ValidationError
from tripledger.models.participant import Participant, ParticipantRole
from tripledger.models.trip import Trip
from tripledger.repositories.participant_repository import ParticipantRepository
from tripledger.repositories.trip_repository import TripRepository
from tripledger.schemas.trip import TripCreate, TripUpdate
from tripledger.services.participant_service import ParticipantService

settings = get_settings()


class TripService:
    """Service for trip operations"""

    @staticmethod
    async def create_trip(trip_data: TripCreate, user_id: UUID, db: AsyncSession) -> Trip:
        """
        Create a trip with its creator as owner participant.

        Args:
            trip_data: Trip creation data
            user_id: ID of the creating user
            db: Database session

        Returns:
            Created trip
        """
        trip = await TripRepository.create(
            db,
            Trip(
                name=trip_data.name,
                description=trip_data.description,
                start_date=trip_data.start_date,
                end_date=trip_data.end_date,
                base_currency=trip_data.base_currency or settings.default_currency,
                created_by_user_id=user_id,
            ),
        )
        await ParticipantRepository.create(
            db,
            Participant(trip_id=trip.id, user_id=user_id, role=ParticipantRole.OWNER),
        )
        await db.commit()

        logger.info("Trip {} created by user {}", trip.id, user_id)
        return trip

    @staticmethod
    async def list_trips(user_id: UUID, db: AsyncSession) -> List[Tuple[Trip, ParticipantRole]]:
        return await TripRepository.get_user_trips(db, user_id)

    @staticmethod
    async def get_trip(trip_id: UUID, user_id: UUID, db: AsyncSession) -> Trip:
        await ParticipantService.ensure_access(trip_id, user_id, db)
        return await TripRepository.get_by_id(db, trip_id)

    @staticmethod
    async def update_trip(
        trip_id: UUID, trip_data: TripUpdate, user_id: UUID, db: AsyncSession
    ) -> Trip:
        """
        Update trip fields (owner only).

        Raises:
            AuthorizationError: If user is not the trip owner
            ValidationError: If the resulting dates are inverted
        """
        await ParticipantService.ensure_owner(trip_id, user_id, db, action="update the trip")
        trip = await TripRepository.get_by_id(db, trip_id)

        for field, value in trip_data.model_dump(exclude_unset=True).items():
            if value is not None or field == "description":
                setattr(trip, field, value)

        if trip.start_date and trip.end_date and trip.end_date < trip.start_date:
            raise ValidationError("end_date cannot be before start_date")

        await db.commit()
        await db.refresh(trip)
        return trip

    @staticmethod
    async def delete_trip(trip_id: UUID, user_id: UUID, db: AsyncSession) -> None:
        """
        Delete a trip with its participants, invitations, budgets and expenses.

        Raises:
            AuthorizationError: If user is not the trip owner
        """
        await ParticipantService.ensure_owner(trip_id, user_id, db, action="delete the trip")

        await TripRepository.delete_cascade(db, trip_id)
        await db.commit()

        logger.info("Trip {} deleted by user {}", trip_id, user_id)
