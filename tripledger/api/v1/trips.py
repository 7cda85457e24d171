"""Trip endpoints"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.api.deps import get_current_user
from tripledger.database import get_db
from tripledger.models.user import User
from tripledger.schemas.trip import TripCreate, TripListItem, TripResponse, TripUpdate
from tripledger.services.trip_service import TripService

router = APIRouter(prefix="/trips", tags=["Trips"])


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a trip. The caller becomes its owner.

    Args:
        trip_data: Trip creation data
        current_user: Current authenticated user
        db: Database session

    Returns:
        Created trip
    """
    trip = await TripService.create_trip(trip_data, current_user.id, db)
    return TripResponse.model_validate(trip)


@router.get("", response_model=List[TripListItem])
async def list_trips(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the trips the caller participates in, with the caller's role."""
    trips = await TripService.list_trips(current_user.id, db)
    return [
        TripListItem(**TripResponse.model_validate(trip).model_dump(), user_role=role)
        for trip, role in trips
    ]


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    trip = await TripService.get_trip(trip_id, current_user.id, db)
    return TripResponse.model_validate(trip)


@router.patch("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: UUID,
    trip_data: TripUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a trip.

    Raises:
        403: If the caller is not the trip owner
    """
    trip = await TripService.update_trip(trip_id, trip_data, current_user.id, db)
    return TripResponse.model_validate(trip)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(
    trip_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a trip with everything recorded in it.

    Raises:
        403: If the caller is not the trip owner
    """
    await TripService.delete_trip(trip_id, current_user.id, db)
