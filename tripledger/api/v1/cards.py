"""Card endpoints"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.api.deps import get_current_user
from tripledger.database import get_db
from tripledger.models.user import User
from tripledger.schemas.card import CardCreate, CardResponse, CardUpdate
from tripledger.services.card_service import CardService

router = APIRouter(prefix="/cards", tags=["Cards"])


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(
    card_data: CardCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    card = await CardService.create_card(card_data, current_user.id, db)
    return CardResponse.model_validate(card)


@router.get("", response_model=List[CardResponse])
async def list_my_cards(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's active cards."""
    cards = await CardService.list_user_cards(current_user.id, db)
    return [CardResponse.model_validate(c) for c in cards]


@router.get("/trip/{trip_id}", response_model=List[CardResponse])
async def list_trip_cards(
    trip_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Active cards that can pay for expenses of a trip."""
    cards = await CardService.list_trip_cards(trip_id, current_user.id, db)
    return [CardResponse.model_validate(c) for c in cards]


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(
    card_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    card = await CardService.get_card(card_id, current_user.id, db)
    return CardResponse.model_validate(card)


@router.patch("/{card_id}", response_model=CardResponse)
async def update_card(
    card_id: UUID,
    card_data: CardUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    card = await CardService.update_card(card_id, card_data, current_user.id, db)
    return CardResponse.model_validate(card)


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    card_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Deactivate a card. Expenses paid with it keep their reference."""
    await CardService.delete_card(card_id, current_user.id, db)
