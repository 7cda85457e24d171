"""Card business logic"""
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.core.exceptions import AuthorizationError, NotFoundError
from tripledger.models.card import Card
from tripledger.repositories.card_repository import CardRepository
from tripledger.schemas.card import CardCreate, CardUpdate
from tripledger.services.participant_service import ParticipantService


class CardService:
    """Service for card operations"""

    @staticmethod
    async def create_card(card_data: CardCreate, user_id: UUID, db: AsyncSession) -> Card:
        """
        Register a card for the user, optionally scoped to one trip.

        Raises:
            AuthorizationError: If the card is scoped to a trip the user is not in
        """
        if card_data.trip_id is not None:
            await ParticipantService.ensure_access(card_data.trip_id, user_id, db)

        card = await CardRepository.create(
            db,
            Card(
                user_id=user_id,
                trip_id=card_data.trip_id,
                name=card_data.name,
                last_four_digits=card_data.last_four_digits,
                type=card_data.type,
                is_active=True,
            ),
        )
        await db.commit()
        return card

    @staticmethod
    async def list_user_cards(user_id: UUID, db: AsyncSession) -> List[Card]:
        return await CardRepository.get_user_cards(db, user_id)

    @staticmethod
    async def list_trip_cards(trip_id: UUID, user_id: UUID, db: AsyncSession) -> List[Card]:
        await ParticipantService.ensure_access(trip_id, user_id, db)
        return await CardRepository.get_trip_cards(db, trip_id)

    @staticmethod
    async def get_card(card_id: UUID, user_id: UUID, db: AsyncSession) -> Card:
        """
        Get a card owned by the user.

        Raises:
            NotFoundError: If card not found
            AuthorizationError: If the card belongs to someone else
        """
        card = await CardRepository.get_by_id(db, card_id)
        if not card:
            raise NotFoundError("Card not found")
        if card.user_id != user_id:
            raise AuthorizationError("You can only manage your own cards")
        return card

    @staticmethod
    async def update_card(
        card_id: UUID, card_data: CardUpdate, user_id: UUID, db: AsyncSession
    ) -> Card:
        card = await CardService.get_card(card_id, user_id, db)

        for field, value in card_data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(card, field, value)

        await db.commit()
        await db.refresh(card)
        return card

    @staticmethod
    async def delete_card(card_id: UUID, user_id: UUID, db: AsyncSession) -> None:
        # Soft delete: expenses keep pointing at the card
        card = await CardService.get_card(card_id, user_id, db)
        card.is_active = False
        await db.commit()
