"""Payment card model"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (Boolean, Column, DateTime, Enum, ForeignKey, String,
                        Uuid)

from tripledger.database import Base


class CardType(str, enum.Enum):
    """Card network"""
    VISA = "visa"
    MASTERCARD = "mastercard"
    AMEX = "amex"
    OTHER = "other"


class Card(Base):
    """Payment card owned by a user, optionally scoped to one trip"""

    __tablename__ = "cards"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    trip_id = Column(Uuid, ForeignKey("trips.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    last_four_digits = Column(String(4), nullable=False)
    type = Column(Enum(CardType), default=CardType.OTHER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Card(id={self.id}, name={self.name}, last_four_digits={self.last_four_digits})>"
