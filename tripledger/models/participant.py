"""Trip participant model"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (CheckConstraint, Column, DateTime, Enum, ForeignKey,
                        String, UniqueConstraint, Uuid)
from sqlalchemy.orm import relationship

from tripledger.database import Base


class ParticipantRole(str, enum.Enum):
    """Role of a participant within a trip"""
    OWNER = "owner"
    MEMBER = "member"


class Participant(Base):
    """
    Membership of one person in one trip.

    A participant is either linked to an account (user_id) or a guest
    (guest_name, optional guest_email). A guest upgraded to an account keeps
    its guest fields for display; user_id wins once set.
    """

    __tablename__ = "participants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    trip_id = Column(Uuid, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    guest_name = Column(String(100), nullable=True)
    guest_email = Column(String(255), nullable=True)
    role = Column(Enum(ParticipantRole), default=ParticipantRole.MEMBER, nullable=False)
    invitation_id = Column(Uuid, ForeignKey("invitations.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("trip_id", "user_id", name="uq_participant_trip_user"),
        CheckConstraint(
            "user_id IS NOT NULL OR guest_name IS NOT NULL",
            name="check_participant_identity",
        ),
    )

    user = relationship("User", lazy="selectin")

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    @property
    def display_name(self) -> str:
        if self.guest_name:
            return self.guest_name
        if self.user is not None:
            return self.user.display_name
        return "Unnamed"

    def __repr__(self) -> str:
        return f"<Participant(id={self.id}, trip_id={self.trip_id}, user_id={self.user_id}, role={self.role})>"
