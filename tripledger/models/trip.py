"""Trip model"""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Uuid

from tripledger.core.constants import DEFAULT_CURRENCY
from tripledger.database import Base


class Trip(Base):
    """Trip owning participants, budgets and expenses"""

    __tablename__ = "trips"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    base_currency = Column(String(3), default=DEFAULT_CURRENCY, nullable=False)
    created_by_user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Trip(id={self.id}, name={self.name})>"
