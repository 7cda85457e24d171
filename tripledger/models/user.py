"""User model"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Uuid

from tripledger.database import Base


class User(Base):
    """Account holder, resolved from the bearer token"""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    @property
    def display_name(self) -> str:
        full_name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full_name or self.email

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
