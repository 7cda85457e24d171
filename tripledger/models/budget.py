"""Budget model"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (CheckConstraint, Column, DateTime, ForeignKey, Numeric,
                        String, Uuid)

from tripledger.core.constants import DEFAULT_CURRENCY
from tripledger.database import Base


class Budget(Base):
    """
    Named spending envelope of a trip.

    `spent` is the sum of amounts of the expenses assigned to the budget and
    is only ever written through BudgetRepository.increment_spent.
    """

    __tablename__ = "budgets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    trip_id = Column(Uuid, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), default=DEFAULT_CURRENCY, nullable=False)
    spent = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    created_by_user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="check_budget_amount_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Budget(id={self.id}, name={self.name}, amount={self.amount}, spent={self.spent})>"
