"""Expense split model"""
import uuid

from sqlalchemy import (CheckConstraint, Column, ForeignKey, Integer, Numeric,
                        UniqueConstraint, Uuid)
from sqlalchemy.orm import relationship

from tripledger.database import Base


class ExpenseSplit(Base):
    """One participant's share of a divisible expense"""

    __tablename__ = "expense_splits"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    expense_id = Column(Uuid, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_id = Column(Uuid, ForeignKey("participants.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    percentage = Column(Numeric(5, 2), nullable=True)
    # list order as given by the caller; the rounding remainder lands on the last one
    position = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint('expense_id', 'participant_id', name='uq_split_expense_participant'),
        CheckConstraint('amount >= 0', name='check_split_amount_non_negative'),
        CheckConstraint('percentage IS NULL OR (percentage >= 0 AND percentage <= 100)', name='check_split_percentage_range'),
    )

    expense = relationship("Expense", back_populates="splits")

    def __repr__(self) -> str:
        return f"<ExpenseSplit(expense_id={self.expense_id}, participant_id={self.participant_id}, amount={self.amount})>"
