"""Expense model"""
import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (JSON, Boolean, CheckConstraint, Column, Date, DateTime,
                        Enum, ForeignKey, Numeric, String, Uuid)
from sqlalchemy.orm import relationship

from tripledger.core.constants import DEFAULT_CURRENCY
from tripledger.database import Base


class SplitType(str, enum.Enum):
    """Enum for split types"""
    EQUAL = "equal"
    MANUAL = "manual"


class ExpenseStatus(str, enum.Enum):
    """Settlement status of an expense"""
    PAID = "paid"
    PENDING = "pending"


class PaymentMethod(str, enum.Enum):
    """How the expense was paid"""
    CASH = "cash"
    CARD = "card"


class Expense(Base):
    """Ledger entry of a trip, optionally assigned to a budget and split among participants"""

    __tablename__ = "expenses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    trip_id = Column(Uuid, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    budget_id = Column(Uuid, ForeignKey("budgets.id", ondelete="SET NULL"), nullable=True, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), default=DEFAULT_CURRENCY, nullable=False)
    description = Column(String(500), nullable=False)
    merchant_name = Column(String(100), nullable=True)
    tags = Column(JSON, default=list, nullable=False)
    category = Column(String(50), nullable=True)
    paid_by_participant_id = Column(Uuid, ForeignKey("participants.id"), nullable=True, index=True)
    third_party_name = Column(String(100), nullable=True)
    third_party_email = Column(String(255), nullable=True)
    status = Column(Enum(ExpenseStatus), default=ExpenseStatus.PAID, nullable=False, index=True)
    payment_method = Column(Enum(PaymentMethod), default=PaymentMethod.CASH, nullable=False)
    card_id = Column(Uuid, ForeignKey("cards.id"), nullable=True, index=True)
    is_divisible = Column(Boolean, default=False, nullable=False)
    split_type = Column(Enum(SplitType), nullable=True)
    created_by_user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    expense_date = Column(Date, default=date.today, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Constraints
    __table_args__ = (
        CheckConstraint('amount > 0', name='check_expense_amount_positive'),
        CheckConstraint(
            '(paid_by_participant_id IS NOT NULL AND third_party_name IS NULL) OR '
            '(paid_by_participant_id IS NULL AND third_party_name IS NOT NULL)',
            name='check_expense_single_payer',
        ),
    )

    # Relationships
    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseSplit.position",
        lazy="selectin",
    )

    @property
    def paid_by_third_party(self) -> bool:
        return self.third_party_name is not None

    @property
    def payer(self) -> dict:
        """Payer in its tagged wire form"""
        if self.paid_by_participant_id is not None:
            return {"type": "participant", "participant_id": self.paid_by_participant_id}
        return {
            "type": "third_party",
            "name": self.third_party_name,
            "email": self.third_party_email,
        }

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, description={self.description}, amount={self.amount}, status={self.status})>"
