"""SQLAlchemy models"""
from tripledger.models.user import User
from tripledger.models.trip import Trip
from tripledger.models.invitation import Invitation, InvitationStatus
from tripledger.models.participant import Participant, ParticipantRole
from tripledger.models.budget import Budget
from tripledger.models.card import Card, CardType
from tripledger.models.expense import Expense, ExpenseStatus, PaymentMethod, SplitType
from tripledger.models.expense_split import ExpenseSplit

__all__ = [
    "User",
    "Trip",
    "Invitation",
    "InvitationStatus",
    "Participant",
    "ParticipantRole",
    "Budget",
    "Card",
    "CardType",
    "Expense",
    "ExpenseStatus",
    "PaymentMethod",
    "SplitType",
    "ExpenseSplit",
]
