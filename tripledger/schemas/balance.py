"""Trip summary, balance and debt schemas"""
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class BudgetTotal(BaseModel):
    """Expense total of one budget; budget_id is None for the unassigned bucket"""
    budget_id: Optional[UUID] = None
    budget_name: str
    total: Decimal


class StatusTotals(BaseModel):
    paid: Decimal
    pending: Decimal


class ParticipantBalance(BaseModel):
    """What a participant paid versus what their splits add up to"""
    participant_id: UUID
    participant_name: str
    total_paid: Decimal
    total_owed: Decimal
    balance: Decimal


class TripExpenseSummary(BaseModel):
    """Aggregate view of all expenses of a trip"""
    total_expenses: Decimal
    total_by_budget: List[BudgetTotal]
    total_by_status: StatusTotals
    total_by_participant: List[ParticipantBalance]


class DebtEdge(BaseModel):
    """
    Amount a participant owes a creditor across pending expenses.

    The creditor is either a participant (to_participant_id) or the
    third party that paid (to_third_party_name and to_third_party_email).
    """
    from_participant_id: UUID
    to_participant_id: Optional[UUID] = None
    to_third_party_name: Optional[str] = None
    to_third_party_email: Optional[str] = None
    amount: Decimal


class ParticipantDebts(BaseModel):
    debts: List[DebtEdge]
