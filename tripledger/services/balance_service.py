"""Trip summary, balance and debt calculation"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.core.exceptions import NotFoundError
from tripledger.models.expense import Expense, ExpenseStatus
from tripledger.models.participant import Participant
from tripledger.repositories.budget_repository import BudgetRepository
from tripledger.repositories.expense_repository import ExpenseRepository
from tripledger.repositories.participant_repository import ParticipantRepository
from tripledger.schemas.balance import (BudgetTotal, DebtEdge,
                                        ParticipantBalance, ParticipantDebts,
                                        StatusTotals, TripExpenseSummary)
from tripledger.services.participant_service import ParticipantService
from tripledger.utils.decimal_utils import round_decimal

UNASSIGNED_BUDGET_NAME = "Unassigned"


class BalanceService:
    """Service for balance calculation operations"""

    @staticmethod
    def _tally_participants(
        expenses: List[Expense],
    ) -> Tuple[Dict[UUID, Decimal], Dict[UUID, Decimal]]:
        """
        Sum what each participant paid and what their splits add up to.

        Args:
            expenses: Expenses to scan

        Returns:
            (paid by participant id, owed by participant id)
        """
        paid: Dict[UUID, Decimal] = defaultdict(Decimal)
        owed: Dict[UUID, Decimal] = defaultdict(Decimal)

        for expense in expenses:
            if expense.paid_by_participant_id is not None:
                paid[expense.paid_by_participant_id] += Decimal(str(expense.amount))
            for split in expense.splits:
                owed[split.participant_id] += Decimal(str(split.amount))

        return paid, owed

    @staticmethod
    def _participant_balance(
        participant: Participant, paid: Dict[UUID, Decimal], owed: Dict[UUID, Decimal]
    ) -> ParticipantBalance:
        total_paid = round_decimal(paid.get(participant.id, Decimal("0")))
        total_owed = round_decimal(owed.get(participant.id, Decimal("0")))
        return ParticipantBalance(
            participant_id=participant.id,
            participant_name=participant.display_name,
            total_paid=total_paid,
            total_owed=total_owed,
            balance=total_paid - total_owed,
        )

    @staticmethod
    async def get_trip_summary(
        trip_id: UUID, user_id: UUID, db: AsyncSession
    ) -> TripExpenseSummary:
        """
        Aggregate every expense of a trip in one pass.

        Totals are broken down per budget (with an explicit unassigned
        bucket), per status, and per participant. Every participant is listed,
        including those with no activity.

        Args:
            trip_id: Trip ID
            user_id: Requesting user ID
            db: Database session

        Returns:
            TripExpenseSummary

        Raises:
            AuthorizationError: If user is not a participant of the trip
        """
        await ParticipantService.ensure_access(trip_id, user_id, db)

        participants = await ParticipantRepository.get_by_trip(db, trip_id)
        budgets = await BudgetRepository.get_by_trip(db, trip_id)
        expenses = await ExpenseRepository.get_trip_expenses(db, trip_id)

        total = Decimal("0")
        by_budget: Dict[UUID, Decimal] = {budget.id: Decimal("0") for budget in budgets}
        unassigned = Decimal("0")
        by_status = {ExpenseStatus.PAID: Decimal("0"), ExpenseStatus.PENDING: Decimal("0")}

        for expense in expenses:
            amount = Decimal(str(expense.amount))
            total += amount
            by_status[expense.status] += amount
            if expense.budget_id in by_budget:
                by_budget[expense.budget_id] += amount
            else:
                unassigned += amount

        paid, owed = BalanceService._tally_participants(expenses)

        budget_totals = [
            BudgetTotal(budget_id=budget.id, budget_name=budget.name, total=round_decimal(by_budget[budget.id]))
            for budget in budgets
        ]
        budget_totals.append(
            BudgetTotal(budget_id=None, budget_name=UNASSIGNED_BUDGET_NAME, total=round_decimal(unassigned))
        )

        return TripExpenseSummary(
            total_expenses=round_decimal(total),
            total_by_budget=budget_totals,
            total_by_status=StatusTotals(
                paid=round_decimal(by_status[ExpenseStatus.PAID]),
                pending=round_decimal(by_status[ExpenseStatus.PENDING]),
            ),
            total_by_participant=[
                BalanceService._participant_balance(participant, paid, owed)
                for participant in participants
            ],
        )

    @staticmethod
    async def get_participant_balance(
        participant_id: UUID, trip_id: UUID, user_id: UUID, db: AsyncSession
    ) -> ParticipantBalance:
        """
        Paid, owed and net balance of one participant.

        Raises:
            AuthorizationError: If user is not a participant of the trip
            NotFoundError: If the participant is not in the trip
        """
        await ParticipantService.ensure_access(trip_id, user_id, db)

        participant = await ParticipantRepository.get_in_trip(db, trip_id, participant_id)
        if not participant:
            raise NotFoundError("Participant not found")

        expenses = await ExpenseRepository.get_trip_expenses(db, trip_id)
        paid, owed = BalanceService._tally_participants(expenses)
        return BalanceService._participant_balance(participant, paid, owed)

    @staticmethod
    async def get_participant_debts(
        trip_id: UUID, user_id: UUID, db: AsyncSession
    ) -> ParticipantDebts:
        """
        Who owes whom across the pending expenses of a trip.

        Each split line of someone other than the payer is a debt to the payer.
        Debts between the same pair are summed; opposite debts are both kept.

        Args:
            trip_id: Trip ID
            user_id: Requesting user ID
            db: Database session

        Returns:
            ParticipantDebts, edges in first-seen order

        Raises:
            AuthorizationError: If user is not a participant of the trip
        """
        await ParticipantService.ensure_access(trip_id, user_id, db)

        expenses = await ExpenseRepository.get_trip_expenses(
            db, trip_id, status=ExpenseStatus.PENDING
        )
        # oldest first so edges appear in the order the debts arose
        expenses.sort(key=lambda e: (e.expense_date, e.created_at))

        edges: Dict[tuple, Decimal] = {}
        for expense in expenses:
            if expense.paid_by_participant_id is not None:
                creditor = ("participant", expense.paid_by_participant_id)
            else:
                creditor = ("third_party", expense.third_party_name, expense.third_party_email)

            for split in expense.splits:
                if split.participant_id == expense.paid_by_participant_id:
                    continue
                key = (split.participant_id, creditor)
                edges[key] = edges.get(key, Decimal("0")) + Decimal(str(split.amount))

        debts = []
        for (debtor, creditor), amount in edges.items():
            if creditor[0] == "participant":
                edge = DebtEdge(from_participant_id=debtor, to_participant_id=creditor[1], amount=round_decimal(amount))
            else:
                edge = DebtEdge(
                    from_participant_id=debtor,
                    to_third_party_name=creditor[1],
                    to_third_party_email=creditor[2],
                    amount=round_decimal(amount),
                )
            debts.append(edge)

        return ParticipantDebts(debts=debts)
