"""Budget business logic"""
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.config import get_settings
from tripledger.core.exceptions import NotFoundError
from tripledger.models.budget import Budget
from tripledger.repositories.budget_repository import BudgetRepository
from tripledger.schemas.budget import BudgetCreate, BudgetUpdate
from tripledger.services.participant_service import ParticipantService
from tripledger.utils.decimal_utils import round_decimal

settings = get_settings()


class BudgetService:
    """Service for budget operations"""

    @staticmethod
    async def create_budget(
        budget_data: BudgetCreate, user_id: UUID, db: AsyncSession
    ) -> Budget:
        """
        Create a budget in a trip.

        Args:
            budget_data: Budget creation data
            user_id: ID of user creating the budget
            db: Database session

        Returns:
            Created budget with spent = 0

        Raises:
            AuthorizationError: If user is not a participant of the trip
        """
        await ParticipantService.ensure_access(budget_data.trip_id, user_id, db)

        budget = await BudgetRepository.create(
            db,
            Budget(
                trip_id=budget_data.trip_id,
                name=budget_data.name,
                amount=budget_data.amount,
                currency=budget_data.currency or settings.default_currency,
                spent=Decimal("0"),
                created_by_user_id=user_id,
            ),
        )
        await db.commit()
        return budget

    @staticmethod
    async def list_budgets(trip_id: UUID, user_id: UUID, db: AsyncSession) -> List[Budget]:
        await ParticipantService.ensure_access(trip_id, user_id, db)
        return await BudgetRepository.get_by_trip(db, trip_id)

    @staticmethod
    async def get_budget(budget_id: UUID, user_id: UUID, db: AsyncSession) -> Budget:
        """
        Get a budget the user can see.

        Raises:
            NotFoundError: If budget not found
            AuthorizationError: If user is not a participant of its trip
        """
        budget = await BudgetRepository.get_by_id(db, budget_id)
        if not budget:
            raise NotFoundError("Budget not found")

        await ParticipantService.ensure_access(budget.trip_id, user_id, db)
        return budget

    @staticmethod
    async def update_budget(
        budget_id: UUID, budget_data: BudgetUpdate, user_id: UUID, db: AsyncSession
    ) -> Budget:
        budget = await BudgetService.get_budget(budget_id, user_id, db)

        for field, value in budget_data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(budget, field, value)

        await db.commit()
        return await BudgetRepository.get_by_id(db, budget_id)

    @staticmethod
    async def delete_budget(budget_id: UUID, user_id: UUID, db: AsyncSession) -> None:
        """
        Delete a budget.

        Its expenses are kept and become unassigned.
        """
        budget = await BudgetService.get_budget(budget_id, user_id, db)

        await BudgetRepository.detach_expenses(db, budget.id)
        await BudgetRepository.delete(db, budget)
        await db.commit()

        logger.info("Budget {} deleted from trip {}", budget_id, budget.trip_id)

    @staticmethod
    async def adjust_spent(
        budget_id: Optional[UUID], delta: Decimal, db: AsyncSession
    ) -> None:
        """
        Apply a signed change to a budget's spent total.

        This is the only writer of `spent` besides reconciliation. The caller
        owns the transaction. A missing budget_id or a zero delta is a no-op.

        Args:
            budget_id: Budget to adjust, or None
            delta: Signed amount
            db: Database session
        """
        if budget_id is None or delta == 0:
            return
        await BudgetRepository.increment_spent(db, budget_id, delta)

    @staticmethod
    async def reconcile_spent(
        db: AsyncSession, trip_id: Optional[UUID] = None
    ) -> List[Budget]:
        """
        Recompute `spent` from the expenses currently assigned to each budget.

        Args:
            db: Database session
            trip_id: Limit to one trip; all budgets when None

        Returns:
            The budgets after correction
        """
        if trip_id is None:
            budgets = await BudgetRepository.get_all(db)
        else:
            budgets = await BudgetRepository.get_by_trip(db, trip_id)

        corrected = 0
        for budget in budgets:
            expected = round_decimal(await BudgetRepository.sum_assigned_expenses(db, budget.id))
            current = round_decimal(Decimal(str(budget.spent)))
            if expected != current:
                logger.warning(
                    "Budget {} spent drifted: stored {} expected {}",
                    budget.id,
                    current,
                    expected,
                )
                await BudgetRepository.set_spent(db, budget.id, expected)
                corrected += 1

        await db.commit()
        logger.info("Reconciled {} budgets, {} corrected", len(budgets), corrected)

        if trip_id is None:
            return await BudgetRepository.get_all(db)
        return await BudgetRepository.get_by_trip(db, trip_id)

    @staticmethod
    async def reconcile_trip_budgets(
        trip_id: UUID, user_id: UUID, db: AsyncSession
    ) -> List[Budget]:
        """Reconcile the budgets of one trip on behalf of a participant."""
        await ParticipantService.ensure_access(trip_id, user_id, db)
        return await BudgetService.reconcile_spent(db, trip_id=trip_id)
