"""Budget data access"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.models.budget import Budget
from tripledger.models.expense import Expense


class BudgetRepository:
    """Repository for Budget database operations"""

    @staticmethod
    async def create(db: AsyncSession, budget: Budget) -> Budget:
        """
        Create a new budget.

        Args:
            db: Database session
            budget: Budget object to create

        Returns:
            Created budget
        """
        db.add(budget)
        await db.flush()
        await db.refresh(budget)
        return budget

    @staticmethod
    async def get_by_id(db: AsyncSession, budget_id: UUID) -> Optional[Budget]:
        """
        Get budget by ID, always reading `spent` from the database.

        Args:
            db: Database session
            budget_id: Budget UUID

        Returns:
            Budget if found, None otherwise
        """
        result = await db.execute(
            select(Budget)
            .where(Budget.id == budget_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_trip(db: AsyncSession, trip_id: UUID) -> List[Budget]:
        """
        Get all budgets of a trip, newest first.

        Args:
            db: Database session
            trip_id: Trip UUID

        Returns:
            List of budgets
        """
        result = await db.execute(
            select(Budget)
            .where(Budget.trip_id == trip_id)
            .order_by(Budget.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_all(db: AsyncSession) -> List[Budget]:
        result = await db.execute(
            select(Budget).execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def increment_spent(db: AsyncSession, budget_id: UUID, delta: Decimal) -> None:
        """
        Add `delta` to a budget's spent total in place.

        Issued as a single UPDATE ... SET spent = spent + :delta so concurrent
        writers on the same budget never overwrite each other.

        Args:
            db: Database session
            budget_id: Budget UUID
            delta: Signed amount to add
        """
        await db.execute(
            update(Budget)
            .where(Budget.id == budget_id)
            .values(spent=Budget.spent + delta, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    async def set_spent(db: AsyncSession, budget_id: UUID, spent: Decimal) -> None:
        """Overwrite spent; reserved for reconciliation."""
        await db.execute(
            update(Budget)
            .where(Budget.id == budget_id)
            .values(spent=spent, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    async def sum_assigned_expenses(db: AsyncSession, budget_id: UUID) -> Decimal:
        """Sum of amounts of the expenses currently assigned to a budget."""
        result = await db.execute(
            select(func.coalesce(func.sum(Expense.amount), 0)).where(
                Expense.budget_id == budget_id
            )
        )
        return Decimal(str(result.scalar_one()))

    @staticmethod
    async def detach_expenses(db: AsyncSession, budget_id: UUID) -> None:
        await db.execute(
            update(Expense)
            .where(Expense.budget_id == budget_id)
            .values(budget_id=None)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    async def delete(db: AsyncSession, budget: Budget) -> None:
        await db.delete(budget)
        await db.flush()
