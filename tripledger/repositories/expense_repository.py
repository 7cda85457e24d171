"""Expense data access"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.models.expense import Expense, ExpenseStatus
from tripledger.models.expense_split import ExpenseSplit


class ExpenseRepository:
    """Repository for Expense database operations"""

    @staticmethod
    async def create(db: AsyncSession, expense: Expense) -> Expense:
        """
        Create a new expense together with its splits.

        Args:
            db: Database session
            expense: Expense object to create

        Returns:
            Created expense
        """
        db.add(expense)
        await db.flush()
        return expense

    @staticmethod
    async def get_by_id(db: AsyncSession, expense_id: UUID) -> Optional[Expense]:
        """
        Get expense by ID with splits loaded.

        Args:
            db: Database session
            expense_id: Expense UUID

        Returns:
            Expense if found, None otherwise
        """
        result = await db.execute(
            select(Expense)
            .where(Expense.id == expense_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_trip_expenses(
        db: AsyncSession,
        trip_id: UUID,
        budget_id: Optional[UUID] = None,
        status: Optional[ExpenseStatus] = None,
    ) -> List[Expense]:
        """
        Get expenses of a trip with optional filters.

        Args:
            db: Database session
            trip_id: Trip UUID
            budget_id: Optional budget filter
            status: Optional status filter

        Returns:
            List of expenses, most recent first
        """
        query = select(Expense).where(Expense.trip_id == trip_id)

        if budget_id:
            query = query.where(Expense.budget_id == budget_id)
        if status:
            query = query.where(Expense.status == status)

        query = query.order_by(Expense.expense_date.desc(), Expense.created_at.desc())

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def replace_splits(
        db: AsyncSession, expense: Expense, splits: List[ExpenseSplit]
    ) -> None:
        """
        Swap the split rows of an expense.

        The old rows are flushed out first so a participant can keep its share
        without tripping the (expense, participant) unique constraint.
        """
        expense.splits.clear()
        await db.flush()
        expense.splits.extend(splits)
        await db.flush()

    @staticmethod
    async def delete(db: AsyncSession, expense: Expense) -> None:
        """
        Delete an expense; its splits go with it.

        Args:
            db: Database session
            expense: Expense to delete
        """
        await db.delete(expense)
        await db.flush()
