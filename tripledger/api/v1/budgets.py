"""Budget endpoints"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.api.deps import get_current_user
from tripledger.database import get_db
from tripledger.models.user import User
from tripledger.schemas.budget import BudgetCreate, BudgetResponse, BudgetUpdate
from tripledger.services.budget_service import BudgetService

router = APIRouter(prefix="/budgets", tags=["Budgets"])


@router.post("", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED)
async def create_budget(
    budget_data: BudgetCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a budget in a trip.

    Raises:
        403: If the caller is not a participant of the trip
    """
    budget = await BudgetService.create_budget(budget_data, current_user.id, db)
    return BudgetResponse.model_validate(budget)


@router.get("", response_model=List[BudgetResponse])
async def list_budgets(
    trip_id: UUID = Query(..., description="Trip to list budgets for"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    budgets = await BudgetService.list_budgets(trip_id, current_user.id, db)
    return [BudgetResponse.model_validate(b) for b in budgets]


@router.get("/{budget_id}", response_model=BudgetResponse)
async def get_budget(
    budget_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    budget = await BudgetService.get_budget(budget_id, current_user.id, db)
    return BudgetResponse.model_validate(budget)


@router.patch("/{budget_id}", response_model=BudgetResponse)
async def update_budget(
    budget_id: UUID,
    budget_data: BudgetUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update name, allocation or currency. The spent total is not writable."""
    budget = await BudgetService.update_budget(budget_id, budget_data, current_user.id, db)
    return BudgetResponse.model_validate(budget)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    budget_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a budget; its expenses stay in the trip, unassigned."""
    await BudgetService.delete_budget(budget_id, current_user.id, db)


@router.post("/trip/{trip_id}/reconcile", response_model=List[BudgetResponse])
async def reconcile_budgets(
    trip_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Recompute every budget's spent total of a trip from its expenses.

    Returns:
        Budgets after correction
    """
    budgets = await BudgetService.reconcile_trip_budgets(trip_id, current_user.id, db)
    return [BudgetResponse.model_validate(b) for b in budgets]
