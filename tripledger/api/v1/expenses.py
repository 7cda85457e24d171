"""Expense endpoints"""
import json
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.api.deps import get_current_user
from tripledger.config import get_settings
from tripledger.database import get_db
from tripledger.models.expense import ExpenseStatus
from tripledger.models.user import User
from tripledger.schemas.balance import (ParticipantBalance, ParticipantDebts,
                                        TripExpenseSummary)
from tripledger.schemas.expense import (ExpenseCreate, ExpenseResponse,
                                        ExpenseUpdate)
from tripledger.services.balance_service import BalanceService
from tripledger.services.cache_service import CacheService
from tripledger.services.expense_service import ExpenseService

settings = get_settings()

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
):
    """
    Create a new expense.

    Supports idempotency via the `Idempotency-Key` header to prevent duplicate
    expense creation. If the same key is reused by the same user within the
    configured window, the original response is returned.

    Args:
        expense_data: Expense creation data
        current_user: Current authenticated user
        db: Database session
        idempotency_key: Optional idempotency key for preventing duplicates

    Returns:
        Created expense with its splits

    Raises:
        400: If validation fails (split sum, payer/status, divisibility, card)
        403: If the caller is not a participant of the trip
        404: If the budget, payer or card doesn't exist
    """
    cache_key = None
    if idempotency_key:
        cache_key = CacheService.idempotency_key("expense", idempotency_key, current_user.id)
        cached_response = await CacheService.get(cache_key)

        if cached_response:
            return ExpenseResponse(**json.loads(cached_response))

    expense = await ExpenseService.create_expense(expense_data, current_user.id, db)
    response = ExpenseResponse.model_validate(expense)

    if cache_key:
        await CacheService.set(
            cache_key,
            json.dumps(response.model_dump(mode="json")),
            ttl=settings.idempotency_ttl_seconds,
        )

    return response


@router.get("", response_model=List[ExpenseResponse])
async def list_expenses(
    trip_id: UUID = Query(..., description="Trip to list expenses for"),
    budget_id: Optional[UUID] = Query(None, description="Filter by budget"),
    status_filter: Optional[ExpenseStatus] = Query(None, alias="status", description="Filter by status"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List the expenses of a trip, most recent first.

    Raises:
        403: If the caller is not a participant of the trip
    """
    expenses = await ExpenseService.get_trip_expenses(
        trip_id, current_user.id, db, budget_id=budget_id, status=status_filter
    )
    return [ExpenseResponse.model_validate(e) for e in expenses]


@router.get("/trip/{trip_id}/summary", response_model=TripExpenseSummary)
async def get_trip_summary(
    trip_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Totals of a trip by budget, by status and by participant.

    Every participant is listed, even with no expenses.
    """
    return await BalanceService.get_trip_summary(trip_id, current_user.id, db)


@router.get("/trip/{trip_id}/debts", response_model=ParticipantDebts)
async def get_trip_debts(
    trip_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Who owes whom across the pending expenses of a trip."""
    return await BalanceService.get_participant_debts(trip_id, current_user.id, db)


@router.get("/participant/{participant_id}/balance", response_model=ParticipantBalance)
async def get_participant_balance(
    participant_id: UUID,
    trip_id: UUID = Query(..., description="Trip of the participant"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await BalanceService.get_participant_balance(
        participant_id, trip_id, current_user.id, db
    )


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get expense details.

    Raises:
        403: If the caller is not a participant of the trip
        404: If expense not found
    """
    expense = await ExpenseService.get_expense_details(expense_id, current_user.id, db)
    return ExpenseResponse.model_validate(expense)


@router.patch("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: UUID,
    expense_data: ExpenseUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Update an expense.

    Only the fields sent are changed. Use the settle endpoint to change
    the status.

    Raises:
        400: If validation fails
        403: If the caller is not a participant of the trip
        404: If expense, budget, payer or card not found
    """
    expense = await ExpenseService.update_expense(expense_id, expense_data, current_user.id, db)
    return ExpenseResponse.model_validate(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await ExpenseService.delete_expense(expense_id, current_user.id, db)


@router.post("/{expense_id}/settle", response_model=ExpenseResponse)
async def settle_expense(
    expense_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Mark a pending expense as paid.

    Raises:
        400: If the expense is already paid
    """
    expense = await ExpenseService.settle_expense(expense_id, current_user.id, db)
    return ExpenseResponse.model_validate(expense)
