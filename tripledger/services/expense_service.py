"""Expense business logic"""
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.core.exceptions import NotFoundError, ValidationError
from tripledger.models.expense import (Expense, ExpenseStatus, PaymentMethod,
                                       SplitType)
from tripledger.models.expense_split import ExpenseSplit
from tripledger.repositories.budget_repository import BudgetRepository
from tripledger.repositories.card_repository import CardRepository
from tripledger.repositories.expense_repository import ExpenseRepository
from tripledger.repositories.participant_repository import ParticipantRepository
from tripledger.repositories.trip_repository import TripRepository
from tripledger.schemas.expense import (ExpenseCreate, ExpenseUpdate,
                                        ParticipantPayer, Payer)
from tripledger.services.budget_service import BudgetService
from tripledger.services.participant_service import ParticipantService
from tripledger.services.split_strategies import (ParticipantSplit,
                                                  get_split_strategy)
from tripledger.services.split_strategies.rescale import rescale_splits

# (paid_by_participant_id, third_party_name, third_party_email)
PayerColumns = Tuple[Optional[UUID], Optional[str], Optional[str]]


class ExpenseService:
    """Service for expense operations"""

    @staticmethod
    async def validate_budget(
        budget_id: Optional[UUID], trip_id: UUID, db: AsyncSession
    ) -> None:
        """
        Validate that a budget exists and belongs to the trip.

        Raises:
            NotFoundError: If budget not found
            ValidationError: If budget belongs to another trip
        """
        if budget_id is None:
            return

        budget = await BudgetRepository.get_by_id(db, budget_id)
        if not budget:
            raise NotFoundError("Budget not found")
        if budget.trip_id != trip_id:
            raise ValidationError("Budget does not belong to this trip")

    @staticmethod
    async def validate_payer(payer: Payer, trip_id: UUID, db: AsyncSession) -> PayerColumns:
        """
        Validate the payer and map it to its storage columns.

        Raises:
            NotFoundError: If a participant payer is not in the trip
        """
        if isinstance(payer, ParticipantPayer):
            participant = await ParticipantRepository.get_in_trip(
                db, trip_id, payer.participant_id
            )
            if not participant:
                raise NotFoundError("Payer participant not found in this trip")
            return participant.id, None, None

        return None, payer.name, payer.email

    @staticmethod
    def resolve_status(
        status: Optional[ExpenseStatus], paid_by_participant_id: Optional[UUID]
    ) -> ExpenseStatus:
        """
        Explicit status, or inferred from the payer kind.

        Raises:
            ValidationError: If a paid expense has no participant payer
        """
        if status is None:
            if paid_by_participant_id is None:
                return ExpenseStatus.PENDING
            return ExpenseStatus.PAID

        if status == ExpenseStatus.PAID and paid_by_participant_id is None:
            raise ValidationError("A paid expense must be paid by a trip participant")
        return status

    @staticmethod
    async def validate_card(
        payment_method: PaymentMethod,
        card_id: Optional[UUID],
        trip_id: UUID,
        db: AsyncSession,
    ) -> None:
        """
        Validate the payment method against the card reference.

        Raises:
            ValidationError: Card missing for a card payment, given for cash,
                inactive, or not usable on this trip
            NotFoundError: If the card does not exist
        """
        if payment_method == PaymentMethod.CASH:
            if card_id is not None:
                raise ValidationError("A cash expense cannot reference a card")
            return

        if card_id is None:
            raise ValidationError("A card payment requires card_id")

        card = await CardRepository.get_by_id(db, card_id)
        if not card:
            raise NotFoundError("Card not found")
        if not card.is_active:
            raise ValidationError("Card is not active")
        if card.trip_id is not None and card.trip_id != trip_id:
            raise ValidationError("Card is not available for this trip")

        owner = await ParticipantRepository.get_by_trip_and_user(db, trip_id, card.user_id)
        if not owner:
            raise ValidationError("Card owner is not a participant of this trip")

    @staticmethod
    async def build_splits(
        trip_id: UUID,
        amount: Decimal,
        is_divisible: bool,
        split_type: Optional[SplitType],
        lines: Optional[List[dict]],
        db: AsyncSession,
    ) -> List[ExpenseSplit]:
        """
        Validate split lines and compute the split rows.

        Args:
            trip_id: Trip the split participants must belong to
            amount: Expense amount
            is_divisible: Whether the expense is split at all
            split_type: EQUAL or MANUAL
            lines: Split lines in caller order (participant_id, amount, percentage)
            db: Database session

        Returns:
            Unsaved ExpenseSplit rows in list order

        Raises:
            ValidationError: If the splits break a divisibility or sum rule
        """
        if not is_divisible:
            if lines:
                raise ValidationError("A non-divisible expense cannot have splits")
            return []

        if split_type is None:
            raise ValidationError("A divisible expense requires split_type")
        if not lines:
            raise ValidationError("A divisible expense requires at least one split")

        participant_ids = [line["participant_id"] for line in lines]
        if len(set(participant_ids)) != len(participant_ids):
            raise ValidationError("A participant can appear only once in the splits")

        for participant_id in participant_ids:
            participant = await ParticipantRepository.get_in_trip(db, trip_id, participant_id)
            if not participant:
                raise ValidationError(
                    f"Participant {participant_id} is not part of this trip"
                )

        strategy = get_split_strategy(split_type)
        calculated = strategy.calculate_splits(amount, lines)

        return ExpenseService._to_rows(calculated)

    @staticmethod
    def _to_rows(splits: List[ParticipantSplit]) -> List[ExpenseSplit]:
        """
        Turn computed shares into split rows.

        Raises:
            ValidationError: If rounding left a share below zero, which
                happens when the amount is too small for that many participants
        """
        if any(split.amount < 0 for split in splits):
            raise ValidationError(
                "Amount is too small to split between this many participants"
            )
        return [
            ExpenseSplit(
                participant_id=split.participant_id,
                amount=split.amount,
                percentage=split.percentage,
                position=position,
            )
            for position, split in enumerate(splits)
        ]

    @staticmethod
    def _current_lines(expense: Expense) -> List[dict]:
        return [
            {
                "participant_id": split.participant_id,
                "amount": split.amount,
                "percentage": split.percentage,
            }
            for split in expense.splits
        ]

    @staticmethod
    async def create_expense(
        expense_data: ExpenseCreate, user_id: UUID, db: AsyncSession
    ) -> Expense:
        """
        Create a new expense.

        The expense, its splits and the budget's spent adjustment are written
        in one transaction.

        Args:
            expense_data: Expense creation data
            user_id: ID of user creating the expense
            db: Database session

        Returns:
            Created expense with splits

        Raises:
            AuthorizationError: If user is not a participant of the trip
            NotFoundError: If budget, payer or card not found
            ValidationError: If validation fails
        """
        trip_id = expense_data.trip_id
        await ParticipantService.ensure_access(trip_id, user_id, db)

        await ExpenseService.validate_budget(expense_data.budget_id, trip_id, db)

        paid_by, third_party_name, third_party_email = await ExpenseService.validate_payer(
            expense_data.payer, trip_id, db
        )
        status = ExpenseService.resolve_status(expense_data.status, paid_by)

        await ExpenseService.validate_card(
            expense_data.payment_method, expense_data.card_id, trip_id, db
        )

        lines = (
            [line.model_dump() for line in expense_data.splits]
            if expense_data.splits
            else None
        )
        splits = await ExpenseService.build_splits(
            trip_id,
            expense_data.amount,
            expense_data.is_divisible,
            expense_data.split_type,
            lines,
            db,
        )

        currency = expense_data.currency
        if currency is None:
            trip = await TripRepository.get_by_id(db, trip_id)
            currency = trip.base_currency

        expense = Expense(
            trip_id=trip_id,
            budget_id=expense_data.budget_id,
            amount=expense_data.amount,
            currency=currency,
            description=expense_data.description,
            merchant_name=expense_data.merchant_name,
            tags=list(expense_data.tags),
            category=expense_data.category,
            paid_by_participant_id=paid_by,
            third_party_name=third_party_name,
            third_party_email=third_party_email,
            status=status,
            payment_method=expense_data.payment_method,
            card_id=expense_data.card_id,
            is_divisible=expense_data.is_divisible,
            split_type=expense_data.split_type if expense_data.is_divisible else None,
            splits=splits,
            created_by_user_id=user_id,
            expense_date=expense_data.expense_date or date.today(),
        )
        created_expense = await ExpenseRepository.create(db, expense)

        await BudgetService.adjust_spent(expense_data.budget_id, expense_data.amount, db)
        await db.commit()

        logger.info(
            "Expense {} created in trip {} ({} {}, {})",
            created_expense.id,
            trip_id,
            created_expense.amount,
            created_expense.currency,
            status.value,
        )

        return await ExpenseRepository.get_by_id(db, created_expense.id)

    @staticmethod
    async def get_trip_expenses(
        trip_id: UUID,
        user_id: UUID,
        db: AsyncSession,
        budget_id: Optional[UUID] = None,
        status: Optional[ExpenseStatus] = None,
    ) -> List[Expense]:
        """
        Get expenses of a trip, most recent first.

        Raises:
            AuthorizationError: If user is not a participant of the trip
        """
        await ParticipantService.ensure_access(trip_id, user_id, db)
        return await ExpenseRepository.get_trip_expenses(
            db, trip_id, budget_id=budget_id, status=status
        )

    @staticmethod
    async def get_expense_details(
        expense_id: UUID, user_id: UUID, db: AsyncSession
    ) -> Expense:
        """
        Get expense details with authorization check.

        Args:
            expense_id: Expense ID
            user_id: User ID requesting details
            db: Database session

        Returns:
            Expense with splits

        Raises:
            NotFoundError: If expense not found
            AuthorizationError: If user is not a participant of its trip
        """
        expense = await ExpenseRepository.get_by_id(db, expense_id)
        if not expense:
            raise NotFoundError("Expense not found")

        await ParticipantService.ensure_access(expense.trip_id, user_id, db)
        return expense

    @staticmethod
    async def update_expense(
        expense_id: UUID,
        expense_data: ExpenseUpdate,
        user_id: UUID,
        db: AsyncSession,
    ) -> Expense:
        """
        Update an expense.

        Only fields present in the request are applied. Splits are recomputed
        when divisibility toggles or split fields are supplied; when only the
        amount changes the existing splits are rescaled to keep their ratios.
        The old budget loses the old amount and the new budget gains the new
        amount whenever the amount or the budget assignment changes.

        Args:
            expense_id: Expense ID
            expense_data: Expense update data
            user_id: User ID making the update
            db: Database session

        Returns:
            Updated expense

        Raises:
            NotFoundError: If expense, budget, payer or card not found
            AuthorizationError: If user is not a participant of its trip
            ValidationError: If validation fails
        """
        expense = await ExpenseService.get_expense_details(expense_id, user_id, db)
        trip_id = expense.trip_id
        fields = expense_data.model_fields_set

        old_amount = Decimal(str(expense.amount))
        old_budget_id = expense.budget_id
        new_amount = expense_data.amount if expense_data.amount is not None else old_amount

        # Budget
        budget_supplied = "budget_id" in fields
        new_budget_id = expense_data.budget_id if budget_supplied else old_budget_id
        if budget_supplied:
            await ExpenseService.validate_budget(new_budget_id, trip_id, db)

        # Payer
        if expense_data.payer is not None:
            paid_by, third_party_name, third_party_email = await ExpenseService.validate_payer(
                expense_data.payer, trip_id, db
            )
            if (
                expense.status == ExpenseStatus.PAID
                and paid_by is None
                and expense.paid_by_participant_id is not None
            ):
                raise ValidationError(
                    "A paid expense cannot be switched to a third-party payer"
                )
            expense.paid_by_participant_id = paid_by
            expense.third_party_name = third_party_name
            expense.third_party_email = third_party_email

        # Payment method and card
        if expense_data.payment_method is not None or "card_id" in fields:
            payment_method = expense_data.payment_method or expense.payment_method
            if "card_id" in fields:
                card_id = expense_data.card_id
            elif payment_method == PaymentMethod.CASH:
                card_id = None
            else:
                card_id = expense.card_id
            await ExpenseService.validate_card(payment_method, card_id, trip_id, db)
            expense.payment_method = payment_method
            expense.card_id = card_id

        # Splits
        was_divisible = expense.is_divisible
        is_divisible = (
            expense_data.is_divisible
            if expense_data.is_divisible is not None
            else was_divisible
        )
        split_fields_supplied = (
            expense_data.splits is not None or expense_data.split_type is not None
        )

        if not is_divisible:
            if expense_data.splits:
                raise ValidationError("A non-divisible expense cannot have splits")
            if was_divisible:
                await ExpenseRepository.replace_splits(db, expense, [])
            expense.split_type = None
        elif is_divisible != was_divisible or split_fields_supplied:
            split_type = expense_data.split_type or expense.split_type
            if expense_data.splits is not None:
                lines = [line.model_dump() for line in expense_data.splits]
            else:
                lines = ExpenseService._current_lines(expense)
            rows = await ExpenseService.build_splits(
                trip_id, new_amount, True, split_type, lines, db
            )
            await ExpenseRepository.replace_splits(db, expense, rows)
            expense.split_type = split_type
        elif new_amount != old_amount:
            current = [ParticipantSplit(**line) for line in ExpenseService._current_lines(expense)]
            rows = ExpenseService._to_rows(rescale_splits(current, old_amount, new_amount))
            await ExpenseRepository.replace_splits(db, expense, rows)

        expense.is_divisible = is_divisible

        # Plain fields
        for field in ("description", "currency", "tags", "expense_date"):
            value = getattr(expense_data, field)
            if value is not None:
                setattr(expense, field, list(value) if field == "tags" else value)
        for field in ("merchant_name", "category"):
            if field in fields:
                setattr(expense, field, getattr(expense_data, field))

        expense.amount = new_amount
        expense.budget_id = new_budget_id

        if new_amount != old_amount or budget_supplied:
            await BudgetService.adjust_spent(old_budget_id, -old_amount, db)
            await BudgetService.adjust_spent(new_budget_id, new_amount, db)

        await db.commit()

        logger.info("Expense {} updated by user {}", expense_id, user_id)
        return await ExpenseRepository.get_by_id(db, expense_id)

    @staticmethod
    async def delete_expense(expense_id: UUID, user_id: UUID, db: AsyncSession) -> None:
        """
        Delete an expense and release its amount from the budget.

        Raises:
            NotFoundError: If expense not found
            AuthorizationError: If user is not a participant of its trip
        """
        expense = await ExpenseService.get_expense_details(expense_id, user_id, db)
        budget_id = expense.budget_id
        amount = Decimal(str(expense.amount))

        await ExpenseRepository.delete(db, expense)
        await BudgetService.adjust_spent(budget_id, -amount, db)
        await db.commit()

        logger.info("Expense {} deleted by user {}", expense_id, user_id)

    @staticmethod
    async def settle_expense(expense_id: UUID, user_id: UUID, db: AsyncSession) -> Expense:
        """
        Mark a pending expense as paid.

        There is no way back from paid to pending.

        Raises:
            NotFoundError: If expense not found
            AuthorizationError: If user is not a participant of its trip
            ValidationError: If the expense is already paid
        """
        expense = await ExpenseService.get_expense_details(expense_id, user_id, db)

        if expense.status == ExpenseStatus.PAID:
            raise ValidationError("Expense is already paid")

        expense.status = ExpenseStatus.PAID
        await db.commit()

        logger.info("Expense {} settled by user {}", expense_id, user_id)
        return await ExpenseRepository.get_by_id(db, expense_id)
