"""Manual split strategy"""
from decimal import Decimal
from typing import List

from tripledger.core.exceptions import ValidationError
from tripledger.services.split_strategies.base import BaseSplitStrategy, ParticipantSplit
from tripledger.utils.decimal_utils import amounts_match, sum_decimals


class ManualSplitStrategy(BaseSplitStrategy):
    """Strategy for manual split with specified amounts"""

    def calculate_splits(
        self,
        total_amount: Decimal,
        split_data: List[dict]
    ) -> List[ParticipantSplit]:
        """
        Use manually specified amounts for split.

        Args:
            total_amount: Total expense amount
            split_data: Split lines with participant_id and amount

        Returns:
            List of ParticipantSplit with specified amounts

        Raises:
            ValidationError: If an amount is missing or negative, or the
                amounts don't sum to total_amount
        """
        if not split_data:
            return []

        splits = []
        for line in split_data:
            if line.get('amount') is None:
                raise ValidationError(
                    f"Manual split for participant {line['participant_id']} has no amount"
                )
            amount = Decimal(str(line['amount']))

            if amount < 0:
                raise ValidationError(
                    f"Split amount cannot be negative, got {amount}"
                )

            splits.append(ParticipantSplit(
                participant_id=line['participant_id'],
                amount=amount,
                percentage=line.get('percentage')
            ))

        # Allow small rounding difference (0.01)
        total_assigned = sum_decimals(split.amount for split in splits)
        if not amounts_match(total_assigned, total_amount):
            raise ValidationError(
                f"Sum of split amounts ({total_assigned}) must equal expense amount ({total_amount})"
            )

        return splits
