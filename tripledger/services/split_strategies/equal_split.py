"""Equal split strategy"""

from decimal import Decimal
from typing import List

from tripledger.services.split_strategies.base import (BaseSplitStrategy,
                                                       ParticipantSplit)
from tripledger.utils.decimal_utils import round_decimal, sum_decimals


class EqualSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting expense equally among participants"""

    def calculate_splits(
        self, total_amount: Decimal, split_data: List[dict]
    ) -> List[ParticipantSplit]:
        """
        Calculate equal split for the selected participants.

        Any caller-supplied amounts are ignored. Rounding leftovers go to the
        last participant in list order, so the shares add up to the cent.

        Args:
            total_amount: Total expense amount
            split_data: Split lines (participant_id, ...)

        Returns:
            List of ParticipantSplit with equal amounts
        """
        num_participants = len(split_data)

        if num_participants == 0:
            return []

        # Calculate base amount per person
        rounded_base = round_decimal(total_amount / num_participants)
        percentage = round_decimal(Decimal("100") / num_participants)

        splits = [
            ParticipantSplit(
                participant_id=line["participant_id"],
                amount=rounded_base,
                percentage=percentage,
            )
            for line in split_data
        ]

        # Handle rounding - adjust last participant to ensure total matches
        total_assigned = sum_decimals(split.amount for split in splits)
        difference = total_amount - total_assigned

        if difference != 0:
            splits[-1].amount += difference

        return splits
