"""Proportional rescaling of existing splits"""

from decimal import Decimal
from typing import List

from tripledger.services.split_strategies.base import ParticipantSplit
from tripledger.utils.decimal_utils import round_decimal, sum_decimals


def rescale_splits(
    splits: List[ParticipantSplit], old_total: Decimal, new_total: Decimal
) -> List[ParticipantSplit]:
    """
    Scale split amounts by new_total / old_total, keeping their ratios.

    Each share is rounded to the cent and the leftover is added to the last
    split, like the equal split does.

    Args:
        splits: Current splits in list order
        old_total: Expense amount the splits were computed for
        new_total: New expense amount

    Returns:
        New list of ParticipantSplit summing exactly to new_total
    """
    if not splits:
        return []

    ratio = new_total / old_total
    rescaled = [
        ParticipantSplit(
            participant_id=split.participant_id,
            amount=round_decimal(split.amount * ratio),
            percentage=split.percentage,
        )
        for split in splits
    ]

    difference = new_total - sum_decimals(split.amount for split in rescaled)
    if difference != 0:
        rescaled[-1].amount += difference

    return rescaled
