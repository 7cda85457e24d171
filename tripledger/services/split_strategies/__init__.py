"""Split calculation strategies"""

from tripledger.core.exceptions import ValidationError
from tripledger.models.expense import SplitType
from tripledger.services.split_strategies.base import (BaseSplitStrategy,
                                                       ParticipantSplit)
from tripledger.services.split_strategies.equal_split import EqualSplitStrategy
from tripledger.services.split_strategies.manual_split import ManualSplitStrategy


def get_split_strategy(split_type: SplitType) -> BaseSplitStrategy:
    """
    Get appropriate split strategy based on split type.

    Args:
        split_type: Type of split (EQUAL or MANUAL)

    Returns:
        Instance of appropriate strategy

    Raises:
        ValidationError: If split_type is not recognized
    """
    strategies = {
        SplitType.EQUAL: EqualSplitStrategy(),
        SplitType.MANUAL: ManualSplitStrategy(),
    }

    strategy = strategies.get(split_type)
    if strategy is None:
        raise ValidationError(f"Unknown split type: {split_type}")

    return strategy


__all__ = [
    "BaseSplitStrategy",
    "ParticipantSplit",
    "EqualSplitStrategy",
    "ManualSplitStrategy",
    "get_split_strategy",
]
