"""Base strategy interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class ParticipantSplit(BaseModel):
    """Result of split calculation for a participant"""

    participant_id: UUID
    amount: Decimal
    percentage: Optional[Decimal] = None


class BaseSplitStrategy(ABC):
    """Base class for split strategies"""

    @abstractmethod
    def calculate_splits(
        self, total_amount: Decimal, split_data: List[dict]
    ) -> List[ParticipantSplit]:
        """
        Calculate split amounts for participants.

        Args:
            total_amount: Total expense amount
            split_data: Split lines in caller order (participant_id, amount, percentage)

        Returns:
            List of ParticipantSplit objects, same order as split_data
        """
        pass
