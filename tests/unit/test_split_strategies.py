"""Test split calculations"""

from decimal import Decimal
from uuid import uuid4

import pytest

from tripledger.core.exceptions import ValidationError
from tripledger.models.expense import SplitType
from tripledger.services.split_strategies import (
    EqualSplitStrategy,
    ManualSplitStrategy,
    ParticipantSplit,
    get_split_strategy,
)
from tripledger.services.split_strategies.rescale import rescale_splits


def lines(*amounts):
    """Split lines for fresh participants, optionally with amounts"""
    return [{"participant_id": uuid4(), "amount": amount} for amount in amounts]


class TestGetSplitStrategy:
    """Test get_split_strategy factory function"""

    def test_get_equal_strategy(self):
        strategy = get_split_strategy(SplitType.EQUAL)
        assert isinstance(strategy, EqualSplitStrategy)

    def test_get_manual_strategy(self):
        strategy = get_split_strategy(SplitType.MANUAL)
        assert isinstance(strategy, ManualSplitStrategy)

    def test_unknown_split_type(self):
        with pytest.raises(ValidationError):
            get_split_strategy("percentage")


class TestEqualSplitStrategy:
    """Test equal split strategy"""

    @pytest.fixture
    def strategy(self):
        return EqualSplitStrategy()

    def test_equal_split_two_participants(self, strategy):
        """Test equal split with 2 participants"""
        splits = strategy.calculate_splits(Decimal("100.00"), lines(None, None))

        assert [s.amount for s in splits] == [Decimal("50.00"), Decimal("50.00")]
        assert all(s.percentage == Decimal("50.00") for s in splits)

    def test_equal_split_three_participants(self, strategy):
        """Remainder cent goes to the last participant in list order"""
        split_data = lines(None, None, None)

        splits = strategy.calculate_splits(Decimal("100.00"), split_data)

        assert [s.amount for s in splits] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
        assert [s.participant_id for s in splits] == [line["participant_id"] for line in split_data]
        assert sum(s.amount for s in splits) == Decimal("100.00")
        assert splits[0].percentage == Decimal("33.33")

    def test_negative_remainder_lands_on_last(self, strategy):
        """200/3 rounds up to 66.67 each; the last share absorbs -0.01"""
        splits = strategy.calculate_splits(Decimal("200.00"), lines(None, None, None))

        assert [s.amount for s in splits] == [Decimal("66.67"), Decimal("66.67"), Decimal("66.66")]

    def test_ignores_supplied_amounts(self, strategy):
        splits = strategy.calculate_splits(Decimal("10.00"), lines(Decimal("9"), Decimal("1")))

        assert [s.amount for s in splits] == [Decimal("5.00"), Decimal("5.00")]

    def test_equal_split_single_participant(self, strategy):
        splits = strategy.calculate_splits(Decimal("50.00"), lines(None))

        assert len(splits) == 1
        assert splits[0].amount == Decimal("50.00")
        assert splits[0].percentage == Decimal("100.00")

    def test_equal_split_zero_participants(self, strategy):
        assert strategy.calculate_splits(Decimal("50.00"), []) == []

    @pytest.mark.parametrize("amount,count", [("0.01", 3), ("99.99", 7), ("1234.56", 9)])
    def test_sum_always_matches(self, strategy, amount, count):
        splits = strategy.calculate_splits(Decimal(amount), lines(*[None] * count))

        assert sum(s.amount for s in splits) == Decimal(amount)


class TestManualSplitStrategy:
    """Test manual split strategy"""

    @pytest.fixture
    def strategy(self):
        return ManualSplitStrategy()

    def test_manual_split_verbatim(self, strategy):
        splits = strategy.calculate_splits(Decimal("100.00"), lines(Decimal("70.00"), Decimal("30.00")))

        assert [s.amount for s in splits] == [Decimal("70.00"), Decimal("30.00")]

    def test_manual_split_within_tolerance(self, strategy):
        splits = strategy.calculate_splits(Decimal("100.00"), lines(Decimal("33.33"), Decimal("33.33"), Decimal("33.33")))

        assert len(splits) == 3

    def test_manual_split_sum_mismatch(self, strategy):
        with pytest.raises(ValidationError) as exc_info:
            strategy.calculate_splits(Decimal("100.00"), lines(Decimal("60.00"), Decimal("30.00")))

        assert "must equal expense amount" in exc_info.value.message

    def test_manual_split_missing_amount(self, strategy):
        with pytest.raises(ValidationError):
            strategy.calculate_splits(Decimal("100.00"), lines(Decimal("100.00"), None))

    def test_manual_split_negative_amount(self, strategy):
        with pytest.raises(ValidationError):
            strategy.calculate_splits(Decimal("10.00"), lines(Decimal("15.00"), Decimal("-5.00")))

    def test_manual_split_keeps_percentage(self, strategy):
        split_data = [{"participant_id": uuid4(), "amount": Decimal("25.00"), "percentage": Decimal("25")},
                      {"participant_id": uuid4(), "amount": Decimal("75.00"), "percentage": Decimal("75")}]

        splits = strategy.calculate_splits(Decimal("100.00"), split_data)

        assert [s.percentage for s in splits] == [Decimal("25"), Decimal("75")]


class TestRescaleSplits:
    """Test proportional rescaling used when only the amount changes"""

    def test_rescale_keeps_ratio(self):
        splits = [
            ParticipantSplit(participant_id=uuid4(), amount=Decimal("70.00")),
            ParticipantSplit(participant_id=uuid4(), amount=Decimal("30.00")),
        ]

        rescaled = rescale_splits(splits, Decimal("100.00"), Decimal("200.00"))

        assert [s.amount for s in rescaled] == [Decimal("140.00"), Decimal("60.00")]

    def test_rescale_remainder_to_last(self):
        splits = [
            ParticipantSplit(participant_id=uuid4(), amount=Decimal("33.33")),
            ParticipantSplit(participant_id=uuid4(), amount=Decimal("33.33")),
            ParticipantSplit(participant_id=uuid4(), amount=Decimal("33.34")),
        ]

        rescaled = rescale_splits(splits, Decimal("100.00"), Decimal("50.00"))

        assert sum(s.amount for s in rescaled) == Decimal("50.00")
        assert rescaled[0].amount == Decimal("16.67")
        assert rescaled[2].amount == Decimal("16.66")

    def test_rescale_empty(self):
        assert rescale_splits([], Decimal("10"), Decimal("20")) == []
