"""Tests for averaging and the new-account override."""

from service_quote.averaging import (
    apply_new_account_override,
    compute_averages,
    effective_averages,
    round_up_to_nearest_five_or_zero,
)
from service_quote.models import Account, Averages, PeriodRecord


class TestRoundUp:
    """Tests for rounding up to a multiple of 5."""

    def test_known_values(self):
        assert round_up_to_nearest_five_or_zero(0) == 0
        assert round_up_to_nearest_five_or_zero(1) == 5
        assert round_up_to_nearest_five_or_zero(4) == 5
        assert round_up_to_nearest_five_or_zero(5) == 5
        assert round_up_to_nearest_five_or_zero(6) == 10
        assert round_up_to_nearest_five_or_zero(10) == 10
        assert round_up_to_nearest_five_or_zero(123) == 125
        assert round_up_to_nearest_five_or_zero(127) == 130

    def test_result_is_smallest_multiple_of_five_not_below_value(self):
        for value in range(0, 500):
            result = round_up_to_nearest_five_or_zero(value)
            assert result >= value
            assert result % 5 == 0
            assert result - value < 5


class TestComputeAverages:
    """Tests for averaging raw monthly records."""

    def test_averages_round_up_per_field(self):
        records = {
            0: PeriodRecord(total=100, deposits=40, checks=10),
            1: PeriodRecord(total="121", deposits="50"),
        }

        averages = compute_averages(records, [0, 1])

        # 221 / 2 = 110.5 -> 111 -> 115
        assert averages == Averages(total=115, deposits=45, checks=5)

    def test_missing_periods_count_as_zero(self):
        records = {0: PeriodRecord(total=10)}
        assert compute_averages(records, [0, 1]) == Averages(total=5)

    def test_no_periods_gives_zero(self):
        records = {0: PeriodRecord(total=10)}
        assert compute_averages(records, []) == Averages()

    def test_unparsable_values_count_as_zero(self):
        records = {
            0: PeriodRecord(total="abc", deposits="", checks=None),
            1: PeriodRecord(total="20x", deposits=-5, checks="3"),
        }
        assert compute_averages(records, [0, 1]) == Averages(total=10, deposits=0, checks=5)

    def test_only_requested_periods_are_used(self):
        records = {0: PeriodRecord(total=1000), 1: PeriodRecord(total=50)}
        assert compute_averages(records, [1]).total == 50

    def test_oversized_digit_strings_count_as_zero(self):
        records = {0: PeriodRecord(total="9" * 5000), 1: PeriodRecord(total=40)}
        assert compute_averages(records, [0, 1]) == Averages(total=20)


class TestNewAccountOverride:
    """Tests for the new-account floor."""

    def test_low_total_is_raised_and_breakdown_dropped(self):
        overridden = apply_new_account_override(Averages(total=20, deposits=15, checks=5))
        assert overridden == Averages(total=30, deposits=0, checks=0)

    def test_total_of_exactly_thirty_drops_breakdown(self):
        overridden = apply_new_account_override(Averages(total=30, deposits=10, checks=5))
        assert overridden == Averages(total=30, deposits=0, checks=0)

    def test_total_above_thirty_keeps_averages(self):
        averages = Averages(total=45, deposits=20, checks=10)
        assert apply_new_account_override(averages) == averages

    def test_effective_averages_only_override_when_flagged(self, account_factory, today):
        account = account_factory(months=[0], total=20, deposits=20)

        assert effective_averages(account, False, "monthly", today) == Averages(
            total=5, deposits=5
        )
        assert effective_averages(account, True, "monthly", today) == Averages(total=30)

    def test_new_account_without_history(self, today):
        assert effective_averages(Account(), True, "monthly", today) == Averages(total=30)


def test_compute_averages_is_idempotent():
    records = {0: PeriodRecord(total=37, deposits=12, checks=3)}
    assert compute_averages(records, [0, 1, 2]) == compute_averages(records, [0, 1, 2])
