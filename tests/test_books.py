"""Tests for bookkeeping rates."""

from decimal import Decimal

import pytest

from service_quote.books import (
    account_rate,
    base_fee,
    compute_account_rate,
    compute_books_total,
    transaction_fee,
)
from service_quote.models import Account, AccountCategory, Averages


@pytest.mark.parametrize(
    "position,expected",
    [(0, "25"), (1, "20"), (2, "20"), (3, "15"), (11, "15")],
)
def test_base_fee_by_position(position, expected):
    assert base_fee(position) == Decimal(expected)


class TestComputeAccountRate:
    """Tests for a single account's monthly rate."""

    @pytest.mark.parametrize("category", ["Jobox", "Paypal", "Amazon"])
    def test_flat_fee_categories(self, category):
        assert compute_account_rate(0, category, Averages(total=500)) == Decimal("55")
        assert compute_account_rate(4, category, Averages()) == Decimal("55")

    def test_zero_activity_owes_nothing(self):
        assert compute_account_rate(0, AccountCategory.CHECKING, Averages()) == 0

    def test_volume_rate_rounds_up_to_five(self):
        # 25 + 20 * 0.85 = 42
        assert compute_account_rate(0, "Checking", Averages(total=20)) == Decimal("45")

    def test_later_positions_use_lower_base_fee(self):
        # 15 + 100 * 0.85 = 100
        assert compute_account_rate(3, "Savings", Averages(total=100)) == Decimal("100")

    def test_deposit_discount_above_150(self):
        averages = Averages(total=200, deposits=100)
        # 25 + 100 * 0.425 + 100 * 0.85 = 152.5 -> 153 -> 155
        assert compute_account_rate(0, "Checking", averages) == Decimal("155")

    def test_no_deposit_discount_below_half(self):
        averages = Averages(total=200, deposits=95)
        # 25 + 200 * 0.85 = 195
        assert compute_account_rate(0, "Checking", averages) == Decimal("195")

    def test_no_deposit_discount_at_150(self):
        averages = Averages(total=150, deposits=150)
        # 25 + 150 * 0.85 = 152.5 -> 153 -> 155
        assert compute_account_rate(0, "Checking", averages) == Decimal("155")

    def test_rate_never_decreases_with_volume(self):
        for category in ("Checking", "Savings", "Credit Card"):
            for position in (0, 1, 3):
                rates = [
                    compute_account_rate(position, category, Averages(total=total))
                    for total in range(5, 605, 5)
                ]
                assert rates == sorted(rates)

    def test_transaction_fee_ignores_flat_categories(self):
        assert transaction_fee(AccountCategory.PAYPAL, Averages(total=100)) == 0


class TestBooksTotal:
    """Tests for the books service total."""

    def test_single_zero_activity_account_pays_minimum(self, today):
        accounts = [Account(starting_period="January")]
        assert compute_books_total(accounts, [], "monthly", today) == Decimal("110")

    def test_no_accounts_pays_minimum(self, today):
        assert compute_books_total([], [], "monthly", today) == Decimal("110")

    def test_sums_accounts_by_position(self, account_factory, today):
        accounts = [
            account_factory(total=100, checks=10),  # 25 + 85 = 110
            account_factory(category="Credit Card", total=40),  # 20 + 34 -> 55
            account_factory(category="Paypal", total=None),  # flat 55
        ]
        assert compute_books_total(accounts, [], "monthly", today) == Decimal("220")

    def test_new_flag_applies_override(self, account_factory, today):
        account = account_factory(months=[0], total=20)

        # ceil(20 / 6) = 4 -> 5 transactions: 25 + 4.25 -> 30
        assert account_rate(account, 0, False, "monthly", today) == Decimal("30")
        # overridden to 30 transactions: 25 + 25.5 -> 51 -> 55
        assert account_rate(account, 0, True, "monthly", today) == Decimal("55")

    def test_new_flag_lines_up_by_position(self, account_factory, today):
        big = account_factory(total=200, deposits=100, checks=10)
        quiet = account_factory(category="Credit Card", months=[], total=None)

        # Only the second account is new: 155 + (20 + 25.5 -> 50)
        total = compute_books_total([big, quiet], [False, True], "monthly", today)
        assert total == Decimal("205")

    def test_removing_an_account_shifts_base_fees(self, account_factory, today):
        first = account_factory(total=100)
        second = account_factory(category="Credit Card", total=40)

        assert account_rate(second, 1, today=today) == Decimal("55")
        # 25 + 34 = 59 -> 60 once it becomes the first account
        assert account_rate(second, 0, today=today) == Decimal("60")
        assert compute_books_total([first, second], today=today) == Decimal("165")
        assert compute_books_total([second], today=today) == Decimal("110")

    def test_total_is_idempotent(self, account_factory, today):
        accounts = [account_factory(total=180, deposits=120), account_factory(total=60)]
        first = compute_books_total(accounts, [], "monthly", today)
        assert compute_books_total(accounts, [], "monthly", today) == first
