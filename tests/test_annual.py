"""Tests for annual pricing and the discount ladder."""

from decimal import Decimal

import pytest

from service_quote.annual import (
    annual_discount_percentage,
    annual_period_rates,
    compute_annual_pricing,
    round_down_to_nearest_five,
)
from service_quote.periods import exclude_from


@pytest.mark.parametrize(
    "total,expected",
    [
        (0, "0"),
        (659, "0"),
        (660, "0.09"),
        (989, "0.09"),
        (990, "0.12"),
        (1189, "0.12"),
        (1190, "0.15"),
        (1459, "0.15"),
        (1460, "0.17"),
        (1699, "0.17"),
        (1700, "0.20"),
        (2799, "0.20"),
        (2800, "0.22"),
        (2999, "0.22"),
        (3000, "0.25"),
        (12000, "0.25"),
    ],
)
def test_discount_ladder(total, expected):
    assert annual_discount_percentage(total) == Decimal(expected)


def test_round_down_to_nearest_five():
    assert round_down_to_nearest_five(Decimal("59.4")) == 55
    assert round_down_to_nearest_five(Decimal("60")) == 60
    assert round_down_to_nearest_five(Decimal("4.99")) == 0


class TestComputeAnnualPricing:
    """Tests for totalling and discounting monthly rates."""

    def test_lowest_discount_boundary(self):
        pricing = compute_annual_pricing([Decimal("660")])

        assert pricing.total_annual_rate == 660
        assert pricing.discount_percentage == Decimal("0.09")
        assert pricing.discount_amount == 55
        assert pricing.discounted_rate == 605

    def test_just_below_discount(self):
        pricing = compute_annual_pricing([659])

        assert pricing.discount_percentage == 0
        assert pricing.discount_amount == 0
        assert pricing.discounted_rate == 659

    def test_full_year_at_minimum(self):
        pricing = compute_annual_pricing({period: Decimal("110") for period in range(12)})

        # 1320 * 15% = 198 -> 195
        assert pricing.total_annual_rate == 1320
        assert pricing.discount_amount == 195
        assert pricing.discounted_rate == 1125

    def test_empty_year(self):
        pricing = compute_annual_pricing({})

        assert pricing.total_annual_rate == 0
        assert pricing.discounted_rate == 0


class TestAnnualPeriodRates:
    """Tests for the per-month books rates of an annual quote."""

    def test_each_month_held_to_minimum(self, account_factory):
        account = account_factory(starting_period="April", months=range(3, 12), total=20)

        rates = annual_period_rates([account])

        assert rates == {period: Decimal("110") for period in range(3, 12)}
        pricing = compute_annual_pricing(rates)
        assert pricing.total_annual_rate == 990
        assert pricing.discount_amount == 115
        assert pricing.discounted_rate == 875

    def test_accounts_add_up_in_overlapping_months(self, account_factory):
        year_round = account_factory(months=range(12), total=100, checks=10)
        seasonal = exclude_from(
            account_factory(
                category="Credit Card",
                starting_period="July",
                months=range(6, 9),
                total=100,
            ),
            9,
        )

        rates = annual_period_rates([year_round, seasonal])

        # 110 alone; 110 + (20 + 85) with the seasonal card
        assert rates[0] == Decimal("110")
        assert rates[7] == Decimal("215")
        assert rates[11] == Decimal("110")
        pricing = compute_annual_pricing(rates)
        assert pricing.total_annual_rate == 1635
        assert pricing.discount_percentage == Decimal("0.17")
        assert pricing.discount_amount == 275
        assert pricing.discounted_rate == 1360

    def test_accounts_without_months_are_skipped(self, account_factory):
        gone = exclude_from(account_factory(), 0)
        assert annual_period_rates([gone]) == {}

    def test_new_flag_applies_to_annual_rates(self, account_factory):
        established = account_factory(months=range(12), total=100)
        fresh = account_factory(category="Credit Card", months=[], total=None)

        assert set(annual_period_rates([established, fresh]).values()) == {
            Decimal("110")
        }
        rates = annual_period_rates([established, fresh], [False, True])
        # 110 + (20 + 30 * 0.85 = 45.5 -> 50)
        assert set(rates.values()) == {Decimal("160")}
        assert len(rates) == 12
