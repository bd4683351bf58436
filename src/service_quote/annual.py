"""Annual books pricing and the prepayment discount ladder."""

from collections.abc import Iterable, Mapping, Sequence
from decimal import ROUND_FLOOR, Decimal

import structlog

from service_quote.books import MINIMUM_BOOKS_RATE, account_rate
from service_quote.models import Account, AnnualQuote
from service_quote.periods import BillingFrequency, available_periods

logger = structlog.get_logger(__name__)

# (lower bound of annual total, discount). Bounds are inclusive and the
# table is ordered from the highest tier down.
ANNUAL_DISCOUNT_TIERS: list[tuple[Decimal, Decimal]] = [
    (Decimal("3000"), Decimal("0.25")),
    (Decimal("2800"), Decimal("0.22")),
    (Decimal("1700"), Decimal("0.20")),
    (Decimal("1460"), Decimal("0.17")),
    (Decimal("1190"), Decimal("0.15")),
    (Decimal("990"), Decimal("0.12")),
    (Decimal("660"), Decimal("0.09")),
]

DISCOUNT_STEP = Decimal("5")


def annual_discount_percentage(total_annual_rate: Decimal | int) -> Decimal:
    """Return the discount fraction earned by an annual total."""
    total = Decimal(total_annual_rate)
    for lower_bound, percentage in ANNUAL_DISCOUNT_TIERS:
        if total >= lower_bound:
            return percentage
    return Decimal("0")


def round_down_to_nearest_five(amount: Decimal) -> Decimal:
    """Round a dollar amount down to a multiple of 5."""
    steps = (amount / DISCOUNT_STEP).to_integral_value(rounding=ROUND_FLOOR)
    return steps * DISCOUNT_STEP


def annual_period_rates(
    accounts: Sequence[Account], new_flags: Sequence[bool] = ()
) -> dict[int, Decimal]:
    """Return the books rate for every month at least one account covers.

    Each account adds its monthly rate to every month it is active in, at
    its position among all accounts. Each month is then held to the $110
    minimum on its own.
    """
    sums: dict[int, Decimal] = {}
    for idx, account in enumerate(accounts):
        periods = available_periods(account, BillingFrequency.ANNUAL)
        if not periods:
            continue
        is_new = idx < len(new_flags) and bool(new_flags[idx])
        rate = account_rate(account, idx, is_new, BillingFrequency.ANNUAL)
        for period in periods:
            sums[period] = sums.get(period, Decimal("0")) + rate

    return {
        period: max(subtotal, MINIMUM_BOOKS_RATE)
        for period, subtotal in sorted(sums.items())
    }


def compute_annual_pricing(
    per_period_rates: Mapping[int, Decimal] | Iterable[Decimal | int],
) -> AnnualQuote:
    """Total the monthly rates and apply the annual discount.

    The discount is taken on the already-rounded monthly figures and then
    rounded down to a multiple of $5.
    """
    if isinstance(per_period_rates, Mapping):
        rates = {int(k): Decimal(v) for k, v in per_period_rates.items()}
    else:
        rates = {idx: Decimal(v) for idx, v in enumerate(per_period_rates)}

    total = sum(rates.values(), Decimal("0"))
    percentage = annual_discount_percentage(total)
    discount = round_down_to_nearest_five(total * percentage)
    quote = AnnualQuote(
        per_period_rates=rates,
        total_annual_rate=total,
        discount_percentage=percentage,
        discount_amount=discount,
        discounted_rate=total - discount,
    )
    logger.debug(
        "annual_pricing_computed",
        months=len(rates),
        total=str(total),
        discount=str(discount),
    )
    return quote
