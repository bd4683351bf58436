"""Monthly bookkeeping rates per account and for the whole books service."""

from collections.abc import Sequence
from datetime import date
from decimal import ROUND_CEILING, Decimal

import structlog

from service_quote.averaging import effective_averages, round_up_to_nearest_five_or_zero
from service_quote.models import Account, AccountCategory, Averages
from service_quote.periods import BillingFrequency

logger = structlog.get_logger(__name__)

FLAT_CATEGORY_RATE = Decimal("55")
MINIMUM_BOOKS_RATE = Decimal("110")

# Base fee by account position: 1st, 2nd-3rd, 4th and later
FIRST_ACCOUNT_BASE_FEE = Decimal("25")
SECOND_THIRD_ACCOUNT_BASE_FEE = Decimal("20")
ADDITIONAL_ACCOUNT_BASE_FEE = Decimal("15")

TRANSACTION_PRICE = Decimal("0.85")
DEPOSIT_PRICE = Decimal("0.425")
# Deposit discount only kicks in above this average volume
DEPOSIT_DISCOUNT_THRESHOLD = 150


def base_fee(position_index: int) -> Decimal:
    """Return the base monthly fee for an account at the given position."""
    if position_index <= 0:
        return FIRST_ACCOUNT_BASE_FEE
    if position_index <= 2:
        return SECOND_THIRD_ACCOUNT_BASE_FEE
    return ADDITIONAL_ACCOUNT_BASE_FEE


def transaction_fee(
    category: AccountCategory | None, averages: Averages
) -> Decimal:
    """Return the volume fee for an account's average activity.

    When deposits make up at least half of more than 150 transactions,
    deposits are billed at half price.
    """
    total = averages.total
    if total == 0:
        return Decimal("0")
    if category is not None and category.is_flat_fee:
        return Decimal("0")

    deposits = averages.deposits
    if total > DEPOSIT_DISCOUNT_THRESHOLD and 2 * deposits >= total:
        return deposits * DEPOSIT_PRICE + (total - deposits) * TRANSACTION_PRICE
    return total * TRANSACTION_PRICE


def compute_account_rate(
    position_index: int,
    category: AccountCategory | str | None,
    averages: Averages,
) -> Decimal:
    """Return one account's monthly rate in whole dollars.

    ``position_index`` is the account's 0-based place among all quoted
    accounts; removing an earlier account moves later ones into a higher
    base fee tier.
    """
    kind = AccountCategory.parse(category)
    if kind is not None and kind.is_flat_fee:
        return FLAT_CATEGORY_RATE
    # No activity means no charge, base fee included
    if averages.total == 0:
        return Decimal("0")

    raw = base_fee(position_index) + transaction_fee(kind, averages)
    whole = int(raw.to_integral_value(rounding=ROUND_CEILING))
    return Decimal(round_up_to_nearest_five_or_zero(whole))


def account_rate(
    account: Account,
    position_index: int,
    is_new: bool = False,
    frequency: BillingFrequency | str = BillingFrequency.MONTHLY,
    today: date | None = None,
) -> Decimal:
    """Price an account from its raw history."""
    averages = effective_averages(account, is_new, frequency, today)
    return compute_account_rate(position_index, account.category, averages)


def compute_books_total(
    accounts: Sequence[Account],
    new_flags: Sequence[bool] = (),
    frequency: BillingFrequency | str = BillingFrequency.MONTHLY,
    today: date | None = None,
) -> Decimal:
    """Sum every account's monthly rate, never going below $110.

    ``new_flags`` lines up with ``accounts`` by position; missing entries
    count as not new.
    """
    rates = [
        account_rate(
            account,
            idx,
            is_new=idx < len(new_flags) and bool(new_flags[idx]),
            frequency=frequency,
            today=today,
        )
        for idx, account in enumerate(accounts)
    ]
    subtotal = sum(rates, Decimal("0"))
    total = max(subtotal, MINIMUM_BOOKS_RATE)
    logger.debug(
        "books_total_computed",
        accounts=len(accounts),
        subtotal=str(subtotal),
        total=str(total),
    )
    return total
