"""Average monthly transaction counts and the new-account override."""

from collections.abc import Iterable, Mapping
from datetime import date

import structlog

from service_quote.models import Account, Averages, PeriodRecord, parse_count
from service_quote.periods import BillingFrequency, available_periods

logger = structlog.get_logger(__name__)

# Transactions assumed for an account too new to have reliable history
NEW_ACCOUNT_MINIMUM_TOTAL = 30


def round_up_to_nearest_five_or_zero(value: int) -> int:
    """Round a whole number up to the next multiple of 5.

    Values already ending in 0 or 5 are returned unchanged, so 0 stays 0.
    """
    ones = value % 10
    if ones in (0, 5):
        return value
    if ones < 5:
        return value + (5 - ones)
    return value + (10 - ones)


def _rounded_mean(total: int, count: int) -> int:
    # Ceiling division keeps the arithmetic in integers
    return round_up_to_nearest_five_or_zero(-(-total // count))


def compute_averages(
    period_records: Mapping[int, PeriodRecord], periods: Iterable[int]
) -> Averages:
    """Average each count over the given periods.

    Periods without a record count as zero activity. Each average is rounded
    up to a whole number and then up to the nearest multiple of 5.
    """
    periods = list(periods)
    if not periods:
        return Averages()

    total = deposits = checks = 0
    for period in periods:
        record = period_records.get(period) or PeriodRecord()
        total += parse_count(record.total)
        deposits += parse_count(record.deposits)
        checks += parse_count(record.checks)

    count = len(periods)
    return Averages(
        total=_rounded_mean(total, count),
        deposits=_rounded_mean(deposits, count),
        checks=_rounded_mean(checks, count),
    )


def apply_new_account_override(averages: Averages) -> Averages:
    """Replace thin history with the new-account floor.

    The total is raised to at least 30. Deposits and checks only carry over
    when the entered total already exceeds that floor.
    """
    if averages.total > NEW_ACCOUNT_MINIMUM_TOTAL:
        return averages
    return Averages(total=NEW_ACCOUNT_MINIMUM_TOTAL, deposits=0, checks=0)


def account_averages(
    account: Account,
    frequency: BillingFrequency | str = BillingFrequency.MONTHLY,
    today: date | None = None,
) -> Averages:
    """Plain averages over an account's available periods."""
    return compute_averages(
        account.records, available_periods(account, frequency, today)
    )


def effective_averages(
    account: Account,
    is_new: bool = False,
    frequency: BillingFrequency | str = BillingFrequency.MONTHLY,
    today: date | None = None,
) -> Averages:
    """Averages used for pricing, with the new-account override when flagged."""
    averages = account_averages(account, frequency, today)
    if is_new:
        overridden = apply_new_account_override(averages)
        if overridden != averages:
            logger.debug(
                "new_account_override_applied",
                entered_total=averages.total,
                effective_total=overridden.total,
            )
        return overridden
    return averages
