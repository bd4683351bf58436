"""Calendar period selection for account transaction history."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from service_quote.models import Account

PERIOD_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

MONTH_NAME_TO_INDEX = {name.lower(): idx for idx, name in enumerate(PERIOD_NAMES)}

# Months the new-account option stays available after the starting month
NEW_ACCOUNT_WINDOW = 3


class BillingFrequency(str, Enum):
    """How often the client is billed for the books service."""

    MONTHLY = "monthly"
    ANNUAL = "annual"

    @classmethod
    def parse(cls, value: Any) -> BillingFrequency:
        """Return the frequency for a label, falling back to monthly."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.MONTHLY


def parse_period(value: Any) -> int | None:
    """Normalize a month index (0-11) or month name into a period index."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 <= value < len(PERIOD_NAMES) else None
    if isinstance(value, str):
        return MONTH_NAME_TO_INDEX.get(value.strip().lower())
    return None


def relevant_periods(
    frequency: BillingFrequency | str, today: date | None = None
) -> list[int]:
    """Return the periods whose history counts toward a quote.

    Annual quotes look at the whole year. Monthly quotes look at every month
    up to the one before ``today``, except in the first quarter when there
    is too little history and the whole year is shown.
    """
    all_periods = list(range(len(PERIOD_NAMES)))
    if BillingFrequency.parse(frequency) == BillingFrequency.ANNUAL:
        return all_periods

    today = today or date.today()
    current = today.month - 1
    if current <= 2:
        return all_periods
    return all_periods[:current]


def available_periods(
    account: Account,
    frequency: BillingFrequency | str = BillingFrequency.MONTHLY,
    today: date | None = None,
) -> list[int]:
    """Return the periods an account has usable history for, in order."""
    start = account.start_index or 0
    relevant = set(relevant_periods(frequency, today))
    return [
        period
        for period in range(start, len(PERIOD_NAMES))
        if period in relevant and period not in account.excluded_periods
    ]


def exclude_from(account: Account, period: int) -> Account:
    """Drop ``period`` and every later month from an account's history.

    The excluded set only ever grows, so re-including a month requires
    starting again from the account before any exclusion.
    """
    if not 0 <= period < len(PERIOD_NAMES):
        return account
    dropped = frozenset(range(period, len(PERIOD_NAMES)))
    return replace(account, excluded_periods=account.excluded_periods | dropped)


def is_new_account_available(starting_period: Any, today: date | None = None) -> bool:
    """Return True if an account starting in this month may be flagged new."""
    start = parse_period(starting_period)
    if start is None:
        return False
    today = today or date.today()
    elapsed = (today.month - 1) - start
    return 0 <= elapsed < NEW_ACCOUNT_WINDOW
