"""Data types shared by the pricing engine.

Raw inputs (accounts, period records, payroll and sales tax rows) keep the
values exactly as entered. Every derived figure is recomputed from them on
each call, so nothing here caches computed state.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from service_quote.periods import PERIOD_NAMES, parse_period

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_count(value: Any) -> int:
    """Coerce a raw count to a non-negative integer.

    Strings are read up to the first non-digit ("12abc" -> 12). Anything
    that does not parse, including digit runs too long to convert, and any
    negative number, becomes 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        number = value
    elif isinstance(value, (float, Decimal)):
        if not math.isfinite(value):
            return 0
        number = int(value)
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return 0
        try:
            number = int(match.group(1))
        except ValueError:
            # Past the interpreter's digit limit for int()
            return 0
    return max(number, 0)


class AccountCategory(str, Enum):
    """Kinds of accounts a client can bring to the books service."""

    CHECKING = "Checking"
    SAVINGS = "Savings"
    CREDIT_CARD = "Credit Card"
    JOBOX = "Jobox"
    PAYPAL = "Paypal"
    AMAZON = "Amazon"

    @classmethod
    def parse(cls, value: Any) -> AccountCategory | None:
        """Return the category for a label, or None when blank or unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.replace(" ", "").lower()
        for category in cls:
            if category.value.replace(" ", "").lower() == normalized:
                return category
        return None

    @property
    def is_flat_fee(self) -> bool:
        return self in FLAT_FEE_CATEGORIES

    @property
    def shows_total(self) -> bool:
        return self in TOTAL_CATEGORIES

    @property
    def shows_deposits_checks(self) -> bool:
        return self in DEPOSITS_CHECKS_CATEGORIES


FLAT_FEE_CATEGORIES = frozenset(
    {AccountCategory.JOBOX, AccountCategory.PAYPAL, AccountCategory.AMAZON}
)
TOTAL_CATEGORIES = frozenset(
    {AccountCategory.CHECKING, AccountCategory.SAVINGS, AccountCategory.CREDIT_CARD}
)
DEPOSITS_CHECKS_CATEGORIES = frozenset(
    {AccountCategory.CHECKING, AccountCategory.SAVINGS}
)


class ServiceStatus(str, Enum):
    """Whether the client is new to a service or already registered."""

    NEW = "New"
    EXISTING = "Existing"

    @classmethod
    def parse(cls, value: Any) -> ServiceStatus | None:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        for status in cls:
            if status.value.lower() == normalized:
                return status
        return None


@dataclass(frozen=True)
class PeriodRecord:
    """Raw transaction counts entered for one month. Any field may be missing."""

    total: Any = None
    deposits: Any = None
    checks: Any = None


@dataclass(frozen=True)
class Account:
    """A bank or merchant account as entered by the user.

    ``starting_period`` and ``category`` hold the raw selection; use
    :attr:`category_kind` and :attr:`start_index` for the parsed values.
    """

    bank_name: str = ""
    last_digits: str = ""
    category: Any = AccountCategory.CHECKING
    starting_period: Any = None
    excluded_periods: frozenset[int] = frozenset()
    records: dict[int, PeriodRecord] = field(default_factory=dict)

    @property
    def category_kind(self) -> AccountCategory | None:
        return AccountCategory.parse(self.category)

    @property
    def start_index(self) -> int | None:
        return parse_period(self.starting_period)

    @property
    def is_flat_fee(self) -> bool:
        kind = self.category_kind
        return kind is not None and kind.is_flat_fee

    def record_for(self, period: int) -> PeriodRecord:
        """Return the record for a period, or an empty record when none exists."""
        return self.records.get(period) or PeriodRecord()


@dataclass(frozen=True)
class Averages:
    """Rounded average monthly transaction counts for one account."""

    total: int = 0
    deposits: int = 0
    checks: int = 0


@dataclass(frozen=True)
class PayrollRow:
    """One state registration for the payroll service."""

    state: str = ""
    employees: Any = None
    status: Any = None


@dataclass(frozen=True)
class SalesTaxRow:
    """One state registration for the sales tax service."""

    state: str = ""
    certificates: Any = None
    status: Any = None


@dataclass(frozen=True)
class ClientInfo:
    """Who the quote is for and which staff member prepared it."""

    company_name: str = ""
    owner_name: str = ""
    employee: str = ""


@dataclass(frozen=True)
class MonthlyQuote:
    """Monthly rates and one-time setup fees across all services."""

    books_rate: Decimal = Decimal("0")
    payroll_rate: Decimal = Decimal("0")
    payroll_setup: Decimal = Decimal("0")
    sales_tax_rate: Decimal = Decimal("0")
    sales_tax_setup: Decimal = Decimal("0")

    @property
    def total_monthly_rate(self) -> Decimal:
        return self.books_rate + self.payroll_rate + self.sales_tax_rate

    @property
    def total_setup_fees(self) -> Decimal:
        return self.payroll_setup + self.sales_tax_setup

    def to_dict(self) -> dict[str, Any]:
        """Serialize the quote for JSON output."""
        return {
            "books_rate": str(self.books_rate),
            "payroll_rate": str(self.payroll_rate),
            "payroll_setup": str(self.payroll_setup),
            "sales_tax_rate": str(self.sales_tax_rate),
            "sales_tax_setup": str(self.sales_tax_setup),
            "total_monthly_rate": str(self.total_monthly_rate),
            "total_setup_fees": str(self.total_setup_fees),
        }


@dataclass(frozen=True)
class AnnualQuote:
    """Annual books pricing with the volume discount applied."""

    per_period_rates: dict[int, Decimal]
    total_annual_rate: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    discounted_rate: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "per_period_rates": {
                PERIOD_NAMES[period]: str(rate)
                for period, rate in sorted(self.per_period_rates.items())
            },
            "total_annual_rate": str(self.total_annual_rate),
            "discount_percentage": str(self.discount_percentage),
            "discount_amount": str(self.discount_amount),
            "discounted_rate": str(self.discounted_rate),
        }
