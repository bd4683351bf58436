"""Which quote fields must be filled in, and which of them are invalid.

The required transaction fields of an account depend on its average
volume, and that average comes from the very fields being validated. The
set is not solved once: callers re-run :func:`validate_account` after every
edit, and it always recomputes from the current raw values.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from service_quote.averaging import compute_averages
from service_quote.models import (
    Account,
    AccountCategory,
    Averages,
    ClientInfo,
    PayrollRow,
    SalesTaxRow,
    ServiceStatus,
    parse_count,
)
from service_quote.periods import (
    PERIOD_NAMES,
    BillingFrequency,
    available_periods,
    parse_period,
)

BANK_NAME = "bank_name"
LAST_DIGITS = "last_digits"
CATEGORY = "category"
STARTING_PERIOD = "starting_period"
IDENTITY_FIELDS = (BANK_NAME, LAST_DIGITS, CATEGORY, STARTING_PERIOD)

TOTAL = "total"
DEPOSITS = "deposits"
CHECKS = "checks"
PERIOD_FIELDS = (TOTAL, DEPOSITS, CHECKS)

YEAR = "year"

COMPANY_NAME = "company_name"
OWNER_NAME = "owner_name"
EMPLOYEE = "employee"
CLIENT_FIELDS = (COMPANY_NAME, OWNER_NAME, EMPLOYEE)

# Display order for non-period keys
_KEY_ORDER = (*CLIENT_FIELDS, *IDENTITY_FIELDS)

# Compared without trailing dots, so "Inc." matches "inc"
LEGAL_ENTITY_SUFFIXES = frozenset(
    {
        "llc", "inc", "corp", "co", "ltd", "llp", "pllc", "plc",
        "company", "corporation", "limited", "incorporated",
        "gmbh", "sarl", "sa", "pte", "pty", "ag", "bv", "kg", "kgaa", "oy",
        "ab", "aps", "as", "nv", "srl", "spa",
        "s.p.a", "s.a", "s.a.s", "s.n.c", "s.c.a.r.l", "s.c.r.l",
    }
)

# Average totals above which deposits / checks must be broken out
DEPOSITS_REQUIRED_ABOVE = 150
CHECKS_REQUIRED_ABOVE = 50

_FIELD_LABELS = {
    BANK_NAME: "Bank name is required.",
    LAST_DIGITS: "Last four digits are required.",
    CATEGORY: "Account type is required.",
    STARTING_PERIOD: "Starting month is required.",
    YEAR: "Year selection is required for annual quotes.",
    COMPANY_NAME: "Company name with a legal entity suffix (e.g. LLC) is required.",
    OWNER_NAME: "Owner's name is required.",
    EMPLOYEE: "Employee is required.",
    "state": "State is required.",
    "employees": "Number of employees is required.",
    "certificates": "Number of certificates is required.",
    "status": "Type is required.",
}


def period_field_key(field: str, period: int) -> str:
    """Key for one month's transaction field, e.g. ``total_january``."""
    return f"{field}_{PERIOD_NAMES[period].lower()}"


def split_period_field_key(key: str) -> tuple[str, int] | None:
    """Inverse of :func:`period_field_key`; None for non-period keys."""
    field, _, month = key.partition("_")
    if field not in PERIOD_FIELDS:
        return None
    period = parse_period(month)
    if period is None:
        return None
    return field, period


def is_period_field_key(key: str) -> bool:
    return split_period_field_key(key) is not None


def deposits_enabled(category: AccountCategory | None, average_total: int) -> bool:
    """Deposits must be entered for busy checking and savings accounts."""
    return (
        category is not None
        and category.shows_deposits_checks
        and average_total > DEPOSITS_REQUIRED_ABOVE
    )


def checks_enabled(category: AccountCategory | None, average_total: int) -> bool:
    """Checks must be entered for checking and savings above 50 transactions."""
    return (
        category is not None
        and category.shows_deposits_checks
        and average_total > CHECKS_REQUIRED_ABOVE
    )


def resolve_required_fields(
    account: Account,
    averages: Averages,
    is_new: bool = False,
    *,
    periods: Iterable[int] | None = None,
    frequency: BillingFrequency | str = BillingFrequency.MONTHLY,
    today: date | None = None,
) -> frozenset[str]:
    """Return the keys of every field the user has to fill in.

    ``periods`` defaults to the account's available periods for the given
    frequency.
    """
    required = set(IDENTITY_FIELDS)
    category = account.category_kind
    if is_new or (category is not None and category.is_flat_fee):
        return frozenset(required)

    if periods is None:
        periods = available_periods(account, frequency, today)

    need_total = category is not None and category.shows_total
    need_deposits = deposits_enabled(category, averages.total)
    need_checks = checks_enabled(category, averages.total)
    for period in periods:
        if need_total:
            required.add(period_field_key(TOTAL, period))
        if need_deposits:
            required.add(period_field_key(DEPOSITS, period))
        if need_checks:
            required.add(period_field_key(CHECKS, period))
    return frozenset(required)


def _as_number(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = Decimal(value) if isinstance(value, int) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _field_is_valid(account: Account, key: str) -> bool:
    if key in (BANK_NAME, LAST_DIGITS):
        return not _is_blank(getattr(account, key))
    if key == CATEGORY:
        return account.category_kind is not None
    if key == STARTING_PERIOD:
        return account.start_index is not None

    parsed = split_period_field_key(key)
    if parsed is None:
        return True
    field, period = parsed
    number = _as_number(getattr(account.record_for(period), field))
    if number is None:
        return False
    if field == TOTAL:
        return number > 0
    return number >= 0


def validate_account(
    account: Account,
    is_new: bool = False,
    *,
    frequency: BillingFrequency | str = BillingFrequency.MONTHLY,
    today: date | None = None,
) -> frozenset[str]:
    """Return the keys of required fields that are missing or invalid."""
    periods = available_periods(account, frequency, today)
    averages = compute_averages(account.records, periods)
    required = resolve_required_fields(account, averages, is_new, periods=periods)
    return frozenset(key for key in required if not _field_is_valid(account, key))


def clear_period_errors(errors: Iterable[str]) -> frozenset[str]:
    """Drop every transaction field error, keeping identity errors."""
    return frozenset(key for key in errors if not is_period_field_key(key))


def clear_errors_after_edit(errors: Iterable[str], field: str) -> frozenset[str]:
    """Return the errors still shown after the user edits ``field``.

    Changing the category or starting month changes which months and
    fields apply, so all transaction errors are cleared with it.
    """
    remaining = frozenset(key for key in errors if key != field)
    if field in (CATEGORY, STARTING_PERIOD):
        return clear_period_errors(remaining)
    return remaining


def has_legal_entity_suffix(name: Any) -> bool:
    """Return True if a company name ends in a suffix such as LLC or Inc.

    The suffix must be the whole name or follow a space, dot or comma, so
    "Acme Co." matches and "Texas" does not.
    """
    if not isinstance(name, str):
        return False
    lower = name.strip().lower().rstrip(".")
    for suffix in LEGAL_ENTITY_SUFFIXES:
        if lower == suffix:
            return True
        if lower.endswith(suffix) and lower[-len(suffix) - 1] in " .,":
            return True
    return False


def validate_client(client: ClientInfo) -> frozenset[str]:
    """Return the client fields that are missing or invalid."""
    errors = set()
    if _is_blank(client.company_name) or not has_legal_entity_suffix(
        client.company_name
    ):
        errors.add(COMPANY_NAME)
    if _is_blank(client.owner_name):
        errors.add(OWNER_NAME)
    if _is_blank(client.employee):
        errors.add(EMPLOYEE)
    return frozenset(errors)


def validate_payroll_row(row: PayrollRow) -> frozenset[str]:
    errors = set()
    if _is_blank(row.state):
        errors.add("state")
    if parse_count(row.employees) < 1:
        errors.add("employees")
    if ServiceStatus.parse(row.status) is None:
        errors.add("status")
    return frozenset(errors)


def validate_sales_tax_row(row: SalesTaxRow) -> frozenset[str]:
    errors = set()
    if _is_blank(row.state):
        errors.add("state")
    number = _as_number(row.certificates)
    if number is None or number < 0:
        errors.add("certificates")
    if ServiceStatus.parse(row.status) is None:
        errors.add("status")
    return frozenset(errors)


def describe_error(key: str) -> str:
    """Return a message for one invalid field key."""
    parsed = split_period_field_key(key)
    if parsed is not None:
        field, period = parsed
        return f"{field.capitalize()} for {PERIOD_NAMES[period]} is required."
    return _FIELD_LABELS.get(key, f"{key.replace('_', ' ').capitalize()} is required.")


def describe_errors(errors: Iterable[str]) -> list[str]:
    """Messages for invalid keys: client and identity fields first, then by month."""

    def order(key: str) -> tuple[int, int, int, str]:
        parsed = split_period_field_key(key)
        if parsed is None:
            rank = _KEY_ORDER.index(key) if key in _KEY_ORDER else -1
            return (0, rank, 0, key)
        field, period = parsed
        return (1, period, PERIOD_FIELDS.index(field), key)

    return [describe_error(key) for key in sorted(errors, key=order)]
