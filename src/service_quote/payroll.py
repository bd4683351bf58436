"""Payroll service pricing by headcount."""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from service_quote.models import PayrollRow, ServiceStatus, parse_count

PAYROLL_SETUP_FEE = Decimal("150")
FIRST_EMPLOYEE_RATE = Decimal("75")
# Employees 2 and 3
EARLY_EMPLOYEE_RATE = Decimal("20")
EARLY_EMPLOYEE_LIMIT = 2
ADDITIONAL_EMPLOYEE_RATE = Decimal("15")


def compute_payroll_rate(employee_count: Any) -> Decimal | None:
    """Return the monthly payroll rate, or None when there are no employees."""
    n = parse_count(employee_count)
    if n < 1:
        return None
    early = min(EARLY_EMPLOYEE_LIMIT, n - 1)
    additional = max(0, n - 1 - EARLY_EMPLOYEE_LIMIT)
    return (
        FIRST_EMPLOYEE_RATE
        + EARLY_EMPLOYEE_RATE * early
        + ADDITIONAL_EMPLOYEE_RATE * additional
    )


def compute_payroll_setup(status: Any) -> Decimal:
    """Registration fee: $150 for a new payroll account, nothing otherwise."""
    if ServiceStatus.parse(status) == ServiceStatus.NEW:
        return PAYROLL_SETUP_FEE
    return Decimal("0")


def payroll_totals(rows: Iterable[PayrollRow]) -> tuple[Decimal, Decimal]:
    """Return the summed (rate, setup) across all payroll rows."""
    rate = setup = Decimal("0")
    for row in rows:
        rate += compute_payroll_rate(row.employees) or Decimal("0")
        setup += compute_payroll_setup(row.status)
    return rate, setup
