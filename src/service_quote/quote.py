"""Assemble full quotes and validation reports from raw quote input."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

import structlog

from service_quote.annual import annual_period_rates, compute_annual_pricing
from service_quote.averaging import effective_averages
from service_quote.books import compute_account_rate, compute_books_total
from service_quote.models import (
    Account,
    AnnualQuote,
    Averages,
    ClientInfo,
    MonthlyQuote,
    PayrollRow,
    SalesTaxRow,
)
from service_quote.payroll import payroll_totals
from service_quote.periods import PERIOD_NAMES, BillingFrequency, available_periods
from service_quote.requirements import (
    YEAR,
    validate_account,
    validate_client,
    validate_payroll_row,
    validate_sales_tax_row,
)
from service_quote.sales_tax import sales_tax_totals

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class QuoteRequest:
    """Everything the user has entered for one quote."""

    frequency: BillingFrequency = BillingFrequency.MONTHLY
    year: int | None = None
    client: ClientInfo = field(default_factory=ClientInfo)
    accounts: list[Account] = field(default_factory=list)
    new_accounts: list[bool] = field(default_factory=list)
    payroll: list[PayrollRow] = field(default_factory=list)
    sales_tax: list[SalesTaxRow] = field(default_factory=list)

    def is_new(self, idx: int) -> bool:
        return idx < len(self.new_accounts) and bool(self.new_accounts[idx])


@dataclass(frozen=True)
class AccountBreakdown:
    """Per-account detail shown next to the quote totals."""

    bank_name: str
    category: str
    last_digits: str
    starting_period: str
    monthly_rate: Decimal
    is_new: bool
    averages: Averages
    available_periods: list[int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "bank_name": self.bank_name,
            "category": self.category,
            "last_digits": self.last_digits,
            "starting_period": self.starting_period,
            "monthly_rate": str(self.monthly_rate),
            "is_new": self.is_new,
            "averages": {
                "total": self.averages.total,
                "deposits": self.averages.deposits,
                "checks": self.averages.checks,
            },
            "available_periods": [PERIOD_NAMES[p] for p in self.available_periods],
        }


@dataclass(frozen=True)
class ValidationReport:
    """Invalid field keys for every part of the quote."""

    client: frozenset[str] = frozenset()
    accounts: list[frozenset[str]] = field(default_factory=list)
    payroll: list[frozenset[str]] = field(default_factory=list)
    sales_tax: list[frozenset[str]] = field(default_factory=list)
    quote: frozenset[str] = frozenset()

    @property
    def is_valid(self) -> bool:
        sections = [
            self.client, *self.accounts, *self.payroll, *self.sales_tax, self.quote
        ]
        return not any(sections)

    def to_dict(self) -> dict[str, Any]:
        return {
            "client": sorted(self.client),
            "accounts": [sorted(errors) for errors in self.accounts],
            "payroll": [sorted(errors) for errors in self.payroll],
            "sales_tax": [sorted(errors) for errors in self.sales_tax],
            "quote": sorted(self.quote),
        }


@dataclass(frozen=True)
class QuoteEvaluation:
    """A priced quote together with what still needs fixing."""

    request: QuoteRequest
    monthly: MonthlyQuote | None
    annual: AnnualQuote | None
    accounts: list[AccountBreakdown]
    validation: ValidationReport

    def to_dict(self) -> dict[str, Any]:
        return {
            "frequency": self.request.frequency.value,
            "year": self.request.year,
            "client": {
                "company_name": self.request.client.company_name,
                "owner_name": self.request.client.owner_name,
                "employee": self.request.client.employee,
            },
            "monthly": self.monthly.to_dict() if self.monthly else None,
            "annual": self.annual.to_dict() if self.annual else None,
            "accounts": [line.to_dict() for line in self.accounts],
            "validation": self.validation.to_dict(),
            "is_valid": self.validation.is_valid,
        }


def build_monthly_quote(request: QuoteRequest, today: date | None = None) -> MonthlyQuote:
    """Price every service for monthly billing."""
    books_rate = Decimal("0")
    if request.accounts:
        books_rate = compute_books_total(
            request.accounts,
            request.new_accounts,
            BillingFrequency.MONTHLY,
            today,
        )
    payroll_rate, payroll_setup = payroll_totals(request.payroll)
    sales_tax_rate, sales_tax_setup = sales_tax_totals(request.sales_tax)
    return MonthlyQuote(
        books_rate=books_rate,
        payroll_rate=payroll_rate,
        payroll_setup=payroll_setup,
        sales_tax_rate=sales_tax_rate,
        sales_tax_setup=sales_tax_setup,
    )


def build_annual_quote(request: QuoteRequest) -> AnnualQuote:
    """Price the books service for a year paid up front."""
    rates = annual_period_rates(request.accounts, request.new_accounts)
    return compute_annual_pricing(rates)


def account_breakdowns(
    request: QuoteRequest, today: date | None = None
) -> list[AccountBreakdown]:
    """Return the detail line for each account, in position order."""
    lines = []
    for idx, account in enumerate(request.accounts):
        is_new = request.is_new(idx)
        averages = effective_averages(account, is_new, request.frequency, today)
        start = account.start_index
        lines.append(
            AccountBreakdown(
                bank_name=account.bank_name or "Unknown Bank",
                category=(
                    account.category_kind.value
                    if account.category_kind
                    else "Unknown"
                ),
                last_digits=account.last_digits or "N/A",
                starting_period=PERIOD_NAMES[start if start is not None else 0],
                monthly_rate=compute_account_rate(idx, account.category, averages),
                is_new=is_new,
                averages=averages,
                available_periods=available_periods(
                    account, request.frequency, today
                ),
            )
        )
    return lines


def validate_request(
    request: QuoteRequest, today: date | None = None
) -> ValidationReport:
    annual = request.frequency == BillingFrequency.ANNUAL
    quote_errors: frozenset[str] = frozenset()
    if annual and not request.year:
        quote_errors = frozenset({YEAR})
    return ValidationReport(
        client=validate_client(request.client),
        accounts=[
            validate_account(
                account,
                request.is_new(idx),
                frequency=request.frequency,
                today=today,
            )
            for idx, account in enumerate(request.accounts)
        ],
        payroll=[] if annual else [validate_payroll_row(row) for row in request.payroll],
        sales_tax=(
            [] if annual else [validate_sales_tax_row(row) for row in request.sales_tax]
        ),
        quote=quote_errors,
    )


def evaluate(request: QuoteRequest, today: date | None = None) -> QuoteEvaluation:
    """Recompute the quote and its validation state from scratch.

    Annual quotes only cover the books service; payroll and sales tax rows
    are ignored for them.
    """
    today = today or date.today()
    monthly: MonthlyQuote | None = None
    annual: AnnualQuote | None = None
    if request.frequency == BillingFrequency.ANNUAL:
        annual = build_annual_quote(request)
    else:
        monthly = build_monthly_quote(request, today)

    validation = validate_request(request, today)
    logger.info(
        "quote_evaluated",
        frequency=request.frequency.value,
        accounts=len(request.accounts),
        is_valid=validation.is_valid,
    )
    return QuoteEvaluation(
        request=request,
        monthly=monthly,
        annual=annual,
        accounts=account_breakdowns(request, today),
        validation=validation,
    )
