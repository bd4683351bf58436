"""Command line entry point: price a quote request file.

Usage:
    service-quote quote.yaml
    service-quote quote.yaml --format=json
    service-quote quote.yaml --as-of=2026-05-15

Exit status is 0 for a complete quote, 1 when the request file cannot be
loaded and 3 when the quote is printed but still has missing input.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from decimal import Decimal

import structlog

from service_quote.config import configure_logging, get_settings
from service_quote.loader import QuoteInputError, load_quote_request
from service_quote.models import AccountCategory
from service_quote.periods import PERIOD_NAMES
from service_quote.quote import QuoteEvaluation, evaluate
from service_quote.requirements import describe_errors

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_BAD_INPUT = 1
# argparse already exits with 2 on usage errors
EXIT_INVALID_QUOTE = 3

_CATEGORY_ABBREVIATIONS = {
    AccountCategory.CHECKING.value: "CK",
    AccountCategory.SAVINGS.value: "SA",
    AccountCategory.CREDIT_CARD.value: "CC",
    AccountCategory.JOBOX.value: "JB",
    AccountCategory.PAYPAL.value: "PP",
    AccountCategory.AMAZON.value: "AZ",
}


def _money(amount: Decimal) -> str:
    if amount == amount.to_integral_value():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


def format_summary(evaluation: QuoteEvaluation) -> str:
    """Render a plain-text quote summary."""
    lines = ["Quote:"]
    client = evaluation.request.client
    if client.company_name:
        lines.append(f"Client - {client.company_name}")
    monthly = evaluation.monthly
    annual = evaluation.annual

    if monthly is not None:
        lines.append(f"Books - {_money(monthly.books_rate)}")
    else:
        lines.append("Books")
    for account in evaluation.accounts:
        abbr = _CATEGORY_ABBREVIATIONS.get(account.category, "CK")
        lines.append(
            f"  {abbr} {account.last_digits} - {account.averages.total} t/m"
            f" ({_money(account.monthly_rate)}/month"
            f"{', new account' if account.is_new else ''})"
        )

    if monthly is not None:
        if evaluation.request.sales_tax:
            lines.append(f"Sales Tax - {_money(monthly.sales_tax_rate)}")
        if evaluation.request.payroll:
            lines.append(f"Payroll - {_money(monthly.payroll_rate)}")
        lines.append("")
        lines.append("Billing:")
        if monthly.payroll_setup > 0:
            lines.append(f"+ Payroll Set Up: {_money(monthly.payroll_setup)}")
        if monthly.sales_tax_setup > 0:
            lines.append(f"+ Sales Tax Set Up: {_money(monthly.sales_tax_setup)}")
        lines.append(f"= Total Set Up Fees: {_money(monthly.total_setup_fees)}")
        lines.append(
            f"Monthly Rate - All Services: {_money(monthly.total_monthly_rate)}"
        )

    if annual is not None:
        lines.append("")
        lines.append("Annual Breakdown:")
        for period, rate in annual.per_period_rates.items():
            lines.append(f"  {PERIOD_NAMES[period]}: {_money(rate)}")
        percent = int(annual.discount_percentage * 100)
        lines.append("")
        lines.append("Billing:")
        lines.append(f"+ Total Quote Amount: {_money(annual.total_annual_rate)}")
        discount_label = f" ({percent}%)" if percent else ""
        lines.append(
            f"- Annual Discount: {_money(annual.discount_amount)}{discount_label}"
        )
        lines.append(f"= Total Amount Due Today: {_money(annual.discounted_rate)}")

    messages = _validation_messages(evaluation)
    if messages:
        lines.append("")
        lines.append("Missing or invalid input:")
        lines.extend(f"  - {message}" for message in messages)

    return "\n".join(lines)


def _validation_messages(evaluation: QuoteEvaluation) -> list[str]:
    report = evaluation.validation
    messages = describe_errors(report.quote)
    messages.extend(f"Client: {m}" for m in describe_errors(report.client))
    for idx, errors in enumerate(report.accounts, start=1):
        messages.extend(f"Account {idx}: {m}" for m in describe_errors(errors))
    for idx, errors in enumerate(report.payroll, start=1):
        messages.extend(f"Payroll row {idx}: {m}" for m in describe_errors(errors))
    for idx, errors in enumerate(report.sales_tax, start=1):
        messages.extend(f"Sales tax row {idx}: {m}" for m in describe_errors(errors))
    return messages


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="service-quote",
        description="Price bookkeeping, payroll and sales tax services",
    )
    parser.add_argument("request", help="Path to a YAML quote request")
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Date used to pick the months that count (default: today)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    configure_logging()
    args = build_parser().parse_args(argv)
    today = args.as_of or get_settings().quote_as_of or date.today()

    try:
        request = load_quote_request(args.request)
    except QuoteInputError as e:
        logger.error("quote_request_rejected", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    evaluation = evaluate(request, today)
    if args.format == "json":
        print(json.dumps(evaluation.to_dict(), indent=2))
    else:
        print(format_summary(evaluation))

    return EXIT_OK if evaluation.validation.is_valid else EXIT_INVALID_QUOTE


if __name__ == "__main__":
    sys.exit(main())
