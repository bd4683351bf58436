"""Service Quote - pricing engine for bookkeeping, payroll and sales tax quotes."""

__version__ = "0.1.0"

from service_quote.annual import (
    annual_discount_percentage,
    annual_period_rates,
    compute_annual_pricing,
)
from service_quote.averaging import (
    apply_new_account_override,
    compute_averages,
    effective_averages,
    round_up_to_nearest_five_or_zero,
)
from service_quote.books import compute_account_rate, compute_books_total
from service_quote.config import configure_logging, get_settings
from service_quote.models import (
    Account,
    AccountCategory,
    AnnualQuote,
    Averages,
    ClientInfo,
    MonthlyQuote,
    PayrollRow,
    PeriodRecord,
    SalesTaxRow,
    ServiceStatus,
)
from service_quote.payroll import compute_payroll_rate, compute_payroll_setup
from service_quote.periods import BillingFrequency, available_periods, exclude_from
from service_quote.quote import QuoteEvaluation, QuoteRequest, evaluate
from service_quote.requirements import (
    resolve_required_fields,
    validate_account,
    validate_client,
)
from service_quote.sales_tax import compute_sales_tax_rates, compute_sales_tax_setup

__all__ = [
    # Version
    "__version__",
    # Models
    "Account",
    "AccountCategory",
    "AnnualQuote",
    "Averages",
    "BillingFrequency",
    "ClientInfo",
    "MonthlyQuote",
    "PayrollRow",
    "PeriodRecord",
    "SalesTaxRow",
    "ServiceStatus",
    # Averages & requirements
    "compute_averages",
    "apply_new_account_override",
    "effective_averages",
    "round_up_to_nearest_five_or_zero",
    "resolve_required_fields",
    "validate_account",
    "validate_client",
    "available_periods",
    "exclude_from",
    # Rates
    "compute_account_rate",
    "compute_books_total",
    "compute_payroll_rate",
    "compute_payroll_setup",
    "compute_sales_tax_rates",
    "compute_sales_tax_setup",
    "annual_discount_percentage",
    "annual_period_rates",
    "compute_annual_pricing",
    # Quotes
    "QuoteRequest",
    "QuoteEvaluation",
    "evaluate",
    # Config
    "get_settings",
    "configure_logging",
]
