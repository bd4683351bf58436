"""Sales tax resale certificate pricing.

Certificates are priced by their position across every row, not within a
row: the first five cost $90 each, the next five $75, and the rest $60.
Rows are therefore priced in order with the running count carried from one
row to the next.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from service_quote.models import SalesTaxRow, ServiceStatus, parse_count

SALES_TAX_SETUP_FEE = Decimal("150")

# (last certificate position in tier, unit price)
CERTIFICATE_PRICE_TIERS: list[tuple[int | None, Decimal]] = [
    (5, Decimal("90")),
    (10, Decimal("75")),
    (None, Decimal("60")),
]


def certificate_unit_price(position: int) -> Decimal:
    """Return the price of the certificate at a 1-based overall position."""
    for upper, price in CERTIFICATE_PRICE_TIERS:
        if upper is None or position <= upper:
            return price
    raise AssertionError("unreachable: last tier is open ended")


def price_certificates(count: Any, counter: int = 0) -> tuple[Decimal, int]:
    """Price one row's certificates starting after ``counter`` earlier ones.

    Returns the row rate and the updated running counter.
    """
    certificates = parse_count(count)
    rate = Decimal("0")
    for position in range(counter + 1, counter + certificates + 1):
        rate += certificate_unit_price(position)
    return rate, counter + certificates


def compute_sales_tax_rates(
    certificate_counts: Iterable[Any], counter: int = 0
) -> list[Decimal]:
    """Return one monthly rate per row, in row order."""
    rates: list[Decimal] = []
    for count in certificate_counts:
        rate, counter = price_certificates(count, counter)
        rates.append(rate)
    return rates


def compute_sales_tax_setup(status: Any, certificate_count: Any) -> Decimal | None:
    """Return the setup fee for a row; None when the client already exists."""
    if ServiceStatus.parse(status) != ServiceStatus.NEW:
        return None
    certificates = parse_count(certificate_count)
    if certificates > 0:
        return SALES_TAX_SETUP_FEE * certificates
    return SALES_TAX_SETUP_FEE


def sales_tax_totals(rows: Iterable[SalesTaxRow]) -> tuple[Decimal, Decimal]:
    """Return the summed (rate, setup) across all sales tax rows."""
    rows = list(rows)
    rate = sum(
        compute_sales_tax_rates(row.certificates for row in rows), Decimal("0")
    )
    setup = Decimal("0")
    for row in rows:
        setup += compute_sales_tax_setup(row.status, row.certificates) or Decimal("0")
    return rate, setup
