"""Load quote requests from YAML files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from service_quote.config import get_settings
from service_quote.models import (
    Account,
    ClientInfo,
    PayrollRow,
    PeriodRecord,
    SalesTaxRow,
    parse_count,
)
from service_quote.periods import BillingFrequency, exclude_from, parse_period
from service_quote.quote import QuoteRequest

logger = structlog.get_logger(__name__)


class QuoteInputError(ValueError):
    """Raised when a quote request file does not have the expected shape."""


_TRUE_WORDS = {"true", "yes", "y", "on", "1"}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_WORDS
    return bool(value)


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore")


def _or_empty(value: Any, empty: Any) -> Any:
    # An empty YAML key ("payroll:") loads as None
    return empty if value is None else value


class RecordInput(_Section):
    total: Any = None
    deposits: Any = None
    checks: Any = None


class AccountInput(_Section):
    bank_name: Any = ""
    last_digits: Any = ""
    category: Any = None
    starting_period: Any = None
    new: Any = False
    excluded_from: Any = None
    records: dict[str | int, RecordInput | None] = Field(default_factory=dict)

    @field_validator("records", mode="before")
    @classmethod
    def records_default_empty(cls, value: Any) -> Any:
        return _or_empty(value, {})

    def to_account(self) -> Account:
        records: dict[int, PeriodRecord] = {}
        for key, record in self.records.items():
            period = parse_period(key)
            if period is None:
                logger.debug("unknown_period_ignored", period=key)
                continue
            record = record or RecordInput()
            records[period] = PeriodRecord(
                total=record.total, deposits=record.deposits, checks=record.checks
            )

        account = Account(
            bank_name=_text(self.bank_name),
            last_digits=_text(self.last_digits),
            category=self.category,
            starting_period=self.starting_period,
            records=records,
        )
        cutoff = parse_period(self.excluded_from)
        if cutoff is not None:
            account = exclude_from(account, cutoff)
        return account


class ClientInput(_Section):
    company_name: Any = ""
    owner_name: Any = ""
    employee: Any = ""

    def to_client(self) -> ClientInfo:
        return ClientInfo(
            company_name=_text(self.company_name),
            owner_name=_text(self.owner_name),
            employee=_text(self.employee),
        )


class RowInput(_Section):
    state: Any = ""
    status: Any = None


class PayrollInput(RowInput):
    employees: Any = None


class SalesTaxInput(RowInput):
    certificates: Any = None


class QuoteInput(_Section):
    frequency: Any = None
    year: Any = None
    client: ClientInput = Field(default_factory=ClientInput)
    accounts: list[AccountInput] = Field(default_factory=list)
    payroll: list[PayrollInput] = Field(default_factory=list)
    sales_tax: list[SalesTaxInput] = Field(default_factory=list)

    @field_validator("accounts", "payroll", "sales_tax", mode="before")
    @classmethod
    def rows_default_empty(cls, value: Any) -> Any:
        return _or_empty(value, [])

    @field_validator("client", mode="before")
    @classmethod
    def client_default_empty(cls, value: Any) -> Any:
        return _or_empty(value, {})

    def to_request(self) -> QuoteRequest:
        frequency = self.frequency or get_settings().quote_frequency
        return QuoteRequest(
            frequency=BillingFrequency.parse(frequency),
            year=parse_count(self.year) or None,
            client=self.client.to_client(),
            accounts=[account.to_account() for account in self.accounts],
            new_accounts=[_flag(account.new) for account in self.accounts],
            payroll=[
                PayrollRow(
                    state=_text(row.state), employees=row.employees, status=row.status
                )
                for row in self.payroll
            ],
            sales_tax=[
                SalesTaxRow(
                    state=_text(row.state),
                    certificates=row.certificates,
                    status=row.status,
                )
                for row in self.sales_tax
            ],
        )


def parse_quote_request(data: Any, source: str = "<input>") -> QuoteRequest:
    """Build a request from already-parsed YAML/JSON data."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise QuoteInputError(f"{source}: quote request must be a mapping")
    try:
        parsed = QuoteInput.model_validate(data)
    except ValidationError as exc:
        sections = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise QuoteInputError(
            f"{source}: invalid section(s) {', '.join(sections) or 'root'}"
        ) from exc
    return parsed.to_request()


def load_quote_request(path: Path | str) -> QuoteRequest:
    """Read and parse a YAML quote request file."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise QuoteInputError(f"{path}: cannot read quote request") from exc
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise QuoteInputError(f"{path.name}: invalid YAML") from exc
    except ValueError as exc:
        # Scalars PyYAML cannot convert, such as integers past the digit limit
        raise QuoteInputError(f"{path.name}: unreadable value ({exc})") from exc
    request = parse_quote_request(data, source=path.name)
    logger.debug(
        "quote_request_loaded",
        path=str(path),
        accounts=len(request.accounts),
        payroll_rows=len(request.payroll),
        sales_tax_rows=len(request.sales_tax),
    )
    return request
