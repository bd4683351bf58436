"""Pytest configuration and fixtures."""

from datetime import date

import pytest

from service_quote.config.settings import get_settings
from service_quote.models import Account, AccountCategory, ClientInfo, PeriodRecord

# Monthly quotes made on this date look at January through June
MID_YEAR = date(2026, 7, 15)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Keep settings isolated from the developer's environment."""
    for name in ("LOG_LEVEL", "LOG_FORMAT", "QUOTE_FREQUENCY", "QUOTE_AS_OF"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def today() -> date:
    return MID_YEAR


@pytest.fixture
def client() -> ClientInfo:
    return ClientInfo(
        company_name="Bright Smile Dental LLC",
        owner_name="Dana Ortiz",
        employee="Noa Hen",
    )


def make_account(
    category=AccountCategory.CHECKING,
    starting_period="January",
    months=range(6),
    total=100,
    deposits=None,
    checks=None,
    **kwargs,
) -> Account:
    """Build an account with the same counts entered for every given month."""
    records = {
        period: PeriodRecord(total=total, deposits=deposits, checks=checks)
        for period in months
    }
    kwargs.setdefault("bank_name", "JPMorgan Chase")
    kwargs.setdefault("last_digits", "1234")
    return Account(
        category=category,
        starting_period=starting_period,
        records=records,
        **kwargs,
    )


@pytest.fixture
def account_factory():
    return make_account
