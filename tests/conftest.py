"""
Shared fixtures for the loan engine test suite.
"""
from datetime import date

import pytest

from loan_engine.models import LoanTerms, Prepayment, PrepaymentKind, Strategy


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def start():
    return date(2024, 1, 15)


@pytest.fixture
def loan(start):
    """1,000,000 at 8.8% over 20 years."""
    return LoanTerms(principal=1_000_000, annual_rate=8.8, total_months=240, start_date=start)


@pytest.fixture
def lump_sum():
    """200,000 paid in the 12th instalment month (December 2024)."""
    return Prepayment(date(2024, 12, 1), 200_000, PrepaymentKind.ONE_TIME, Strategy.REDUCE_TENURE)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    import settings

    path = tmp_path / "loan.db"
    monkeypatch.setattr(settings, "DB_PATH", path)
    return path
