import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from .errors import InvalidInput


class PrepaymentKind(str, Enum):
    ONE_TIME = "one-time"
    RECURRING = "recurring"


class Strategy(str, Enum):
    REDUCE_TENURE = "reduce-tenure"
    REDUCE_EMI = "reduce-emi"


# tags written by the old browser calculator's saved state
_KIND_ALIASES = {"one": PrepaymentKind.ONE_TIME, "onetime": PrepaymentKind.ONE_TIME}
_STRATEGY_ALIASES = {
    "reduceTenure": Strategy.REDUCE_TENURE,
    "reduceEmi": Strategy.REDUCE_EMI,
}


def parse_date(value) -> date:
    """
    Accepts a date, a datetime (time part dropped) or an ISO 'YYYY-MM-DD' string.
    Anything else raises InvalidInput.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise InvalidInput(f"Invalid date: {value!r}") from exc
    raise InvalidInput(f"Invalid date: {value!r}")


def to_amount(value) -> float:
    """Missing, NaN, non-numeric and negative amounts all become 0."""
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or amount < 0:
        return 0.0
    return amount


def to_months(value) -> int:
    """Whole months; missing, NaN, infinite or non-numeric tenures become 0."""
    try:
        months = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(months) or math.isinf(months):
        return 0
    return int(months)


def _enum_value(enum_cls, aliases, value):
    if isinstance(value, enum_cls):
        return value
    if value in aliases:
        return aliases[value]
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise InvalidInput(f"Unknown {enum_cls.__name__}: {value!r}") from exc


@dataclass(frozen=True)
class LoanTerms:
    principal: float
    annual_rate: float  # annual %
    total_months: int
    start_date: date

    def __post_init__(self):
        object.__setattr__(self, "principal", to_amount(self.principal))
        object.__setattr__(self, "annual_rate", to_amount(self.annual_rate))
        object.__setattr__(self, "total_months", to_months(self.total_months))
        object.__setattr__(self, "start_date", parse_date(self.start_date))

    @classmethod
    def from_tenure(cls, principal, annual_rate, years, months, start_date):
        total = int(to_amount(years)) * 12 + int(to_amount(months))
        return cls(principal, annual_rate, total, start_date)


@dataclass(frozen=True)
class RateChange:
    effective_date: date
    rate: float  # annual %

    def __post_init__(self):
        object.__setattr__(self, "effective_date", parse_date(self.effective_date))
        object.__setattr__(self, "rate", to_amount(self.rate))


@dataclass(frozen=True)
class Prepayment:
    effective_date: date
    amount: float
    kind: PrepaymentKind = PrepaymentKind.ONE_TIME
    strategy: Strategy = Strategy.REDUCE_TENURE

    def __post_init__(self):
        object.__setattr__(self, "amount", to_amount(self.amount))
        object.__setattr__(self, "effective_date", parse_date(self.effective_date))
        object.__setattr__(self, "kind", _enum_value(PrepaymentKind, _KIND_ALIASES, self.kind))
        object.__setattr__(
            self, "strategy", _enum_value(Strategy, _STRATEGY_ALIASES, self.strategy)
        )

    @property
    def is_recurring(self) -> bool:
        return self.kind is PrepaymentKind.RECURRING

    def applies_on(self, payment_date: date) -> bool:
        if self.is_recurring:
            return self.effective_date <= payment_date
        return (
            self.effective_date.year == payment_date.year
            and self.effective_date.month == payment_date.month
        )


@dataclass(frozen=True)
class ScheduleRow:
    month: int
    date: date
    rate: float  # monthly rate expressed as annual %
    opening: float
    emi: float
    interest: float
    principal: float
    prepayment: float
    closing: float


@dataclass(frozen=True)
class Schedule:
    rows: tuple = field(default_factory=tuple)
    months_taken: int = 0
    base_emi: float = 0.0

    @property
    def total_interest(self) -> float:
        total = 0.0
        for row in self.rows:
            total += row.interest
        return total

    @property
    def total_prepaid(self) -> float:
        total = 0.0
        for row in self.rows:
            total += row.prepayment
        return total

    @property
    def total_emi_paid(self) -> float:
        total = 0.0
        for row in self.rows:
            total += row.emi
        return total

    @property
    def total_paid(self) -> float:
        return self.total_emi_paid + self.total_prepaid

    @property
    def final_balance(self) -> float:
        return self.rows[-1].closing if self.rows else 0.0

    @property
    def payoff_date(self) -> Optional[date]:
        return self.rows[-1].date if self.rows else None


@dataclass(frozen=True)
class PrepaymentSaving:
    prepayment: Prepayment
    interest_saved: float
    months_saved: int
