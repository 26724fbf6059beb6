"""
Tests for loan_engine.inputs and the coercion rules on the models.
"""
from datetime import date, datetime

import pytest

from loan_engine.errors import InvalidInput
from loan_engine.inputs import (
    collect_prepayments,
    collect_rate_changes,
    loan_from_state,
    state_from_inputs,
)
from loan_engine.models import (
    LoanTerms,
    Prepayment,
    PrepaymentKind,
    RateChange,
    Strategy,
    parse_date,
    to_amount,
    to_months,
)


class TestCoercion:
    @pytest.mark.parametrize("raw,expected", [
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        (float("nan"), 0.0),
        (-50, 0.0),
        ("1250.5", 1250.5),
        (300, 300.0),
    ])
    def test_to_amount(self, raw, expected):
        assert to_amount(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("240", 240),
        ("240.0", 240),
        (239.9, 239),
        (-6, -6),
        (float("nan"), 0),
        (float("inf"), 0),
        (None, 0),
        ("twenty", 0),
    ])
    def test_to_months(self, raw, expected):
        assert to_months(raw) == expected

    def test_parse_date(self):
        assert parse_date("2024-07-01") == date(2024, 7, 1)
        assert parse_date(datetime(2024, 7, 1, 13, 45)) == date(2024, 7, 1)
        assert parse_date(date(2024, 7, 1)) == date(2024, 7, 1)

    @pytest.mark.parametrize("raw", ["", "07/01/2024", "2024-13-01", None, 20240701])
    def test_parse_date_rejects(self, raw):
        with pytest.raises(InvalidInput):
            parse_date(raw)

    def test_invalid_input_is_a_value_error(self):
        with pytest.raises(ValueError):
            RateChange("not a date", 9.0)

    def test_prepayment_legacy_tags(self):
        p = Prepayment("2024-05-01", "5000", kind="one", strategy="reduceEmi")
        assert p.kind is PrepaymentKind.ONE_TIME
        assert p.strategy is Strategy.REDUCE_EMI
        assert p.amount == 5000.0

    def test_prepayment_unknown_strategy(self):
        with pytest.raises(InvalidInput):
            Prepayment("2024-05-01", 5000, strategy="skip-emi")

    def test_loan_terms_from_tenure(self):
        loan = LoanTerms.from_tenure("2500000", "8.5", "15", "6", "2025-04-30")
        assert loan.total_months == 186
        assert loan.principal == 2_500_000
        assert loan.start_date == date(2025, 4, 30)

    def test_models_are_frozen(self):
        change = RateChange(date(2024, 1, 1), 9.0)
        with pytest.raises(AttributeError):
            change.rate = 10.0


class TestCollectRows:
    def test_rate_rows_filtered_and_sorted(self):
        changes = collect_rate_changes([
            {"date": "2025-06-01", "rate": "9.1"},
            {"date": "", "rate": "9.0"},
            {"date": "2024-06-01", "rate": ""},
            {"date": "2024-02-01", "rate": 8.6},
        ])
        assert changes == [
            RateChange(date(2024, 2, 1), 8.6),
            RateChange(date(2025, 6, 1), 9.1),
        ]

    def test_malformed_rate_date_raises(self):
        with pytest.raises(InvalidInput):
            collect_rate_changes([{"date": "2024-02-31", "rate": 9.0}])

    def test_prepayment_rows_filtered_and_sorted(self):
        prepayments = collect_prepayments([
            {"type": "recurring", "amount": "2000", "date": "2025-01-01", "strategy": "reduceTenure"},
            {"type": "one", "amount": "0", "date": "2024-05-01", "strategy": "reduceEmi"},
            {"type": "one", "amount": "", "date": "2024-05-01"},
            {"kind": "one-time", "amount": 100_000, "date": "2024-11-01", "strategy": "reduce-emi"},
            {"kind": "one-time", "amount": 100_000, "date": None},
        ])
        assert prepayments == [
            Prepayment(date(2024, 11, 1), 100_000, PrepaymentKind.ONE_TIME, Strategy.REDUCE_EMI),
            Prepayment(date(2025, 1, 1), 2_000, PrepaymentKind.RECURRING, Strategy.REDUCE_TENURE),
        ]

    def test_prepayment_defaults(self):
        [p] = collect_prepayments([{"amount": 500, "date": "2024-05-01"}])
        assert p.kind is PrepaymentKind.ONE_TIME
        assert p.strategy is Strategy.REDUCE_TENURE


class TestState:
    def test_loan_from_state(self):
        loan, changes, prepayments = loan_from_state({
            "principal": "1000000",
            "years": "20",
            "months": "0",
            "start_date": "2024-01-15",
            "initial_rate": "8.8",
            "rates": [{"date": "2025-01-01", "rate": "9.2"}],
            "prepayments": [{"kind": "one-time", "amount": 200000, "date": "2024-12-01",
                             "strategy": "reduce-tenure"}],
        })
        assert loan == LoanTerms(1_000_000, 8.8, 240, date(2024, 1, 15))
        assert changes == [RateChange(date(2025, 1, 1), 9.2)]
        assert prepayments[0].amount == 200_000

    def test_legacy_browser_state(self):
        loan, changes, prepayments = loan_from_state({
            "principal": "500000",
            "years": "10",
            "months": "3",
            "startDate": "2023-08-31",
            "initialRate": "7.25",
            "roi": [{"date": "2023-08-31", "rate": "7.25"}],
            "prepay": [{"type": "recurring", "amount": "1500", "date": "2024-01-01",
                        "strategy": "reduceEmi"}],
        })
        assert loan.total_months == 123
        assert loan.annual_rate == 7.25
        assert loan.start_date == date(2023, 8, 31)
        assert len(changes) == 1
        assert prepayments[0].kind is PrepaymentKind.RECURRING
        assert prepayments[0].strategy is Strategy.REDUCE_EMI

    def test_missing_start_date_defaults_to_today(self):
        loan, _, _ = loan_from_state({"principal": 1000, "years": 1}, today=date(2026, 3, 1))
        assert loan.start_date == date(2026, 3, 1)
        assert loan.annual_rate == 0.0

    def test_state_restores_same_inputs(self, loan, lump_sum):
        changes = [RateChange(date(2025, 1, 1), 9.2)]
        state = state_from_inputs(loan, changes, [lump_sum])
        assert state["years"] == 20 and state["months"] == 0
        assert state["prepayments"][0]["kind"] == "one-time"
        assert loan_from_state(state) == (loan, changes, [lump_sum])

    @pytest.mark.parametrize("state", [None, [], "principal=1000"])
    def test_state_must_be_a_mapping(self, state):
        with pytest.raises(InvalidInput):
            loan_from_state(state)
