import streamlit as st
from datetime import date

import altair as alt

import settings
from auth import check_password
from storage import (
    init_db, save_scenario, load_scenario, delete_scenario, list_scenarios, autosave,
    restore_autosave,
)
from loan_engine.attribution import attribute_loan_prepayments
from loan_engine.errors import LoanEngineError
from loan_engine.export import chart_frame, savings_frame, schedule_csv, schedule_frame
from loan_engine.inputs import loan_from_state, state_from_inputs
from loan_engine.models import LoanTerms, Prepayment, PrepaymentKind, RateChange, Strategy
from loan_engine.schedule import compute_schedule
from loan_engine.summary import impact_metrics, summarize

# --------------------------------------------------
# Setup
# --------------------------------------------------

settings.configure_logging()
st.set_page_config(layout="wide")
st.title("Home Loan Prepayment Planner")

init_db()

# --------------------------------------------------
# Session state
# --------------------------------------------------

def apply_state(state):
    loan, rates, prepays = loan_from_state(state)
    st.session_state.principal = loan.principal
    st.session_state.years = loan.total_months // 12
    st.session_state.months = loan.total_months % 12
    st.session_state.start_date = loan.start_date
    st.session_state.initial_rate = loan.annual_rate
    st.session_state.rates = rates
    st.session_state.prepays = prepays


if "rates" not in st.session_state:
    restored = None
    try:
        restored = restore_autosave()
        if restored:
            apply_state(restored)
    except LoanEngineError as exc:
        st.warning(f"Could not restore last session: {exc}")
        restored = None

    if not restored:
        st.session_state.principal = settings.DEFAULT_PRINCIPAL
        st.session_state.years = settings.DEFAULT_YEARS
        st.session_state.months = 0
        st.session_state.start_date = date.today()
        st.session_state.initial_rate = settings.DEFAULT_RATE
        st.session_state.rates = []
        st.session_state.prepays = []


def current_loan():
    return LoanTerms.from_tenure(
        principal=st.session_state.principal,
        annual_rate=st.session_state.initial_rate,
        years=st.session_state.years,
        months=st.session_state.months,
        start_date=st.session_state.start_date,
    )


def persist():
    """Save-on-change: stores the raw inputs so the next session can restore them."""
    autosave(state_from_inputs(current_loan(), st.session_state.rates, st.session_state.prepays))

# --------------------------------------------------
# Loan basics
# --------------------------------------------------

c1, c2, c3, c4, c5 = st.columns(5)
c1.number_input("Principal", key="principal", min_value=0.0, step=100_000.0, on_change=persist)
c2.number_input("Years", key="years", min_value=0, step=1, on_change=persist)
c3.number_input("Months", key="months", min_value=0, max_value=11, step=1, on_change=persist)
c4.date_input("Loan Start Date", key="start_date", on_change=persist)
c5.number_input("Initial Rate (%)", key="initial_rate", min_value=0.0, step=0.05, format="%.2f", on_change=persist)

loan = current_loan()

# --------------------------------------------------
# Interest rate editor
# --------------------------------------------------

st.subheader("Interest Rate Changes")

with st.form("add_rate"):
    rate = st.number_input("Rate (%)", value=loan.annual_rate, step=0.05, format="%.2f")
    eff_date = st.date_input("Effective From", value=loan.start_date)
    add_rate = st.form_submit_button("Add Rate")

if add_rate:
    st.session_state.rates.append(RateChange(eff_date, rate))
    st.session_state.rates.sort(key=lambda r: r.effective_date)
    persist()
    st.rerun()

for i, r in enumerate(st.session_state.rates):
    c1, c2, c3 = st.columns([3, 3, 1])
    c1.write(r.effective_date)
    c2.write(f"{r.rate:.2f}%")
    if c3.button("❌", key=f"del_rate_{i}"):
        st.session_state.rates.pop(i)
        persist()
        st.rerun()

if st.session_state.rates and st.button("Clear rate changes"):
    st.session_state.rates = []
    persist()
    st.rerun()

# --------------------------------------------------
# Prepayments
# --------------------------------------------------

st.subheader("Prepayments")

KIND_LABELS = {PrepaymentKind.ONE_TIME: "One-time", PrepaymentKind.RECURRING: "Recurring (monthly)"}
STRATEGY_LABELS = {Strategy.REDUCE_TENURE: "Reduce Tenure", Strategy.REDUCE_EMI: "Reduce EMI"}

with st.form("add_prepay"):
    p_kind = st.selectbox("Type", list(KIND_LABELS), format_func=KIND_LABELS.get)
    p_date = st.date_input("Prepayment Date", value=date.today())
    p_amt = st.number_input("Amount", min_value=0.0, value=100_000.0, step=10_000.0)
    p_strategy = st.selectbox("Strategy", list(STRATEGY_LABELS), format_func=STRATEGY_LABELS.get)
    add_prepay = st.form_submit_button("Add Prepayment")

if add_prepay and p_amt > 0:
    st.session_state.prepays.append(Prepayment(p_date, p_amt, p_kind, p_strategy))
    st.session_state.prepays.sort(key=lambda p: p.effective_date)
    persist()
    st.rerun()

for i, p in enumerate(st.session_state.prepays):
    c1, c2, c3, c4, c5 = st.columns([3, 3, 3, 3, 1])
    c1.write(p.effective_date)
    c2.write(f"{p.amount:,.0f}")
    c3.write(KIND_LABELS[p.kind])
    c4.write(STRATEGY_LABELS[p.strategy])
    if c5.button("❌", key=f"del_prepay_{i}"):
        st.session_state.prepays.pop(i)
        persist()
        st.rerun()

if st.session_state.prepays and st.button("Clear prepayments"):
    st.session_state.prepays = []
    persist()
    st.rerun()

# --------------------------------------------------
# Named scenarios (password-gated)
# --------------------------------------------------

st.subheader("Scenarios")

can_edit = check_password()
scenario_name = st.text_input("Scenario name")

col1, col2 = st.columns(2)

if col1.button("💾 Save"):
    if not can_edit:
        st.warning("Enter password to save.")
    elif scenario_name:
        save_scenario(
            scenario_name,
            state_from_inputs(loan, st.session_state.rates, st.session_state.prepays),
        )
        st.success("Saved")

def load_selected(name):
    state = load_scenario(name)
    if state is None:
        st.session_state.load_error = f"Scenario {name!r} no longer exists"
        return
    try:
        apply_state(state)
    except LoanEngineError as exc:
        st.session_state.load_error = f"Scenario {name!r} is not usable: {exc}"
    else:
        persist()


available = list_scenarios()
selected = col2.selectbox("Load scenario", [""] + available)

if selected:
    b1, b2 = col2.columns(2)
    b1.button("Load", on_click=load_selected, args=(selected,))
    if b2.button("🗑 Delete"):
        if not can_edit:
            st.warning("Enter password to delete.")
        else:
            delete_scenario(selected)
            st.rerun()

if st.session_state.get("load_error"):
    st.error(st.session_state.pop("load_error"))

# --------------------------------------------------
# Compute & output
# --------------------------------------------------

try:
    baseline = compute_schedule(loan, rate_changes=st.session_state.rates)
    scenario = compute_schedule(
        loan,
        rate_changes=st.session_state.rates,
        prepayments=st.session_state.prepays,
    )
    savings = attribute_loan_prepayments(
        loan,
        rate_changes=st.session_state.rates,
        prepayments=st.session_state.prepays,
    )
except LoanEngineError as exc:
    st.error(str(exc))
    st.stop()

summary = summarize(baseline, scenario)
impact = impact_metrics(baseline, scenario)

st.subheader("Summary")

c1, c2, c3 = st.columns(3)
c1.metric("EMI", f"{summary.emi:,.2f}")
c2.metric("Total Interest", f"{summary.total_interest:,.0f}")
c3.metric("Total Payment", f"{summary.total_payment:,.0f}")

st.subheader("Impact Analysis")

c1, c2, c3 = st.columns(3)
c1.metric("Interest Saved", f"{impact.interest_saved:,.0f}")
c2.metric("Loan Tenure Reduced", f"{impact.months_saved} months")
c3.metric(
    "Scenario Tenure",
    f"{summary.months_taken} months",
    help=f"{summary.remaining_years}y {summary.remaining_months}m",
)

chart = alt.Chart(chart_frame(baseline, scenario)).mark_line(strokeWidth=3).encode(
    x="Date:T",
    y="Outstanding:Q",
    color=alt.Color(
        "Type:N",
        scale=alt.Scale(
            domain=["Baseline Outstanding", "Scenario Outstanding"],
            range=["#94a3b8", "#2563eb"]
        ),
        legend=alt.Legend(title="Schedule")
    )
).properties(
    width="container",
    height=400,
    title="Outstanding Balance: Baseline vs With Prepayments"
)

st.altair_chart(chart, width="stretch")

st.subheader("Per-prepayment Savings")

if savings:
    st.dataframe(savings_frame(savings), width="stretch", hide_index=True)
else:
    st.caption("No prepayments defined.")

st.subheader("Amortization Schedule")
st.dataframe(
    schedule_frame(scenario).round(2),
    width="stretch",
    hide_index=True,
)

st.download_button(
    "Download CSV",
    data=schedule_csv(scenario),
    file_name="amortization_with_prepay.csv",
    mime="text/csv",
)
