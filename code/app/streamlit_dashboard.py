# streamlit_dashboard.py
import os
import sys
import threading
import time
from typing import Any, Dict, List

import pandas as pd
import streamlit as st

# Make the `app` and `finance` packages importable when Streamlit runs this file directly.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from app.ai.advisor_client import check_advisor_online  # noqa: E402
from app.core.config import SERIES_TICK_SECONDS, configure_logging  # noqa: E402
from app.core.models import CustomParameterModel, FinancialContextModel, SimulationInputsModel  # noqa: E402
from app.core.pipeline import DashboardSession  # noqa: E402
from app.core.prompts import format_currency  # noqa: E402
from app.core.store import default_store  # noqa: E402

ORGANIZATION_TYPES = ["startup", "event", "other"]

configure_logging()
st.set_page_config(page_title="Financial Projection", layout="wide")
st.title("Financial Projection")


def get_session() -> DashboardSession:
    session = st.session_state.get("session")
    if session is None:
        # The chart fragment drives ticks, so they stop with the browser session.
        session = DashboardSession(store=default_store()).open(start_ticker=False)
        st.session_state.session = session
    return session


def reset_session() -> None:
    session = st.session_state.pop("session", None)
    if session is not None:
        session.close()


@st.cache_data(ttl=60, show_spinner=False)
def advisor_online() -> bool:
    return check_advisor_online()


def send_question() -> None:
    question = st.session_state.question.strip()
    if question:
        get_session().chat(question, st.session_state.messages)
    st.session_state.question = ""


@st.fragment(run_every=SERIES_TICK_SECONDS)
def series_chart() -> None:
    session = get_session()
    session.tick_if_due(time.monotonic())
    frame = pd.DataFrame([{"month": p.month, "revenue": p.revenue, "expenses": p.expenses} for p in session.series_snapshot()])
    st.line_chart(frame.set_index("month"))


session = get_session()
if "messages" not in st.session_state:
    st.session_state.messages: List[Dict[str, Any]] = []

# Sidebar controls
with st.sidebar:
    st.header("Organization")
    current_type = session.organization_type if session.organization_type in ORGANIZATION_TYPES else "other"
    org_type = st.selectbox("Organization type", ORGANIZATION_TYPES, index=ORGANIZATION_TYPES.index(current_type))
    st.markdown("---")
    st.metric("Simulations", session.usage.simulations)
    st.metric("Exports", session.usage.exports)
    st.caption(f"Total actions: {session.usage.total_actions}")
    st.markdown("---")
    if advisor_online():
        st.success("Advisor model reachable")
    else:
        st.warning("Advisor model unreachable; replies use an offline summary.")
    if st.button("Reset session"):
        reset_session()
        st.rerun()

# Results and chart
results_col, chart_col = st.columns([1, 2])

with chart_col:
    st.subheader("Revenue vs expenses")
    series_chart()

with results_col:
    st.subheader("Results")
    results = session.results
    if results is None:
        st.info("Run a simulation to see results.")
    else:
        st.metric("Revenue", format_currency(results.revenue))
        st.metric("Expenses", format_currency(results.expenses))
        st.metric("Net profit", format_currency(results.net_profit))
        runway_text = "Unlimited" if results.runway == float("inf") else f"{results.runway:.0f} periods"
        st.metric("Runway", runway_text)
        st.metric("Profit margin", f"{results.profit_margin:.1f}%")
        export_payload = SimulationInputsModel.from_inputs(session.inputs).model_dump_json(by_alias=True, indent=2)
        if st.download_button("Export inputs", export_payload, file_name="simulation.json", mime="application/json"):
            session.export()

# Inputs form
st.subheader("Inputs")
with st.form("inputs"):
    inputs = session.inputs
    c1, c2, c3 = st.columns(3)
    employees = c1.number_input("Employees", min_value=0, value=int(inputs.employees), step=1)
    marketing = c2.number_input("Marketing spend", min_value=0.0, value=float(inputs.marketing_spend), step=10000.0)
    price = c3.number_input("Product price", min_value=0.0, value=float(inputs.product_price), step=100.0)
    misc = c1.number_input("Misc expenses", min_value=0.0, value=float(inputs.misc_expenses), step=10000.0)
    funds = c2.number_input("Current funds", min_value=0.0, value=float(inputs.current_funds), step=100000.0)
    params_text = st.text_area(
        "Custom parameters (key=value per line)",
        value="\n".join(f"{p.key}={p.value}" for p in inputs.custom_parameters),
    )
    submitted = st.form_submit_button("Run simulation")

if submitted:
    params = []
    for line in params_text.splitlines():
        if not line.strip():
            continue
        key, _, value = line.partition("=")
        params.append(CustomParameterModel(key=key.strip(), value=value.strip()))
    model = SimulationInputsModel(
        employees=employees,
        marketing_spend=marketing,
        product_price=price,
        misc_expenses=misc,
        current_funds=funds,
        custom_parameters=params,
    )
    session.update_inputs(model.to_inputs(), org_type)
    _, records = session.run_simulation()
    threading.Thread(target=session.persist, args=(records,), daemon=True).start()
    st.rerun()

# Advisor chat
st.subheader("Advisor")
for msg in st.session_state.messages:
    speaker = "You" if msg["role"] == "user" else "Advisor"
    suffix = "\n\n_(offline summary)_" if msg.get("source") == "fallback" else ""
    st.markdown(f"**{speaker}**: {msg['content']}{suffix}")

st.text_input("Message", key="question", placeholder="Ask about margin, runway or costs")
st.button("Send", on_click=send_question)

with st.expander("Financial context"):
    ctx = session.financial_context()
    st.json(FinancialContextModel.from_context(ctx).model_dump(by_alias=True))
