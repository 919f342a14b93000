"""Payload shapes handed to the storage collaborator.

Storage uses snake_case keys and monthly figures; the engine itself works on
period totals.
"""
from dataclasses import asdict, replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from .profiles import organization_label
from .projection import runway_or_none
from .schemas import FinancialData, SimulationInputs

MONTHS_PER_PERIOD = 12

# saved record key -> SimulationInputs attribute
SAVED_FIELDS = {
    "current_funds": "current_funds",
    "employees": "employees",
    "marketing_spend": "marketing_spend",
    "product_price": "product_price",
    "misc_expenses": "misc_expenses",
}


def build_financial_record(inputs: SimulationInputs, data: FinancialData) -> Dict[str, float]:
    return {
        "current_funds": inputs.current_funds,
        "monthly_revenue": data.revenue / MONTHS_PER_PERIOD,
        "monthly_expenses": data.expenses / MONTHS_PER_PERIOD,
        "employees": inputs.employees,
        "marketing_spend": inputs.marketing_spend,
        "product_price": inputs.product_price,
        "misc_expenses": inputs.misc_expenses,
    }


def simulation_name(when: datetime) -> str:
    return f"Simulation {when.month}/{when.day}/{when.year}"


def inputs_payload(inputs: SimulationInputs) -> Dict[str, Any]:
    payload = asdict(inputs)
    payload["custom_parameters"] = [{"key": p.key, "value": p.value} for p in inputs.custom_parameters]
    return payload


def results_payload(data: FinancialData) -> Dict[str, Any]:
    payload = asdict(data)
    payload["runway"] = runway_or_none(data.runway)
    return payload


def build_simulation_record(
    inputs: SimulationInputs,
    data: FinancialData,
    organization_type: Optional[str] = None,
    when: Optional[datetime] = None,
) -> Dict[str, Any]:
    when = when or datetime.now()
    return {
        "name": simulation_name(when),
        "description": f"{organization_label(organization_type)} simulation",
        "inputs": inputs_payload(inputs),
        "results": results_payload(data),
    }


def merge_saved_financials(inputs: SimulationInputs, saved: Optional[Mapping[str, Any]]) -> SimulationInputs:
    """Overlay a saved financial record onto the current inputs.

    Only present, non-zero values replace the current ones; custom parameters
    always stay as they are.
    """
    if not saved:
        return inputs
    updates: Dict[str, Any] = {}
    for key, attr in SAVED_FIELDS.items():
        value = saved.get(key)
        if value:
            updates[attr] = int(value) if attr == "employees" else float(value)
    if not updates:
        return inputs
    return replace(inputs, **updates)
