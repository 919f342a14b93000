import math
from typing import NamedTuple, Optional

from .schemas import FinancialContext, FinancialData, OrganizationProfile, SimulationInputs, TimeSeriesPoint

BASE_QUANTITY = 100
GROWTH_RATE_PCT = 15.0
TIME_HORIZON_MONTHS = 12


class CoreFigures(NamedTuple):
    assumed_quantity: int
    revenue: float
    expenses: float
    net_profit: float
    profit_margin: float


def assumed_quantity(profile: OrganizationProfile) -> int:
    return math.floor(BASE_QUANTITY * profile.quantity_multiplier)


def compute_core(inputs: SimulationInputs, profile: OrganizationProfile) -> CoreFigures:
    """Revenue, expenses, profit and margin shared by projection and context.

    The quantity multiplier is applied once, to the assumed quantity; revenue
    uses that quantity unscaled.
    """
    quantity = assumed_quantity(profile)
    revenue = inputs.product_price * quantity
    expenses = (
        profile.base_fixed_cost
        + profile.base_salary * inputs.employees
        + inputs.marketing_spend
        + inputs.misc_expenses
    )
    net_profit = revenue - expenses
    profit_margin = (net_profit / revenue) * 100 if revenue > 0 else 0.0
    return CoreFigures(quantity, revenue, expenses, net_profit, profit_margin)


def compute_runway(current_funds: float, expenses: float) -> float:
    if expenses <= 0:
        return math.inf
    return float(math.floor(current_funds / expenses))


def run_projection(inputs: SimulationInputs, profile: OrganizationProfile) -> FinancialData:
    core = compute_core(inputs, profile)
    return FinancialData(
        revenue=core.revenue,
        expenses=core.expenses,
        net_profit=core.net_profit,
        runway=compute_runway(inputs.current_funds, core.expenses),
        profit_margin=core.profit_margin,
    )


def build_financial_context(
    inputs: SimulationInputs,
    profile: OrganizationProfile,
    latest: TimeSeriesPoint,
) -> FinancialContext:
    core = compute_core(inputs, profile)
    return FinancialContext(
        current_revenue=latest.revenue,
        projected_revenue=core.revenue,
        expenses=core.expenses,
        # Placeholder signals, not derived from the series.
        growth_rate=GROWTH_RATE_PCT,
        time_horizon=TIME_HORIZON_MONTHS,
        cash_flow=latest.revenue - latest.expenses,
        profit_margin=core.profit_margin,
    )


def runway_or_none(runway: float) -> Optional[float]:
    return None if runway == math.inf else runway
