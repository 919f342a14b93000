from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class CustomParameter:
    key: str
    value: str = ""


@dataclass(frozen=True)
class SimulationInputs:
    employees: int = 5
    marketing_spend: float = 200000.0
    product_price: float = 2999.0
    misc_expenses: float = 150000.0
    current_funds: float = 5000000.0
    # Carried through updates untouched; the engine never reads it.
    custom_parameters: Tuple[CustomParameter, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class OrganizationProfile:
    quantity_multiplier: float
    base_salary: float
    base_fixed_cost: float


@dataclass(frozen=True)
class FinancialData:
    revenue: float
    expenses: float
    net_profit: float
    runway: float  # math.inf when expenses are zero
    profit_margin: float


@dataclass(frozen=True)
class TimeSeriesPoint:
    month: str
    revenue: float
    expenses: float


@dataclass(frozen=True)
class FinancialContext:
    current_revenue: float
    projected_revenue: float
    expenses: float
    growth_rate: float
    time_horizon: int
    cash_flow: float
    profit_margin: float


# Outputs are plain frozen values; each call builds a new one.
