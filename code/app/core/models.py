from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from finance.projection import runway_or_none
from finance.schemas import (
    CustomParameter,
    FinancialContext,
    FinancialData,
    SimulationInputs,
    TimeSeriesPoint,
)
from finance.usage import UsageStats


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CustomParameterModel(CamelModel):
    key: str
    value: str = ""


class SimulationInputsModel(CamelModel):
    employees: int = Field(ge=0, default=5)
    marketing_spend: float = Field(ge=0, default=200000.0, alias="marketingSpend")
    product_price: float = Field(ge=0, default=2999.0, alias="productPrice")
    misc_expenses: float = Field(ge=0, default=150000.0, alias="miscExpenses")
    current_funds: float = Field(ge=0, default=5000000.0, alias="currentFunds")
    custom_parameters: List[CustomParameterModel] = Field(default_factory=list, alias="customParameters")

    def to_inputs(self) -> SimulationInputs:
        return SimulationInputs(
            employees=self.employees,
            marketing_spend=self.marketing_spend,
            product_price=self.product_price,
            misc_expenses=self.misc_expenses,
            current_funds=self.current_funds,
            custom_parameters=tuple(CustomParameter(p.key, p.value) for p in self.custom_parameters),
        )

    @classmethod
    def from_inputs(cls, inputs: SimulationInputs) -> "SimulationInputsModel":
        return cls(
            employees=inputs.employees,
            marketing_spend=inputs.marketing_spend,
            product_price=inputs.product_price,
            misc_expenses=inputs.misc_expenses,
            current_funds=inputs.current_funds,
            custom_parameters=[CustomParameterModel(key=p.key, value=p.value) for p in inputs.custom_parameters],
        )


class InputsState(CamelModel):
    inputs: SimulationInputsModel
    organization_type: Optional[str] = Field(default=None, alias="organizationType")


class FinancialDataModel(CamelModel):
    revenue: float
    expenses: float
    net_profit: float = Field(alias="netProfit")
    # None means unlimited runway (zero expenses).
    runway: Optional[float] = None
    profit_margin: float = Field(alias="profitMargin")

    @classmethod
    def from_data(cls, data: FinancialData) -> "FinancialDataModel":
        return cls(
            revenue=data.revenue,
            expenses=data.expenses,
            net_profit=data.net_profit,
            runway=runway_or_none(data.runway),
            profit_margin=data.profit_margin,
        )


class UsageModel(CamelModel):
    simulations: int = Field(ge=0)
    exports: int = Field(ge=0)

    @classmethod
    def from_stats(cls, stats: UsageStats) -> "UsageModel":
        return cls(simulations=stats.simulations, exports=stats.exports)


class SimulateResponse(CamelModel):
    results: FinancialDataModel
    usage: UsageModel


class TimeSeriesPointModel(CamelModel):
    month: str
    revenue: float
    expenses: float

    @classmethod
    def from_point(cls, point: TimeSeriesPoint) -> "TimeSeriesPointModel":
        return cls(month=point.month, revenue=point.revenue, expenses=point.expenses)


class FinancialContextModel(CamelModel):
    current_revenue: float = Field(alias="currentRevenue")
    projected_revenue: float = Field(alias="projectedRevenue")
    expenses: float
    growth_rate: float = Field(alias="growthRate")
    time_horizon: int = Field(alias="timeHorizon")
    cash_flow: float = Field(alias="cashFlow")
    profit_margin: float = Field(alias="profitMargin")

    @classmethod
    def from_context(cls, context: FinancialContext) -> "FinancialContextModel":
        return cls(
            current_revenue=context.current_revenue,
            projected_revenue=context.projected_revenue,
            expenses=context.expenses,
            growth_rate=context.growth_rate,
            time_horizon=context.time_horizon,
            cash_flow=context.cash_flow,
            profit_margin=context.profit_margin,
        )


class ChatMessage(BaseModel):
    role: str
    content: str


class AdvisorRequest(BaseModel):
    question: str = Field(min_length=1)
    history: List[ChatMessage] = []


class AdvisorResponse(BaseModel):
    reply: str
    source: str
    context: FinancialContextModel
