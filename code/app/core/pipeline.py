import logging
import random
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from finance.profiles import resolve_organization_profile
from finance.projection import build_financial_context, run_projection
from finance.records import build_financial_record, build_simulation_record, merge_saved_financials
from finance.schemas import FinancialContext, FinancialData, SimulationInputs, TimeSeriesPoint
from finance.series import SeriesTicker, SyntheticSeries
from finance.usage import UsageStats

from app.ai.advisor_client import extract_text, query_advisor
from .config import ORGANIZATION_TYPE, SERIES_TICK_SECONDS, STORE_PROFILE_ID, series_seed
from .prompts import build_advisor_messages, format_currency
from .store import InMemoryStore, SimulationStore

logger = logging.getLogger(__name__)


def deterministic_advice(context: FinancialContext) -> str:
    projected_profit = context.projected_revenue - context.expenses

    if projected_profit >= 0:
        profit_line = (
            f"- The projection is profitable: {format_currency(context.projected_revenue)} revenue against "
            f"{format_currency(context.expenses)} expenses ({context.profit_margin:.1f}% margin)."
        )
    else:
        profit_line = (
            f"- The projection runs a deficit of {format_currency(abs(projected_profit))}: "
            f"{format_currency(context.projected_revenue)} revenue against {format_currency(context.expenses)} expenses."
        )

    if context.cash_flow > 0:
        cash_line = f"- Latest month cash flow is positive at {format_currency(context.cash_flow)}."
    elif context.cash_flow < 0:
        cash_line = f"- Latest month cash flow is negative at {format_currency(context.cash_flow)}."
    else:
        cash_line = "- Latest month cash flow is break-even."

    lines: List[str] = [
        "Summary:",
        profit_line,
        cash_line,
        "",
        "Actions:",
    ]
    if projected_profit < 0:
        lines.append("- Review pricing and volume assumptions before adding fixed costs.")
        lines.append("- Trim marketing and miscellaneous spend that does not drive revenue.")
    else:
        lines.append("- Protect the margin as headcount grows.")
    lines.append(
        f"- Re-run the projection across the {context.time_horizon}-month horizon "
        f"at the assumed {context.growth_rate:.0f}% growth rate."
    )
    return "\n".join(lines).strip()


class DashboardSession:
    """State and actions behind one dashboard view.

    Owns the inputs, the synthetic series and its ticker, and the usage
    counters. ``close`` must be called when the view goes away.
    """

    def __init__(
        self,
        inputs: Optional[SimulationInputs] = None,
        organization_type: Optional[str] = ORGANIZATION_TYPE,
        store: Optional[SimulationStore] = None,
        profile_id: str = STORE_PROFILE_ID,
        series: Optional[SyntheticSeries] = None,
        tick_seconds: float = SERIES_TICK_SECONDS,
        usage: Optional[UsageStats] = None,
    ):
        self.inputs = inputs or SimulationInputs()
        self.organization_type = organization_type
        self.store = store if store is not None else InMemoryStore()
        self.profile_id = profile_id
        self.series = series or SyntheticSeries(rng=random.Random(series_seed()))
        self.tick_seconds = tick_seconds
        self.ticker = SeriesTicker(self.series, interval=tick_seconds)
        self._last_tick: Optional[float] = None
        self.usage = usage or UsageStats()
        self.results: Optional[FinancialData] = None

    def open(self, start_ticker: bool = True) -> "DashboardSession":
        """Restore saved inputs and, unless the caller drives ticks itself, start the ticker."""
        self.restore_inputs()
        if start_ticker:
            self.ticker.start()
        return self

    def close(self) -> None:
        self.ticker.stop()

    def __enter__(self) -> "DashboardSession":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    def restore_inputs(self) -> SimulationInputs:
        try:
            saved = self.store.load_financial_data(self.profile_id)
        except Exception:
            logger.exception("loading saved financial data failed for profile=%s", self.profile_id)
            return self.inputs
        self.inputs = merge_saved_financials(self.inputs, saved)
        return self.inputs

    def update_inputs(self, inputs: SimulationInputs, organization_type: Optional[str] = None) -> SimulationInputs:
        self.inputs = inputs
        if organization_type is not None:
            self.organization_type = organization_type
        return self.inputs

    def run_simulation(self, when: Optional[datetime] = None) -> Tuple[FinancialData, Dict[str, dict]]:
        """Project the current inputs and bump the simulation counter.

        Returns the results plus the records the caller should hand to
        ``persist`` once the results are out.
        """
        inputs = self.inputs
        profile = resolve_organization_profile(self.organization_type)
        results = run_projection(inputs, profile)
        self.results = results
        self.usage.record_simulation()
        logger.info(
            "simulation run org=%s revenue=%.2f expenses=%.2f runway=%s",
            self.organization_type,
            results.revenue,
            results.expenses,
            results.runway,
        )
        records = {
            "simulation": build_simulation_record(inputs, results, self.organization_type, when),
            "financial_data": build_financial_record(inputs, results),
        }
        return results, records

    def persist(self, records: Dict[str, dict]) -> None:
        # Fire-and-forget: failures are logged and never touch the results.
        try:
            self.store.save_simulation(self.profile_id, records["simulation"])
            logger.info("simulation saved for profile=%s", self.profile_id)
        except Exception:
            logger.exception("simulation save failed for profile=%s (continuing without save)", self.profile_id)
        try:
            self.store.save_financial_data(self.profile_id, records["financial_data"])
            logger.info("financial data saved for profile=%s", self.profile_id)
        except Exception:
            logger.exception("financial data save failed for profile=%s (continuing without save)", self.profile_id)

    def export(self) -> UsageStats:
        self.usage.record_export()
        return self.usage

    def tick_if_due(self, now: float) -> bool:
        """Advance the series when ``tick_seconds`` have passed since the last call that ticked.

        For callers that schedule ticks themselves instead of running the ticker.
        """
        if self._last_tick is None:
            self._last_tick = now
            return False
        if now - self._last_tick < self.tick_seconds:
            return False
        self._last_tick = now
        self.series.tick()
        return True

    def series_snapshot(self) -> Tuple[TimeSeriesPoint, ...]:
        return self.series.snapshot()

    def financial_context(self) -> FinancialContext:
        profile = resolve_organization_profile(self.organization_type)
        return build_financial_context(self.inputs, profile, self.series.latest())

    def ask_advisor(self, question: str, history: Optional[List[Dict[str, str]]] = None) -> Tuple[str, str, FinancialContext]:
        context = self.financial_context()
        messages = build_advisor_messages(context, question, history)
        reply = ""
        try:
            reply = extract_text(query_advisor(messages))
        except Exception as exc:
            logger.warning("advisor unavailable, using deterministic reply: %s", exc)
        if reply:
            return reply, "model", context
        return deterministic_advice(context), "fallback", context

    def chat(self, question: str, messages: List[Dict[str, str]]) -> Tuple[str, str]:
        """Ask the advisor and append the exchange to ``messages``.

        Replies are stored as returned; ``source`` is kept beside the content.
        """
        reply, source, _ = self.ask_advisor(question, list(messages))
        messages.append({"role": "user", "content": question})
        messages.append({"role": "assistant", "content": reply, "source": source})
        return reply, source
