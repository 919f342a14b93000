from typing import Dict, List

from finance.schemas import FinancialContext


def format_currency(value: float) -> str:
    if value < 0:
        return f"-${abs(value):,.0f}"
    return f"${value:,.0f}"


def build_system_prompt(context: FinancialContext) -> str:
    return f"""
You are a financial advisor for small organizations (startups, event businesses and similar).
Answer using the financial context below. Be concise and practical.
Do NOT give investment advice, stock picks or promises of returns.
Focus on revenue, cost structure, cash flow, margin and runway.
Keep the tone supportive and solution-focused, never alarmist.

Financial Context:
- Current monthly revenue (latest month): {format_currency(context.current_revenue)}
- Projected period revenue: {format_currency(context.projected_revenue)}
- Projected period expenses: {format_currency(context.expenses)}
- Latest monthly cash flow: {format_currency(context.cash_flow)}
- Profit margin: {context.profit_margin:.1f}%
- Growth rate assumption: {context.growth_rate:.0f}%
- Planning horizon: {context.time_horizon} months
""".strip()


def build_advisor_messages(context: FinancialContext, question: str, history: List[Dict[str, str]] | None = None) -> List[Dict[str, str]]:
    messages = [{"role": "system", "content": build_system_prompt(context)}]
    for msg in history or []:
        if msg.get("role") in ("user", "assistant") and msg.get("content"):
            messages.append({"role": msg["role"], "content": msg["content"]})
    messages.append({"role": "user", "content": question.strip()})
    return messages
