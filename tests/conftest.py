"""Pytest configuration and fixtures."""

import asyncio
from collections.abc import Callable
from datetime import date
from typing import Any

import pytest

from insights_mcp.content.facts import InsightFacts, extract_facts
from insights_mcp.content.slots import InsightSlots
from insights_mcp.models import (
    DraftInvoice,
    InsightActivity,
    MetricData,
    MoneyOnTable,
    OverdueInvoice,
    SlotContext,
    UnbilledWork,
)
from insights_mcp.service import compute_insight
from insights_mcp.utils.validators import InsightRequest

# Role lines identify which fragment a prompt is for
FRAGMENT_MARKERS = {
    "title": "You write the headline",
    "summary": "You write the summary paragraph",
    "story": "You write the story",
    "actions": "You pick the next steps",
    "audio": "You write a short audio script",
}


def _fragment(prompt: str) -> str:
    return next(name for name, marker in FRAGMENT_MARKERS.items() if marker in prompt)


class FakeClient:
    """Text client returning canned text per fragment."""

    def __init__(
        self,
        responses: dict[str, str] | None = None,
        fail: set[str] | None = None,
        hang: set[str] | None = None,
    ):
        self.responses = {
            "title": "Your profit held at 30,000 kr this week.",
            "summary": "You made 30,000 kr profit on 50,000 kr revenue.",
            "story": "Revenue barely moved while expenses stayed flat.",
            "actions": "[]",
            "audio": "Week 2, 2025. Thirty thousand kronor profit.",
            **(responses or {}),
        }
        self.fail = fail or set()
        self.hang = hang or set()
        self.calls: list[tuple[str, float]] = []

    async def generate(self, prompt: str, temperature: float) -> str:
        name = _fragment(prompt)
        self.calls.append((name, temperature))
        if name in self.hang:
            await asyncio.sleep(10)
        if name in self.fail:
            raise RuntimeError(f"{name} exploded")
        return self.responses[name]


def make_metric_data(
    revenue: float = 0.0,
    expenses: float = 0.0,
    runway_months: float = 8.0,
    **kwargs: Any,
) -> MetricData:
    """MetricData with net profit and margin derived from revenue and expenses."""
    net_profit = kwargs.pop("net_profit", revenue - expenses)
    margin = kwargs.pop("profit_margin", net_profit / revenue * 100 if revenue > 0 else 0.0)
    return MetricData(
        revenue=revenue,
        expenses=expenses,
        net_profit=net_profit,
        cash_flow=kwargs.pop("cash_flow", net_profit),
        profit_margin=margin,
        runway_months=runway_months,
        **kwargs,
    )


@pytest.fixture
def make_request() -> Callable[..., InsightRequest]:
    """Factory for insight requests. Defaults to a regular (not first) week in SEK."""

    def _make(
        current: MetricData | None = None,
        previous: MetricData | None = None,
        activity: InsightActivity | None = None,
        context: SlotContext | None = None,
        currency: str = "SEK",
        period_label: str = "Week 2, 2025",
        period_type: str = "weekly",
        locale: str = "en-US",
    ) -> InsightRequest:
        return InsightRequest(
            currency=currency,
            period_label=period_label,
            period_type=period_type,
            current=current or make_metric_data(50000, 20000),
            previous=previous or make_metric_data(48000, 20000),
            activity=activity or InsightActivity(),
            context=context or SlotContext(weeks_of_history=6, period_end=date(2025, 1, 12)),
            locale=locale,
        )

    return _make


@pytest.fixture
def make_slots_and_facts(
    make_request: Callable[..., InsightRequest],
) -> Callable[..., tuple[InsightSlots, InsightFacts]]:
    """Factory running the deterministic pipeline and returning (slots, facts)."""

    def _make(**kwargs: Any) -> tuple[InsightSlots, InsightFacts]:
        computation = compute_insight(make_request(**kwargs))
        return computation.slots, computation.facts

    return _make


@pytest.fixture
def loss_shrink_request(make_request: Callable[..., InsightRequest]) -> InsightRequest:
    """Loss of 7,148 after a loss of 189,376: a 96% improvement that is still a loss."""
    return make_request(
        current=make_metric_data(10000, 17148),
        previous=make_metric_data(5000, 194376),
    )


@pytest.fixture
def money_on_table_activity() -> InsightActivity:
    """Activity with overdue invoices, a draft and unbilled work."""
    return InsightActivity(
        invoices_sent=3,
        invoices_paid=2,
        invoices_overdue=2,
        overdue_amount=30300.0,
        unbilled_hours=12.5,
        money_on_table=MoneyOnTable(
            overdue_invoices=(
                OverdueInvoice(id="inv-1", customer_name="Acme AB", amount=24300.0, days_overdue=14),
                OverdueInvoice(
                    id="inv-2",
                    customer_name="Lost Island AB",
                    amount=6000.0,
                    days_overdue=40,
                    is_unusual=True,
                    unusual_reason="usually pays within 10 days",
                ),
            ),
            draft_invoices=(DraftInvoice(id="draft-1", customer_name="Nordic Design", amount=8500.0),),
            unbilled_work=(
                UnbilledWork(
                    project_id="proj-1",
                    project_name="Website redesign",
                    hours=12.5,
                    billable_amount=12500.0,
                    customer_name="Nordic Design",
                ),
            ),
        ),
    )


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    """JSON payload in the shape the MCP tools accept."""
    return {
        "currency": "sek",
        "period_label": "Week 2, 2025",
        "period_type": "weekly",
        "locale": "sv-SE",
        "current": {
            "revenue": 120200,
            "expenses": 3139,
            "net_profit": 117061,
            "cash_flow": 117061,
            "profit_margin": 97.4,
            "runway_months": 8,
            "category_spending": [
                {"name": "Travel", "slug": "travel", "amount": 900},
                {"name": "Rent", "slug": "rent", "amount": 5000},
            ],
        },
        "previous": {
            "revenue": 95000,
            "expenses": 10000,
            "net_profit": 85000,
            "cash_flow": 85000,
            "profit_margin": 89.5,
            "runway_months": 7,
            "category_spending": [
                {"name": "Travel", "slug": "travel", "amount": 400},
                {"name": "Rent", "slug": "rent", "amount": 1000},
            ],
        },
        "activity": {
            "invoices_sent": 4,
            "invoices_paid": 3,
            "money_on_table": {
                "overdue_invoices": [
                    {"id": "inv-9", "customer_name": "Acme AB", "amount": 24300, "days_overdue": 12}
                ],
            },
            "context": {
                "streak": {"type": "profitable", "count": 3, "description": "3 consecutive profitable weeks"}
            },
        },
        "context": {"weeks_of_history": 8, "period_end": "2025-01-12"},
    }
