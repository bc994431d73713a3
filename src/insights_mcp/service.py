"""Insight pipeline: data in, slots and facts computed once, content out."""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from insights_mcp.config import InsightsSettings, is_team_enabled_for_insights
from insights_mcp.content.facts import InsightFacts, extract_facts, validate_fact_invariants
from insights_mcp.content.generator import ContentGenerator
from insights_mcp.content.slots import InsightSlots, compute_slots
from insights_mcp.data.cache import TeamCurrencyCache
from insights_mcp.errors import DataFetchError
from insights_mcp.metrics.anomalies import detect_anomalies, detect_expense_anomalies
from insights_mcp.metrics.calculator import add_activity_metrics, calculate_all_metrics
from insights_mcp.metrics.selector import select_top_metrics
from insights_mcp.models import (
    ExpenseAnomaly,
    InsightActivity,
    InsightAnomaly,
    InsightGenerationResult,
    InsightMetric,
    MetricData,
    MetricType,
    PeriodType,
    SlotContext,
    metric_data_from_dict,
)
from insights_mcp.utils.normalize import facts_hash
from insights_mcp.utils.period import (
    PeriodInfo,
    get_period_label,
    get_previous_complete_period,
    get_previous_period,
)
from insights_mcp.utils.validators import InsightRequest

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


class InsightDataSource(Protocol):
    """Upstream data for one team. Methods raise DataFetchError on failure."""

    async def fetch_metric_data(self, team_id: str, period_start: date, period_end: date) -> MetricData: ...

    async def fetch_activity(self, team_id: str, period_start: date, period_end: date) -> InsightActivity: ...

    async def fetch_team_currency(self, team_id: str) -> str: ...


@dataclass(frozen=True)
class InsightComputation:
    """Deterministic part of the pipeline, before any text generation."""

    all_metrics: dict[MetricType, InsightMetric]
    selected_metrics: tuple[InsightMetric, ...]
    anomalies: tuple[InsightAnomaly, ...]
    expense_anomalies: tuple[ExpenseAnomaly, ...]
    slots: InsightSlots
    facts: InsightFacts


def compute_insight(request: InsightRequest) -> InsightComputation:
    """
    Compute metrics, anomalies, slots and facts for a request.

    Facts are extracted exactly once here and checked against slots.

    Raises:
        InsightsLogicError: If the facts contradict the slots
    """
    metrics = calculate_all_metrics(
        request.current, request.previous, request.currency, request.historical_context
    )
    metrics = add_activity_metrics(metrics, request.activity, request.previous_activity, request.currency)

    selected = tuple(select_top_metrics(metrics))
    anomalies = tuple(detect_anomalies(metrics))
    expense_anomalies = tuple(
        detect_expense_anomalies(
            request.current.category_spending,
            request.previous.category_spending,
            request.currency,
        )
    )

    context = dataclasses.replace(
        request.context or SlotContext(),
        anomalies=anomalies,
        expense_anomalies=expense_anomalies,
    )

    slots = compute_slots(
        metrics,
        request.activity,
        request.currency,
        request.period_label,
        request.period_type,
        context=context,
        locale=request.locale,
        selected_metrics=selected,
    )
    facts = extract_facts(slots)
    validate_fact_invariants(slots, facts)

    return InsightComputation(
        all_metrics=metrics,
        selected_metrics=selected,
        anomalies=anomalies,
        expense_anomalies=expense_anomalies,
        slots=slots,
        facts=facts,
    )


class InsightsService:
    """
    Runs the insight pipeline for teams.

    Args:
        data_source: Upstream data for teams
        generator: Content generator
        currency_cache: Injected team currency cache
        settings: Runtime settings (defaults to the environment)
    """

    def __init__(
        self,
        data_source: InsightDataSource,
        generator: ContentGenerator,
        currency_cache: TeamCurrencyCache,
        settings: InsightsSettings | None = None,
    ):
        self.data_source = data_source
        self.generator = generator
        self.currency_cache = currency_cache
        self.settings = settings or InsightsSettings.from_env()

    async def get_team_currency(self, team_id: str) -> str:
        if cached := self.currency_cache.get(team_id):
            return cached
        try:
            currency = await self.data_source.fetch_team_currency(team_id)
        except DataFetchError as e:
            logger.warning(f"Currency fetch failed for team {team_id} ({e}). Using {DEFAULT_CURRENCY}")
            return DEFAULT_CURRENCY
        self.currency_cache.store(team_id, currency)
        return currency.upper()

    async def _fetch_metric_data(self, team_id: str, period: PeriodInfo) -> MetricData:
        try:
            return await self.data_source.fetch_metric_data(team_id, period.period_start, period.period_end)
        except DataFetchError as e:
            logger.warning(
                f"Metric fetch failed for team {team_id}, {period.period_label} "
                f"(field={e.field}): {e}. Defaulting to zero"
            )
            return metric_data_from_dict(None)

    async def _fetch_activity(self, team_id: str, period: PeriodInfo) -> InsightActivity:
        try:
            return await self.data_source.fetch_activity(team_id, period.period_start, period.period_end)
        except DataFetchError as e:
            logger.warning(
                f"Activity fetch failed for team {team_id}, {period.period_label} "
                f"(field={e.field}): {e}. Defaulting to empty"
            )
            return InsightActivity()

    async def build_request(
        self,
        team_id: str,
        period_type: PeriodType,
        period: PeriodInfo | None = None,
        context: SlotContext | None = None,
    ) -> InsightRequest:
        """Fetch everything a request needs for one (team, period)."""
        period = period or get_previous_complete_period(period_type)
        previous = get_previous_period(period_type, period)

        currency, current_data, previous_data, activity, previous_activity = await asyncio.gather(
            self.get_team_currency(team_id),
            self._fetch_metric_data(team_id, period),
            self._fetch_metric_data(team_id, previous),
            self._fetch_activity(team_id, period),
            self._fetch_activity(team_id, previous),
        )

        context = context or SlotContext()
        if context.period_end is None:
            context = dataclasses.replace(context, period_end=period.period_end)

        return InsightRequest(
            currency=currency,
            period_label=get_period_label(period_type, period.period_year, period.period_number),
            period_type=period_type,
            current=current_data,
            previous=previous_data,
            activity=activity,
            previous_activity=previous_activity,
            context=context,
            locale=self.settings.locale,
        )

    async def generate_from_request(self, request: InsightRequest) -> InsightGenerationResult:
        """Compute facts once, then generate content from them."""
        computation = compute_insight(request)
        content = await self.generator.generate(computation.slots, computation.facts, request.activity)

        return InsightGenerationResult(
            selected_metrics=computation.selected_metrics,
            all_metrics=computation.all_metrics,
            anomalies=computation.anomalies,
            expense_anomalies=computation.expense_anomalies,
            activity=request.activity,
            content=content,
            extras={
                "facts_hash": facts_hash(computation.facts),
                "week_type": computation.slots.week_type,
                "mood": computation.facts.mood,
            },
        )

    async def generate_insight(
        self,
        team_id: str,
        period_type: PeriodType,
        period: PeriodInfo | None = None,
        context: SlotContext | None = None,
    ) -> InsightGenerationResult:
        """
        Generate an insight for a team's period.

        Args:
            team_id: Team identifier
            period_type: weekly, monthly, quarterly or yearly
            period: Period to report on (default: the last complete one)
            context: Optional momentum, YoY and history context

        Returns:
            InsightGenerationResult with content (possibly fallback)

        Raises:
            ValueError: If insights are not enabled for the team
        """
        if not is_team_enabled_for_insights(team_id, self.settings):
            raise ValueError(f"Insights are not enabled for team {team_id}")

        request = await self.build_request(team_id, period_type, period, context)
        logger.info(f"Generating insight for team {team_id}: {request.period_label}")
        return await self.generate_from_request(request)
