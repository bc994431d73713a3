"""Content generation: prompts in, title/summary/story/actions/audio out.

All prompts are built first from the same facts. Title, summary, actions
and audio run concurrently; the story runs once that batch has settled.
Any failed or timed-out call replaces the whole result with fallback
content. Partial results are never mixed with fallback text.
"""

import asyncio
import json
import logging
import re
from collections.abc import Mapping
from time import perf_counter
from typing import Any

from insights_mcp.content.facts import InsightFacts
from insights_mcp.content.fallback import get_fallback_content
from insights_mcp.content.slots import InsightSlots
from insights_mcp.data.llm_client import TextGenerationClient
from insights_mcp.errors import GenerationError
from insights_mcp.models import InsightAction, InsightActivity, InsightContent
from insights_mcp.prompts.templates import build_all_prompts, check_generated_text
from insights_mcp.utils.sanitize import CODE_FENCE_PATTERN, clean_generated_text

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

DEFAULT_TEMPERATURES: dict[str, float] = {
    "title": 0.7,
    "summary": 0.5,
    "story": 0.7,
    "actions": 0.3,
    "audio": 0.5,
}

# "- ", "* ", "1. ", "2) " list markers
LIST_MARKER_PATTERN = re.compile(r"^(?:[-*•]|\d+[.)])\s+")


def known_entity_ids(slots: InsightSlots) -> set[str]:
    """Entity ids an action may reference: overdue and draft invoices, unbilled projects."""
    ids = {inv.id for inv in slots.overdue}
    ids.update(draft.id for draft in slots.drafts)
    ids.update(work.project_id for work in slots.unbilled_work)
    return ids


def _action_from_item(item: Any, valid_ids: set[str]) -> InsightAction | None:
    if isinstance(item, str):
        text = item.strip()
        return InsightAction(text=text) if text else None
    if not isinstance(item, dict):
        return None

    text = str(item.get("text") or "").strip()
    if not text:
        return None

    entity_id = item.get("entityId", item.get("entity_id"))
    entity_type = item.get("entityType", item.get("entity_type"))
    if entity_id is not None and str(entity_id) not in valid_ids:
        logger.warning(f"Dropping unknown entity id '{entity_id}' from action '{text}'")
        entity_id = entity_type = None

    return InsightAction(
        text=text,
        type=item.get("type"),
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
    )


def parse_actions(text: str, slots: InsightSlots) -> tuple[InsightAction, ...]:
    """
    Parse an actions response.

    Accepts a JSON array of {text, type?, entityType?, entityId?} objects,
    optionally wrapped in a code fence. Anything else is read as one action
    per non-empty line. Entity ids that do not belong to this period's
    invoices or projects are dropped from their action.
    """
    valid_ids = known_entity_ids(slots)
    stripped = CODE_FENCE_PATTERN.sub("", text.strip()).strip()

    try:
        data = json.loads(stripped)
    except json.JSONDecodeError:
        data = None

    if isinstance(data, list):
        actions = (_action_from_item(item, valid_ids) for item in data)
        return tuple(action for action in actions if action is not None)

    lines = (LIST_MARKER_PATTERN.sub("", line.strip()) for line in stripped.splitlines())
    return tuple(InsightAction(text=line) for line in lines if line)


class ContentGenerator:
    """
    Orchestrates text generation for one insight.

    Args:
        client: Text-generation client
        timeout_seconds: Per-call timeout
        temperatures: Per-fragment temperatures, merged over the defaults
    """

    def __init__(
        self,
        client: TextGenerationClient,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        temperatures: Mapping[str, float] | None = None,
    ):
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.temperatures = {**DEFAULT_TEMPERATURES, **(temperatures or {})}

    async def _run_with_timing(self, name: str, prompt: str) -> tuple[str, str | Exception, float]:
        call_start = perf_counter()
        try:
            result = await asyncio.wait_for(
                self.client.generate(prompt, self.temperatures[name]),
                timeout=self.timeout_seconds,
            )
            return (name, result, (perf_counter() - call_start) * 1000)
        except TimeoutError:
            duration = (perf_counter() - call_start) * 1000
            return (name, TimeoutError(f"exceeded {self.timeout_seconds}s"), duration)
        except Exception as e:
            return (name, e, (perf_counter() - call_start) * 1000)

    def _check_results(
        self, results: list[tuple[str, str | Exception, float]], facts: InsightFacts
    ) -> dict[str, str]:
        """Raise GenerationError for the first failed call, else return cleaned text by name."""
        texts: dict[str, str] = {}
        for name, result, duration_ms in results:
            if isinstance(result, Exception):
                raise GenerationError(
                    f"{name} generation failed after {duration_ms:.0f}ms: {result}",
                    fragment=name,
                    last_error=result,
                )
            text = result if name == "actions" else clean_generated_text(result)
            if not text.strip():
                raise GenerationError(f"{name} generation returned empty text", fragment=name)
            if banned := check_generated_text(text, facts):
                logger.warning(f"Banned words in generated {name}: {', '.join(banned)}")
            logger.debug(f"Generated {name} in {duration_ms:.0f}ms")
            texts[name] = text
        return texts

    async def _generate_all(self, slots: InsightSlots, facts: InsightFacts) -> InsightContent:
        prompts = build_all_prompts(slots, facts)

        first_wave = [
            (name, prompts[name])
            for name in ("title", "summary", "actions", "audio")
            if prompts[name] is not None
        ]
        results = await asyncio.gather(
            *[self._run_with_timing(name, prompt) for name, prompt in first_wave]
        )
        texts = self._check_results(list(results), facts)

        story_result = await self._run_with_timing("story", prompts["story"])
        texts.update(self._check_results([story_result], facts))

        actions = parse_actions(texts["actions"], slots) if "actions" in texts else ()

        return InsightContent(
            title=texts["title"],
            summary=texts["summary"],
            story=texts["story"],
            actions=actions,
            audio_script=texts["audio"],
        )

    async def generate(
        self,
        slots: InsightSlots,
        facts: InsightFacts,
        activity: InsightActivity | None = None,
    ) -> InsightContent:
        """
        Generate content for one period.

        Args:
            slots: Slots for the period
            facts: Facts extracted once from slots
            activity: Activity, used only by the fallback

        Returns:
            Generated content, or fallback content if any call failed
        """
        start_time = perf_counter()
        try:
            content = await self._generate_all(slots, facts)
        except GenerationError as e:
            logger.warning(
                f"Content generation failed for {slots.period_label} ({e}). Using fallback content"
            )
            return get_fallback_content(slots.period_label, slots.period_type, activity)

        logger.info(
            f"Generated content for {slots.period_label} in {(perf_counter() - start_time) * 1000:.0f}ms"
        )
        return content
