"""Tests for content generation and fallback."""

import asyncio
import json
import logging

import pytest

from insights_mcp.content.fallback import get_fallback_content
from insights_mcp.content.generator import ContentGenerator, known_entity_ids, parse_actions
from insights_mcp.models import InsightActivity, MoneyOnTable, OverdueInvoice

from conftest import FakeClient


class TestContentGenerator:
    """Tests for ContentGenerator."""

    def test_generates_all_fragments(self, make_slots_and_facts) -> None:
        """Test every fragment is generated and cleaned."""
        slots, facts = make_slots_and_facts()
        client = FakeClient(responses={"title": '"Your profit held at 30,000 kr this week."'})
        content = asyncio.run(ContentGenerator(client).generate(slots, facts))

        assert not content.is_fallback
        assert content.title == "Your profit held at 30,000 kr this week."
        assert content.summary.startswith("You made")
        assert content.audio_script.startswith("Week 2, 2025")
        assert content.actions == ()

    def test_actions_skipped_when_nothing_actionable(self, make_slots_and_facts) -> None:
        """Test no actions call is made without actionable items."""
        slots, facts = make_slots_and_facts()
        client = FakeClient()
        asyncio.run(ContentGenerator(client).generate(slots, facts))

        names = [name for name, _ in client.calls]
        assert "actions" not in names
        assert sorted(names) == ["audio", "story", "summary", "title"]

    def test_story_runs_after_first_wave(self, make_slots_and_facts, money_on_table_activity) -> None:
        """Test the story is requested last."""
        slots, facts = make_slots_and_facts(activity=money_on_table_activity)
        client = FakeClient()
        asyncio.run(ContentGenerator(client).generate(slots, facts))

        names = [name for name, _ in client.calls]
        assert len(names) == 5
        assert names[-1] == "story"

    def test_temperatures(self, make_slots_and_facts, money_on_table_activity) -> None:
        """Test per-fragment temperatures, with overrides merged over defaults."""
        slots, facts = make_slots_and_facts(activity=money_on_table_activity)
        client = FakeClient()
        asyncio.run(ContentGenerator(client, temperatures={"summary": 0.1}).generate(slots, facts))

        temperatures = dict(client.calls)
        assert temperatures["summary"] == 0.1
        assert temperatures["actions"] == 0.3
        assert temperatures["title"] == 0.7

    def test_actions_parsed_with_entities(self, make_slots_and_facts, money_on_table_activity) -> None:
        """Test generated actions keep known entity ids."""
        slots, facts = make_slots_and_facts(activity=money_on_table_activity)
        actions_json = json.dumps(
            [
                {"text": "Chase Acme AB for 24,300 kr", "type": "overdue", "entityType": "invoice", "entityId": "inv-1"},
                {"text": "Invoice the website work", "type": "unbilled", "entityType": "project", "entityId": "proj-1"},
            ]
        )
        client = FakeClient(responses={"actions": f"```json\n{actions_json}\n```"})
        content = asyncio.run(ContentGenerator(client).generate(slots, facts))

        assert [a.entity_id for a in content.actions] == ["inv-1", "proj-1"]
        assert content.actions[0].type == "overdue"

    def test_failure_falls_back(self, make_slots_and_facts, money_on_table_activity) -> None:
        """Test any failed call replaces the whole result with fallback content."""
        slots, facts = make_slots_and_facts(activity=money_on_table_activity)
        client = FakeClient(fail={"summary"})
        content = asyncio.run(
            ContentGenerator(client).generate(slots, facts, money_on_table_activity)
        )

        assert content.is_fallback
        assert content.title == "Acme AB owes you - check your summary."
        assert content.actions[0].type == "overdue"

    def test_story_failure_falls_back(self, make_slots_and_facts) -> None:
        """Test a failure in the second wave also falls back."""
        slots, facts = make_slots_and_facts()
        client = FakeClient(fail={"story"})
        content = asyncio.run(ContentGenerator(client).generate(slots, facts))

        assert content.is_fallback
        assert content.title == "Week 2, 2025 summary ready."

    def test_timeout_falls_back(self, make_slots_and_facts, caplog) -> None:
        """Test a call exceeding the timeout falls back and is logged."""
        slots, facts = make_slots_and_facts()
        client = FakeClient(hang={"title"})
        with caplog.at_level(logging.WARNING, logger="insights_mcp.content.generator"):
            content = asyncio.run(ContentGenerator(client, timeout_seconds=0.05).generate(slots, facts))

        assert content.is_fallback
        assert "title generation failed" in caplog.text

    def test_empty_text_falls_back(self, make_slots_and_facts) -> None:
        """Test an empty fragment counts as a failure."""
        slots, facts = make_slots_and_facts()
        client = FakeClient(responses={"audio": "   "})
        content = asyncio.run(ContentGenerator(client).generate(slots, facts))
        assert content.is_fallback

    def test_banned_words_logged(self, make_slots_and_facts, caplog) -> None:
        """Test banned words in generated text are logged, not rejected."""
        slots, facts = make_slots_and_facts()
        client = FakeClient(responses={"title": "A solid week for you at 30,000 kr profit."})
        with caplog.at_level(logging.WARNING, logger="insights_mcp.content.generator"):
            content = asyncio.run(ContentGenerator(client).generate(slots, facts))

        assert not content.is_fallback
        assert "Banned words in generated title: solid" in caplog.text


class TestParseActions:
    """Tests for parse_actions."""

    def test_unknown_entity_dropped(self, make_slots_and_facts, money_on_table_activity, caplog) -> None:
        """Test invented entity ids are removed but the action is kept."""
        slots, _ = make_slots_and_facts(activity=money_on_table_activity)
        text = json.dumps([{"text": "Chase the mystery invoice", "entityType": "invoice", "entityId": "inv-404"}])
        with caplog.at_level(logging.WARNING):
            actions = parse_actions(text, slots)

        assert len(actions) == 1
        assert actions[0].text == "Chase the mystery invoice"
        assert actions[0].entity_id is None
        assert actions[0].entity_type is None
        assert "inv-404" in caplog.text

    def test_plain_lines(self, make_slots_and_facts) -> None:
        """Test non-JSON responses become one action per line."""
        slots, _ = make_slots_and_facts()
        actions = parse_actions("- Send the draft\n\n2. Chase Acme AB\n* Review travel", slots)
        assert [a.text for a in actions] == ["Send the draft", "Chase Acme AB", "Review travel"]

    def test_strings_and_blank_items(self, make_slots_and_facts) -> None:
        """Test JSON strings are accepted and blank items skipped."""
        slots, _ = make_slots_and_facts()
        actions = parse_actions('["Send the draft", "", {"text": "  "}, 42]', slots)
        assert [a.text for a in actions] == ["Send the draft"]

    def test_known_entity_ids(self, make_slots_and_facts, money_on_table_activity) -> None:
        """Test overdue, draft and project ids are all known."""
        slots, _ = make_slots_and_facts(activity=money_on_table_activity)
        assert known_entity_ids(slots) == {"inv-1", "inv-2", "draft-1", "proj-1"}


class TestFallbackContent:
    """Tests for get_fallback_content."""

    def test_generic(self) -> None:
        """Test fallback without money on the table."""
        content = get_fallback_content("Week 2, 2025", "weekly")
        assert content.is_fallback
        assert content.actions == ()
        assert content.audio_script == f"{content.title} {content.summary}"

    def test_overdue_customer_named(self) -> None:
        """Test the overdue customer is named."""
        activity = InsightActivity(
            money_on_table=MoneyOnTable(
                overdue_invoices=(OverdueInvoice(id="inv-1", customer_name="Acme AB", amount=500, days_overdue=3),)
            )
        )
        content = get_fallback_content("Week 2, 2025", "weekly", activity)
        assert content.title == "Acme AB owes you - check your summary."
        assert "weekly numbers" in content.story

    def test_largest_overdue_customer_named(self) -> None:
        """Test the largest overdue invoice is named, whatever the input order."""
        activity = InsightActivity(
            money_on_table=MoneyOnTable(
                overdue_invoices=(
                    OverdueInvoice(id="inv-1", customer_name="Small Co", amount=50, days_overdue=3),
                    OverdueInvoice(id="inv-2", customer_name="Big Co", amount=90000, days_overdue=10),
                )
            )
        )
        content = get_fallback_content("Week 2, 2025", "weekly", activity)
        assert content.title == "Big Co owes you - check your summary."
        assert "Big Co owes you" in content.summary

    @pytest.mark.parametrize("period_type", ["weekly", "monthly", "quarterly", "yearly"])
    def test_all_fields_populated(self, period_type: str) -> None:
        """Test every text field is non-empty."""
        content = get_fallback_content("Q4 2024", period_type)
        assert all([content.title, content.summary, content.story, content.audio_script])
