"""Prompt builders for insight content."""

from insights_mcp.prompts.actions import build_actions_prompt
from insights_mcp.prompts.audio import build_audio_prompt
from insights_mcp.prompts.story import build_story_prompt
from insights_mcp.prompts.summary import build_summary_prompt
from insights_mcp.prompts.templates import (
    PROMPT_BUILDERS,
    build_all_prompts,
    check_generated_text,
    get_prompt,
    list_prompts,
)
from insights_mcp.prompts.title import build_title_prompt

__all__ = [
    # Builders
    "build_actions_prompt",
    "build_audio_prompt",
    "build_story_prompt",
    "build_summary_prompt",
    "build_title_prompt",
    # Registry
    "PROMPT_BUILDERS",
    "build_all_prompts",
    "check_generated_text",
    "get_prompt",
    "list_prompts",
]
