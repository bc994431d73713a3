"""Text sanitization utilities."""

import re

# Markdown code fences around model output
CODE_FENCE_PATTERN = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def sanitize_text(text: str | None, max_length: int = 500) -> str | None:
    """
    Sanitize untrusted text fields.

    Removes control characters and truncates to max_length.
    Apply to: period labels, customer names, any free-text field.

    Args:
        text: Text to sanitize (may be None)
        max_length: Maximum length before truncation

    Returns:
        Sanitized text or None if input was None
    """
    if text is None:
        return None

    # Remove control characters (including \r, \x00-\x1f, \x7f-\x9f)
    text = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", text)

    # Truncate if needed
    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text.strip()


def clean_generated_text(text: str) -> str:
    """
    Tidy a generated fragment.

    Strips code fences, surrounding quotes and whitespace, and collapses
    internal runs of whitespace to a single space.
    """
    text = CODE_FENCE_PATTERN.sub("", text.strip())
    text = re.sub(r"\s+", " ", text).strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1].strip()
    return text
