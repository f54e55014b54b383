"""Split a textarea into individual generation prompts."""

from __future__ import annotations

import re
from typing import Any, List

MIN_IMAGES = 1
MAX_IMAGES = 5

# A numbered title line ("1. Baby Fox"), one or more line breaks, then a quoted
# prompt using straight or curly quotes.
_MULTI_PROMPT_PATTERN = re.compile(r"\d+\.\s*[^\r\n]*[\r\n]+[“\"]([^”\"]+)[”\"]")


def parse_multi_prompts(text: str) -> List[str]:
    """Return the quoted prompts of a numbered list, or an empty list."""
    prompts: List[str] = []
    for match in _MULTI_PROMPT_PATTERN.finditer(text or ""):
        body = match.group(1).strip()
        if body:
            prompts.append(body)
    return prompts


def clamp_image_count(value: Any, maximum: int = MAX_IMAGES) -> int:
    """Coerce a UI value into a valid number of images."""
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return MIN_IMAGES
    return max(MIN_IMAGES, min(numeric, maximum))


def expand_prompts(text: str, count: Any = 1, maximum: int = MAX_IMAGES) -> List[str]:
    """Resolve the prompts to generate for a textarea submission.

    A numbered multi-prompt list wins over ``count``. Otherwise the trimmed
    text is repeated ``count`` times. Blank input yields nothing.
    """
    cleaned = (text or "").strip()
    if not cleaned:
        return []

    prompts = parse_multi_prompts(text)
    if prompts:
        return prompts
    return [cleaned] * clamp_image_count(count, maximum)
