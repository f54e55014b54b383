"""Trending coloring-book niches suggested by the Gemini text model."""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from google.genai import types

from config.settings import AppConfig
from modules.pipelines.gemini_client import GeminiClientFactory
from modules.prompts.templates import TRENDING_NICHES_PROMPT

logger = logging.getLogger(__name__)


class NicheError(RuntimeError):
    """Raised when trending niches cannot be fetched or parsed."""


_NICHES_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "niches": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.STRING,
                description="A popular coloring book niche theme.",
            ),
        )
    },
)


class TrendingNicheService:
    """Ask the text model for popular coloring-book themes."""

    def __init__(self, config: AppConfig, client_factory: Optional[GeminiClientFactory] = None) -> None:
        self.config = config
        self._clients = client_factory or GeminiClientFactory(config)

    def fetch(self) -> List[str]:
        """Return the list of trending niche names."""
        try:
            logger.info("Fetching trending niches...")
            response = self._clients.get().models.generate_content(
                model=self.config.text_model,
                contents=TRENDING_NICHES_PROMPT,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=_NICHES_SCHEMA,
                ),
            )
            return parse_niches(getattr(response, "text", None) or "")
        except Exception as exc:
            logger.exception("Error fetching trending niches")
            raise NicheError(f"Failed to fetch trending niches: {exc}") from exc


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned
    lines = cleaned.splitlines()
    if lines and lines[0].startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def parse_niches(text: str) -> List[str]:
    """Extract niche names from the model's JSON answer."""
    cleaned = _strip_code_fence(text or "")
    try:
        data: Any = json.loads(cleaned)
    except json.JSONDecodeError:
        data = None

    niches = data.get("niches") if isinstance(data, dict) else None
    if not isinstance(niches, list):
        logger.error("Failed to parse niches from response: %s", cleaned)
        raise NicheError("Could not parse the list of trending niches from the AI response.")

    return [str(item).strip() for item in niches if str(item).strip()]
