"""Shared access to the Gemini API client."""

from __future__ import annotations

import base64
import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from config.settings import AppConfig

logger = logging.getLogger(__name__)


class GeminiClientFactory:
    """Create the Gemini client on first use and reuse it afterwards."""

    def __init__(self, config: AppConfig, client: Optional[Any] = None) -> None:
        self.config = config
        self._client = client

    def get(self) -> Any:
        """Return the cached client, building it when needed."""
        if self._client is not None:
            return self._client

        if not self.config.gemini_api_key:
            # Raised lazily so the UI can start and report it per request.
            raise RuntimeError("GEMINI_API_KEY environment variable not set")

        client_kwargs: dict[str, Any] = {"api_key": self.config.gemini_api_key}
        base_url = self.config.metadata.get("gemini_base_url")
        if base_url:
            client_kwargs["http_options"] = types.HttpOptions(base_url=base_url)
        logger.info("Initializing Gemini client")
        self._client = genai.Client(**client_kwargs)
        return self._client


def extract_image_base64(response: Any) -> Optional[str]:
    """Return the first inline image of the first candidate as base64."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None

    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline = getattr(part, "inline_data", None)
        data = getattr(inline, "data", None) if inline is not None else None
        if not data:
            continue
        if isinstance(data, (bytes, bytearray)):
            return base64.b64encode(bytes(data)).decode("ascii")
        return str(data)
    return None


def describe_response(response: Any) -> str:
    """Best-effort dump of a response for log messages."""
    dump = getattr(response, "model_dump_json", None)
    if callable(dump):
        return dump(exclude_none=True)
    return repr(response)
