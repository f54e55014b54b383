"""Coloring book image generation backed by the Gemini image model."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from google.genai import types

from config.settings import AppConfig
from modules.pipelines.gemini_client import GeminiClientFactory, describe_response, extract_image_base64
from modules.prompts.templates import (
    COLORING_FROM_IMAGE_PROMPT,
    COLORING_FROM_PROMPT_TEMPLATE,
    ORIGINAL_IMAGE_TEMPLATE,
)
from modules.utils.image_utils import decode_image, strip_data_url

logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """Raised when the image model fails to produce a result."""


class GenerationMode(str, Enum):
    """Which images to produce for every prompt."""

    BOTH = "both"
    ORIGINAL = "original"
    COLORING = "coloring"


@dataclass(slots=True)
class GenerationResult:
    """Pair of optional base64-encoded PNG images."""

    original: Optional[str] = None
    coloring: Optional[str] = None

    def first_image(self) -> Optional[str]:
        """Return the original if present, otherwise the coloring page."""
        return self.original or self.coloring

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"original": self.original, "coloring": self.coloring}

    @classmethod
    def from_dict(cls, data: Any) -> "GenerationResult":
        if not isinstance(data, dict):
            raise ValueError(f"image entry must be an object, got {type(data).__name__}")
        payloads: Dict[str, Optional[str]] = {}
        for key in ("original", "coloring"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"'{key}' must be a base64 string or null")
            payloads[key] = strip_data_url(value) if value else None
        return cls(**payloads)


class ColoringBookService:
    """Facade around the Gemini image model."""

    def __init__(self, config: AppConfig, client_factory: Optional[GeminiClientFactory] = None) -> None:
        self.config = config
        self._clients = client_factory or GeminiClientFactory(config)

    def _image_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(response_modalities=[types.Modality.IMAGE])

    def _request_image(self, contents: Any, what: str) -> str:
        response = self._clients.get().models.generate_content(
            model=self.config.image_model,
            contents=contents,
            config=self._image_config(),
        )
        image = extract_image_base64(response)
        if image:
            try:
                decode_image(image)
            except (OSError, ValueError) as exc:
                logger.error("Undecodable image payload for %s: %s", what, exc)
                image = None
        else:
            logger.error("Invalid response structure for %s: %s", what, describe_response(response))
        if not image:
            raise GenerationError(
                f"Failed to generate {what}. The model did not return valid image data."
            )
        return image

    def generate_original(self, prompt: str) -> str:
        """Generate the full-color illustration."""
        logger.info("Generating original image...")
        text = ORIGINAL_IMAGE_TEMPLATE.format(prompt=prompt)
        return self._request_image([types.Part.from_text(text=text)], "original image")

    def coloring_from_image(self, image_base64: str) -> str:
        """Derive a line-art coloring page from an existing image."""
        logger.info("Generating coloring page from image...")
        contents = [
            types.Part.from_bytes(data=base64.b64decode(image_base64), mime_type="image/png"),
            types.Part.from_text(text=COLORING_FROM_IMAGE_PROMPT),
        ]
        return self._request_image(contents, "coloring page")

    def coloring_from_prompt(self, prompt: str) -> str:
        """Generate a coloring page straight from the text prompt."""
        logger.info("Generating coloring page directly from prompt...")
        text = COLORING_FROM_PROMPT_TEMPLATE.format(prompt=prompt)
        return self._request_image([types.Part.from_text(text=text)], "coloring page from prompt")

    def generate(self, prompt: str, mode: GenerationMode | str) -> GenerationResult:
        """Produce the images requested by ``mode`` for one prompt."""
        try:
            try:
                resolved = GenerationMode(mode)
            except ValueError as exc:
                raise GenerationError(f"Invalid generation mode provided: {mode}") from exc

            if resolved is GenerationMode.ORIGINAL:
                return GenerationResult(original=self.generate_original(prompt))

            if resolved is GenerationMode.COLORING:
                return GenerationResult(coloring=self.coloring_from_prompt(prompt))

            original = self.generate_original(prompt)
            coloring = self.coloring_from_image(original)
            return GenerationResult(original=original, coloring=coloring)
        except Exception as exc:
            logger.exception("Error in Gemini service")
            raise GenerationError(f"Failed to generate images: {exc}") from exc
