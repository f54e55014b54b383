"""ColoringBookService unit tests."""

from __future__ import annotations

import base64
import io
from types import SimpleNamespace

import pytest
from PIL import Image

from config.settings import AppConfig
from modules.pipelines import gemini_client
from modules.pipelines.coloring import (
    ColoringBookService,
    GenerationError,
    GenerationMode,
    GenerationResult,
)
from modules.pipelines.gemini_client import GeminiClientFactory, extract_image_base64
from modules.prompts.templates import COLORING_FROM_IMAGE_PROMPT


def png_bytes(color: str) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buffer, format="PNG")
    return buffer.getvalue()


COLOR_PNG = png_bytes("orange")
LINES_PNG = png_bytes("white")


def image_response(data: bytes | None) -> SimpleNamespace:
    parts = [SimpleNamespace(text="Here is your image", inline_data=None)]
    if data is not None:
        parts.append(SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type="image/png")))
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])


class DummyModels:
    """Stub of ``client.models`` returning queued responses."""

    def __init__(self, responses: list) -> None:
        self.responses = list(responses)
        self.calls: list[dict] = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def build_service(responses: list) -> tuple[ColoringBookService, DummyModels]:
    models = DummyModels(responses)
    config = AppConfig(gemini_api_key="test-key")
    factory = GeminiClientFactory(config, client=SimpleNamespace(models=models))
    return ColoringBookService(config, client_factory=factory), models


def _text_of(contents) -> str:
    return contents[-1].text


def test_original_mode_makes_single_call():
    service, models = build_service([image_response(COLOR_PNG)])

    result = service.generate("a dragon", "original")

    assert result == GenerationResult(original=base64.b64encode(COLOR_PNG).decode(), coloring=None)
    assert len(models.calls) == 1
    assert models.calls[0]["model"] == "gemini-2.5-flash-image"
    assert _text_of(models.calls[0]["contents"]) == "A vibrant, full-color image of: a dragon"


def test_coloring_mode_generates_from_prompt():
    service, models = build_service([image_response(LINES_PNG)])

    result = service.generate("a dragon", GenerationMode.COLORING)

    assert result.original is None
    assert result.coloring == base64.b64encode(LINES_PNG).decode()
    assert _text_of(models.calls[0]["contents"]).startswith("A coloring book page of: a dragon.")


def test_both_mode_feeds_original_into_second_call():
    service, models = build_service([image_response(COLOR_PNG), image_response(LINES_PNG)])

    result = service.generate("a dragon", GenerationMode.BOTH)

    assert result.original == base64.b64encode(COLOR_PNG).decode()
    assert result.coloring == base64.b64encode(LINES_PNG).decode()
    assert len(models.calls) == 2
    second = models.calls[1]["contents"]
    assert second[0].inline_data.data == COLOR_PNG
    assert second[0].inline_data.mime_type == "image/png"
    assert second[1].text == COLORING_FROM_IMAGE_PROMPT


def test_missing_image_data_raises():
    service, _ = build_service([image_response(None)])

    with pytest.raises(GenerationError) as excinfo:
        service.generate("a dragon", "original")

    message = str(excinfo.value)
    assert message.startswith("Failed to generate images: ")
    assert "did not return valid image data" in message


def test_undecodable_image_payload_raises():
    service, _ = build_service([image_response(b"ABCDEF")])

    with pytest.raises(GenerationError) as excinfo:
        service.generate("a dragon", "original")

    assert "Failed to generate original image. The model did not return valid image data." in str(excinfo.value)


def test_both_mode_stops_when_original_fails():
    service, models = build_service([RuntimeError("quota exceeded"), image_response(LINES_PNG)])

    with pytest.raises(GenerationError, match="quota exceeded"):
        service.generate("a dragon", "both")

    assert len(models.calls) == 1


def test_invalid_mode_raises():
    service, models = build_service([])

    with pytest.raises(GenerationError, match="Invalid generation mode provided: sepia"):
        service.generate("a dragon", "sepia")

    assert models.calls == []


def test_missing_api_key_fails_on_first_use():
    service = ColoringBookService(AppConfig(gemini_api_key=None))

    with pytest.raises(GenerationError, match="GEMINI_API_KEY environment variable not set"):
        service.generate("a dragon", "original")


def test_client_factory_caches_client(monkeypatch):
    created = []

    class DummyClient:
        def __init__(self, **kwargs) -> None:
            created.append(kwargs)

    monkeypatch.setattr(gemini_client.genai, "Client", DummyClient)
    factory = GeminiClientFactory(AppConfig(gemini_api_key="secret"))

    first = factory.get()
    second = factory.get()

    assert first is second
    assert created == [{"api_key": "secret"}]


def test_extract_image_passes_through_string_payload():
    response = image_response(None)
    response.candidates[0].content.parts.append(
        SimpleNamespace(inline_data=SimpleNamespace(data="YWJj", mime_type="image/png"))
    )

    assert extract_image_base64(response) == "YWJj"
    assert extract_image_base64(SimpleNamespace(candidates=[])) is None


def test_result_from_dict_accepts_data_urls():
    result = GenerationResult.from_dict({"original": "data:image/png;base64,QUJD", "coloring": None})

    assert result.original == "QUJD"
    assert result.coloring is None
    assert result.first_image() == "QUJD"
    assert result.to_dict() == {"original": "QUJD", "coloring": None}
