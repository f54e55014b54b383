"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from config.settings import AppConfig
from modules.inspiration.niches import TrendingNicheService
from modules.pipelines.batch import BatchGenerator, BatchProgress
from modules.pipelines.coloring import ColoringBookService, GenerationMode, GenerationResult
from modules.prompts.parser import clamp_image_count, expand_prompts
from modules.prompts.templates import (
    EXAMPLE_PROMPTS,
    ExamplePromptRegistry,
    build_multi_prompt_example,
    niche_prompt,
)
from modules.services.history_service import GenerationHistoryService, HistoryError, HistoryItem, time_ago
from modules.services.storage_service import StorageService
from modules.utils.image_utils import decode_image, generate_thumbnail, placeholder_image

logger = logging.getLogger(__name__)

GalleryItem = Tuple[Any, str]


def _caption(kind: str, index: int, total: int) -> str:
    return f"{kind} #{index + 1}" if total > 1 else kind


def gallery_items(results: Sequence[GenerationResult]) -> List[GalleryItem]:
    """Render result pairs as (image, caption) gallery entries."""
    items: List[GalleryItem] = []
    total = len(results)
    for index, result in enumerate(results):
        if result.original:
            items.append((decode_image(result.original), _caption("Original Image", index, total)))
        if result.coloring:
            items.append((decode_image(result.coloring), _caption("Coloring Page", index, total)))
    return items


def _shorten(text: str, width: int = 60) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= width else flat[: width - 1].rstrip() + "…"


def _thumbnail(source: Optional[str]) -> Any:
    if not source:
        return placeholder_image()
    try:
        return generate_thumbnail(decode_image(source))
    except (OSError, ValueError) as exc:
        logger.warning("Unreadable history thumbnail: %s", exc)
        return placeholder_image()


def history_entries(items: Sequence[HistoryItem]) -> List[GalleryItem]:
    """Render history items as thumbnail gallery entries, newest first."""
    return [
        (_thumbnail(item.thumbnail_source()), f"{_shorten(item.prompt)} · {time_ago(item.timestamp)}")
        for item in items
    ]


def _error(message: str) -> str:
    return f"Error: {message}"


def build_callbacks(
    config: AppConfig,
    service: Optional[ColoringBookService] = None,
    niche_service: Optional[TrendingNicheService] = None,
    history: Optional[GenerationHistoryService] = None,
    storage: Optional[StorageService] = None,
    examples: Optional[ExamplePromptRegistry] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    history_service = history or GenerationHistoryService(config.history_path, config.history_limit)
    storage_service = storage or StorageService(config.output_dir)
    example_registry = examples or ExamplePromptRegistry(EXAMPLE_PROMPTS)

    def _ensure_service() -> ColoringBookService:
        if service is None:
            raise RuntimeError("Image generation service is not configured.")
        return service

    def _progress_status(progress: BatchProgress) -> str:
        if progress.error:
            return _error(progress.error)
        if progress.done:
            return f"Generated {len(progress.results)} image set(s)."
        return f"Generating {progress.current} of {progress.total}..."

    def on_load_history() -> tuple[list[GalleryItem], str]:
        try:
            items = history_service.load()
        except HistoryError as exc:
            return [], _error(str(exc))
        return history_entries(items), ""

    def on_generate(
        prompt: str,
        count: Any,
        mode: str,
    ) -> Iterator[tuple[list[GalleryItem], str, list[GenerationResult], list[GalleryItem]]]:
        current_history = history_entries(history_service.list())
        prompts = expand_prompts(prompt, count, config.max_images)
        if not prompts:
            yield [], "Please enter a prompt.", [], current_history
            return

        try:
            generator = BatchGenerator(_ensure_service())
            resolved_mode = GenerationMode(mode or GenerationMode.BOTH.value)
        except (RuntimeError, ValueError) as exc:
            yield [], _error(str(exc)), [], current_history
            return

        logger.info("Starting batch of %d prompt(s) in %s mode", len(prompts), resolved_mode.value)
        final: Optional[BatchProgress] = None
        gallery: list[GalleryItem] = []
        for progress in generator.iter_generate(prompts, resolved_mode):
            final = progress
            try:
                gallery = gallery_items(progress.results)
            except (OSError, ValueError) as exc:
                logger.error("Undecodable image in batch result: %s", exc)
                message = "Failed to generate images. The model did not return valid image data."
                yield [], _error(message), [], current_history
                return
            if progress.done:
                break
            yield gallery, _progress_status(progress), progress.results, current_history

        assert final is not None  # iter_generate always ends with a done snapshot
        status = _progress_status(final)
        if final.succeeded:
            item = HistoryItem.create(prompt, final.results)
            try:
                current_history = history_entries(history_service.record(item))
            except HistoryError as exc:
                current_history = history_entries(history_service.list())
                status = f"{status} {_error(str(exc))}"
        yield gallery, status, final.results, current_history

    def on_fetch_niches() -> tuple[list[str], str]:
        if niche_service is None:
            return [], _error("Trending niche service is not configured.")
        try:
            niches = niche_service.fetch()
        except Exception as exc:  # noqa: BLE001
            return [], _error(str(exc) or "Could not fetch niches.")
        if not niches:
            return [], "No trending niches were suggested."
        return niches, f"Found {len(niches)} trending niches. Click one to use it."

    def on_select_niche(niche: Optional[str]) -> str:
        if not niche:
            return ""
        return niche_prompt(niche)

    def on_use_multi_example() -> tuple[str, int]:
        entries = example_registry.list_examples()
        return build_multi_prompt_example(entries), clamp_image_count(len(entries), config.max_images)

    def on_select_history(index: Any) -> tuple[str, list[GalleryItem], list[GenerationResult], str]:
        items = history_service.list()
        try:
            item = items[int(index)]
        except (TypeError, ValueError, IndexError):
            return "", [], [], _error("History entry not found.")
        try:
            gallery = gallery_items(item.images)
        except (OSError, ValueError) as exc:
            return item.prompt, [], [], _error(str(exc))
        return item.prompt, gallery, list(item.images), f"Loaded history entry from {time_ago(item.timestamp)}."

    def on_clear_history() -> tuple[list[GalleryItem], str]:
        try:
            history_service.clear()
        except HistoryError as exc:
            return [], _error(str(exc))
        return [], "History cleared."

    def on_download_all(results: Optional[List[GenerationResult]]) -> tuple[list[str], str]:
        if not results:
            return [], "Nothing to download yet."
        try:
            paths = storage_service.export(results)
            storage_service.cleanup(config.max_exports)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to download images: %s", exc)
            return [], _error("Failed to download images. Please try again.")
        return [str(path) for path in paths], f"Prepared {len(paths)} file(s) for download."

    return {
        "on_load_history": on_load_history,
        "on_generate": on_generate,
        "on_fetch_niches": on_fetch_niches,
        "on_select_niche": on_select_niche,
        "on_use_multi_example": on_use_multi_example,
        "on_select_history": on_select_history,
        "on_clear_history": on_clear_history,
        "on_download_all": on_download_all,
    }
