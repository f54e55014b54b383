"""Gradio layout composition for the coloring book generator."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from config.settings import AppConfig
from modules.inspiration.niches import TrendingNicheService
from modules.pipelines.coloring import ColoringBookService, GenerationMode
from modules.pipelines.gemini_client import GeminiClientFactory
from modules.prompts.templates import EXAMPLE_PROMPTS, ExamplePromptRegistry
from modules.services.history_service import GenerationHistoryService
from modules.services.storage_service import StorageService
from modules.ui.callbacks import build_callbacks

_MODE_CHOICES = [
    ("Original & Coloring Page", GenerationMode.BOTH.value),
    ("Original Only", GenerationMode.ORIGINAL.value),
    ("Coloring Page Only", GenerationMode.COLORING.value),
]


def _load_example_registry(config: AppConfig) -> ExamplePromptRegistry:
    registry = ExamplePromptRegistry(EXAMPLE_PROMPTS)
    examples_path = Path(config.assets_dir) / "examples.json"
    registry.load_from_file(examples_path)
    return registry


def _example_markdown(registry: ExamplePromptRegistry) -> str:
    lines: list[str] = []
    for index, example in enumerate(registry.list_examples(), start=1):
        lines.append(f"**{index}. {example.title}**  \n“{example.prompt}”")
    return "\n\n".join(lines)


def build_app(config: AppConfig) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio is not installed; install the project dependencies first.")

    clients = GeminiClientFactory(config)
    example_registry = _load_example_registry(config)
    callbacks_map = build_callbacks(
        config,
        service=ColoringBookService(config, client_factory=clients),
        niche_service=TrendingNicheService(config, client_factory=clients),
        history=GenerationHistoryService(config.history_path, config.history_limit),
        storage=StorageService(config.output_dir),
        examples=example_registry,
    )

    def _niche_choices(niches: Sequence[str], message: str) -> tuple[Any, str]:
        return gr.update(choices=list(niches), value=None, visible=bool(niches)), message

    def _on_fetch_niches() -> tuple[Any, str]:
        return _niche_choices(*callbacks_map["on_fetch_niches"]())

    def _on_select_history(evt: gr.SelectData) -> tuple[str, list, list, str]:
        return callbacks_map["on_select_history"](evt.index)

    with gr.Blocks(title="AI Coloring Book Generator") as demo:
        gr.Markdown(
            "## AI Coloring Book Generator\n"
            "Turn your ideas into beautiful images and their coloring-book counterparts."
        )
        results_state = gr.State([])

        with gr.Row():
            with gr.Column(scale=3):
                prompt = gr.Textbox(
                    label="Prompt",
                    lines=5,
                    value=config.default_prompt,
                    placeholder="e.g., A majestic lion with a crown of stars",
                )
                mode = gr.Radio(
                    label="Generation options",
                    choices=_MODE_CHOICES,
                    value=GenerationMode.BOTH.value,
                )
            with gr.Column(scale=1):
                count = gr.Number(
                    label="Images",
                    value=1,
                    minimum=1,
                    maximum=config.max_images,
                    precision=0,
                )
                generate_btn = gr.Button("Generate", variant="primary")

        with gr.Accordion("Prompt Inspiration", open=False):
            gr.Markdown("Discover popular themes to spark your creativity.")
            niches_btn = gr.Button("Get Trending Niches", size="sm")
            niche_status = gr.Markdown("")
            niche_choices = gr.Radio(label="Trending niches", choices=[], visible=False)

            gr.Markdown("### Or try a multi-prompt format")
            gr.Markdown("You can generate multiple images at once by listing them. Here's an example:")
            gr.Markdown(_example_markdown(example_registry))
            example_btn = gr.Button("Use multi-prompt example", size="sm")

        status = gr.Markdown("Ready.")
        gallery = gr.Gallery(label="Results", columns=2, object_fit="contain", height="auto")
        download_btn = gr.Button("Download All Images")
        download_files = gr.File(label="Downloads", file_count="multiple")

        with gr.Accordion("Generation History", open=False):
            history_gallery = gr.Gallery(label="Recent generations", columns=5, allow_preview=False)
            clear_history_btn = gr.Button("Clear All History", variant="stop", size="sm")

        demo.load(
            fn=callbacks_map["on_load_history"],
            outputs=[history_gallery, status],
        )

        generate_btn.click(
            fn=callbacks_map["on_generate"],
            inputs=[prompt, count, mode],
            outputs=[gallery, status, results_state, history_gallery],
        )

        niches_btn.click(fn=_on_fetch_niches, outputs=[niche_choices, niche_status])
        niche_choices.input(
            fn=callbacks_map["on_select_niche"],
            inputs=[niche_choices],
            outputs=[prompt],
        )
        example_btn.click(fn=callbacks_map["on_use_multi_example"], outputs=[prompt, count])

        history_gallery.select(
            fn=_on_select_history,
            outputs=[prompt, gallery, results_state, status],
        )
        clear_history_btn.click(
            fn=callbacks_map["on_clear_history"],
            outputs=[history_gallery, status],
        )
        download_btn.click(
            fn=callbacks_map["on_download_all"],
            inputs=[results_state],
            outputs=[download_files, status],
        )

    return demo
