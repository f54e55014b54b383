"""One-off script for debugging a real multi-prompt generation batch."""

from pathlib import Path

from config.settings import load_config
from modules.pipelines.coloring import ColoringBookService
from modules.prompts.templates import EXAMPLE_PROMPTS, build_multi_prompt_example
from modules.services.history_service import GenerationHistoryService
from modules.services.storage_service import StorageService
from modules.ui.callbacks import build_callbacks
from modules.utils.logging import setup_logging


def main() -> None:
    # 1. Real configuration and services; history goes to a scratch file
    config = load_config()
    setup_logging(config)

    callbacks = build_callbacks(
        config,
        service=ColoringBookService(config),
        niche_service=None,  # not needed to debug generation
        history=GenerationHistoryService(Path("debug_history.json")),
        storage=StorageService(Path("debug_outputs")),
    )

    # 2. Same text the "Use multi-prompt example" button fills in
    prompt = build_multi_prompt_example(EXAMPLE_PROMPTS)

    # 3. Stream the batch and print progress as the UI would show it
    results = []
    for _, status, results, _ in callbacks["on_generate"](prompt, 1, "both"):
        print("Status:", status)

    paths, message = callbacks["on_download_all"](results)
    print(message)
    for path in paths:
        print("-", path)


if __name__ == "__main__":
    main()
