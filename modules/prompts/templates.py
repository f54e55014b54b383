"""Prompt templates and bundled multi-prompt examples."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List

ORIGINAL_IMAGE_TEMPLATE = "A vibrant, full-color image of: {prompt}"

_COLORING_STYLE = (
    "Use a clean, easy-to-color style with bold, solid, black lines. "
    "The final image must be strictly black and white, with no colors, shading, or gray tones. "
    "Focus on creating clear outlines and open spaces perfect for coloring."
)

COLORING_FROM_IMAGE_PROMPT = (
    "Transform the provided image into a simple coloring book page with a clean, "
    "easy-to-color style. Use bold, solid, black lines. The final image must be strictly "
    "black and white, with no colors, shading, or gray tones. Focus on creating clear "
    "outlines and open spaces perfect for coloring."
)

COLORING_FROM_PROMPT_TEMPLATE = "A coloring book page of: {prompt}. " + _COLORING_STYLE

TRENDING_NICHES_PROMPT = (
    "What are 5 current trending and popular niches for coloring books for adults and kids? "
    "Provide just the list of niche names in a JSON object with a key 'niches'."
)

NICHE_PROMPT_TEMPLATE = (
    "A coloring book page of: {niche}, with intricate patterns and beautiful details. "
    "Use a clean, easy-to-color style with bold, solid, black lines. "
    "The final image must be strictly black and white."
)


@dataclass(slots=True)
class ExamplePrompt:
    """Titled prompt shown in the multi-prompt inspiration box."""

    title: str
    prompt: str


EXAMPLE_PROMPTS: List[ExamplePrompt] = [
    ExamplePrompt(
        title="Baby Fox in Flowers",
        prompt=(
            "Cute baby fox sitting among simple flowers and butterflies, bold thick outlines, "
            "clear shapes, easy for kids, with small fun details like mushrooms and leaves."
        ),
    ),
    ExamplePrompt(
        title="Smiling Dinosaur in Jungle",
        prompt=(
            "Friendly cartoon dinosaur surrounded by simple trees, clouds, and leaves, bold "
            "outlines, easy shapes, small details like tiny rocks and flowers."
        ),
    ),
]


class ExamplePromptRegistry:
    """In-memory registry of example prompts."""

    def __init__(self, examples: Iterable[ExamplePrompt] = ()) -> None:
        self._examples: Dict[str, ExamplePrompt] = {}
        for example in examples:
            self.add(example)

    def load_from_file(self, path: Path) -> None:
        """Load examples from a JSON list of {title, prompt} objects."""
        if not path.exists():
            return
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        for entry in data:
            self.add(ExamplePrompt(title=entry["title"], prompt=entry.get("prompt", "")))

    def add(self, example: ExamplePrompt) -> None:
        """Register an example, replacing one with the same title."""
        self._examples[example.title] = example

    def list_examples(self) -> List[ExamplePrompt]:
        """Return all registered examples."""
        return list(self._examples.values())

    def get(self, title: str) -> ExamplePrompt:
        """Retrieve an example by title."""
        try:
            return self._examples[title]
        except KeyError as exc:
            raise KeyError(f"Example prompt '{title}' not found") from exc


def build_multi_prompt_example(examples: Iterable[ExamplePrompt]) -> str:
    """Render examples in the numbered, quoted multi-prompt format."""
    blocks = [
        f"{index}. {example.title}\n“{example.prompt}”"
        for index, example in enumerate(examples, start=1)
    ]
    return "\n\n".join(blocks)


def niche_prompt(niche: str) -> str:
    """Turn a suggested niche into a ready-to-use coloring page prompt."""
    return NICHE_PROMPT_TEMPLATE.format(niche=niche.strip())
