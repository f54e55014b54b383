"""Sequential batch generation with progress snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Protocol, Sequence

from modules.pipelines.coloring import GenerationMode, GenerationResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class ImageGenerator(Protocol):
    def generate(self, prompt: str, mode: GenerationMode | str) -> GenerationResult: ...


@dataclass(slots=True)
class BatchProgress:
    """Snapshot of a running batch."""

    current: int
    total: int
    results: List[GenerationResult] = field(default_factory=list)
    error: Optional[str] = None
    done: bool = False

    @property
    def succeeded(self) -> bool:
        return self.done and self.error is None


class BatchGenerator:
    """Run one generation per prompt, strictly one at a time.

    The first failure stops the batch; results completed before it are kept
    in the final snapshot.
    """

    def __init__(self, service: ImageGenerator) -> None:
        self.service = service

    def iter_generate(
        self, prompts: Sequence[str], mode: GenerationMode | str
    ) -> Iterator[BatchProgress]:
        total = len(prompts)
        results: List[GenerationResult] = []

        for index, prompt in enumerate(prompts, start=1):
            yield BatchProgress(current=index, total=total, results=list(results))
            try:
                result = self.service.generate(prompt, mode)
            except Exception as exc:  # noqa: BLE001
                logger.error("Batch aborted at %d/%d: %s", index, total, exc)
                message = str(exc) or "An unknown error occurred."
                yield BatchProgress(
                    current=index, total=total, results=list(results), error=message, done=True
                )
                return
            results.append(result)
            yield BatchProgress(current=index, total=total, results=list(results))

        logger.info("Batch finished: %d result(s)", len(results))
        yield BatchProgress(current=total, total=total, results=list(results), done=True)

    def run(
        self,
        prompts: Sequence[str],
        mode: GenerationMode | str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchProgress:
        """Consume the whole batch and return its final snapshot."""
        final = BatchProgress(current=0, total=len(prompts), done=True)
        for snapshot in self.iter_generate(prompts, mode):
            if on_progress is not None:
                on_progress(snapshot.current, snapshot.total)
            final = snapshot
        return final
