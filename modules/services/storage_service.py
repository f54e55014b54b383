"""File storage helpers for exporting generated images."""

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from modules.pipelines.coloring import GenerationResult
from modules.utils.image_utils import image_bytes

logger = logging.getLogger(__name__)


def export_filenames(index: int, total: int) -> tuple[str, str]:
    """Return (original, coloring) file names for the ``index``-th result (0-based)."""
    suffix = f"-{index + 1}" if total > 1 else ""
    return f"original-image{suffix}.png", f"coloring-page{suffix}.png"


class StorageService:
    """Handle saving generated assets."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    def _new_export_dir(self, now: Optional[datetime] = None) -> Path:
        stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S-%f")
        target = self.output_dir / stamp
        target.mkdir(parents=True, exist_ok=True)
        return target

    def export(self, results: Sequence[GenerationResult], now: Optional[datetime] = None) -> List[Path]:
        """Write every image of ``results`` as PNG and return the file paths."""
        if not results:
            return []

        target = self._new_export_dir(now)
        paths: List[Path] = []
        for index, result in enumerate(results):
            original_name, coloring_name = export_filenames(index, len(results))
            for payload, name in ((result.original, original_name), (result.coloring, coloring_name)):
                if not payload:
                    continue
                path = target / name
                path.write_bytes(image_bytes(payload))
                paths.append(path)
        logger.info("Exported %d file(s) to %s", len(paths), target)
        return paths

    def cleanup(self, max_items: int = 100) -> None:
        """Limit the number of stored export directories."""
        if not self.output_dir.exists():
            return
        exports = sorted(
            (child for child in self.output_dir.iterdir() if child.is_dir()),
            key=lambda child: child.name,
            reverse=True,
        )
        for stale in exports[max_items:]:
            shutil.rmtree(stale)
