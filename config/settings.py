"""Configuration helpers for the Coloring Book Studio project."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

# History keeps at most this many batches.
MAX_HISTORY_LIMIT = 10


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    gemini_api_key: Optional[str] = None
    image_model: str = "gemini-2.5-flash-image"
    text_model: str = "gemini-2.5-flash"
    log_dir: Path = Path("logs")
    history_path: Path = Path("logs/history.json")
    history_limit: int = MAX_HISTORY_LIMIT
    assets_dir: Path = Path("assets")
    output_dir: Path = Path("outputs")
    max_exports: int = 20
    max_images: int = 5
    default_prompt: str = "A friendly cartoon dragon sitting in a field of flowers"
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip().strip('"').strip("'")


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    api_key = (
        os.getenv("GEMINI_API_KEY")
        or os.getenv("API_KEY")
        or os.getenv("GOOGLE_API_KEY")
    )

    log_dir = Path(os.getenv("LOG_DIR", "logs")).expanduser()
    history_env = os.getenv("HISTORY_PATH")
    history_path = Path(history_env).expanduser() if history_env else log_dir / "history.json"
    output_dir = Path(os.getenv("OUTPUT_DIR", "outputs")).expanduser()

    metadata: dict[str, Any] = {}
    base_url = os.getenv("GEMINI_BASE_URL")
    if base_url:
        metadata["gemini_base_url"] = base_url

    return AppConfig(
        gemini_api_key=api_key,
        image_model=os.getenv("GEMINI_IMAGE_MODEL") or "gemini-2.5-flash-image",
        text_model=os.getenv("GEMINI_TEXT_MODEL") or "gemini-2.5-flash",
        log_dir=log_dir,
        history_path=history_path,
        history_limit=min(MAX_HISTORY_LIMIT, _int_from_env("HISTORY_LIMIT", MAX_HISTORY_LIMIT)),
        assets_dir=Path(os.getenv("ASSETS_DIR", "assets")).expanduser(),
        output_dir=output_dir,
        max_exports=_int_from_env("MAX_EXPORTS", 20),
        metadata=metadata,
    )
