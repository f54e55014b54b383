"""Configuration loading tests."""

from __future__ import annotations

from pathlib import Path

from config.settings import AppConfig, load_config


def test_defaults():
    config = AppConfig()

    assert config.image_model == "gemini-2.5-flash-image"
    assert config.text_model == "gemini-2.5-flash"
    assert config.history_limit == 10
    assert config.max_images == 5


def test_load_config_reads_env_file(monkeypatch, tmp_path):
    for name in ("API_KEY", "GOOGLE_API_KEY", "HISTORY_PATH", "GEMINI_BASE_URL", "GEMINI_TEXT_MODEL"):
        monkeypatch.delenv(name, raising=False)
    # registered so monkeypatch restores the values the .env file overwrites
    monkeypatch.setenv("GEMINI_API_KEY", "placeholder")
    monkeypatch.setenv("GEMINI_IMAGE_MODEL", "placeholder")
    monkeypatch.setenv("LOG_DIR", "placeholder")
    monkeypatch.setenv("HISTORY_LIMIT", "placeholder")

    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local settings\n"
        'GEMINI_API_KEY="from-file"\n'
        "GEMINI_IMAGE_MODEL=custom-image-model\n"
        f"LOG_DIR={tmp_path / 'logs'}\n"
        "HISTORY_LIMIT=3\n"
        "not a setting\n",
        encoding="utf-8",
    )

    config = load_config(str(env_file))

    assert config.gemini_api_key == "from-file"
    assert config.image_model == "custom-image-model"
    assert config.text_model == "gemini-2.5-flash"
    assert config.history_path == Path(tmp_path / "logs" / "history.json")
    assert config.history_limit == 3
    assert "gemini_base_url" not in config.metadata


def test_load_config_falls_back_to_api_key(monkeypatch, tmp_path):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "legacy-key")
    monkeypatch.setenv("HISTORY_LIMIT", "zero")

    config = load_config(str(tmp_path / "missing.env"))

    assert config.gemini_api_key == "legacy-key"
    assert config.history_limit == 10


def test_history_limit_is_capped(monkeypatch, tmp_path):
    monkeypatch.setenv("HISTORY_LIMIT", "50")

    config = load_config(str(tmp_path / "missing.env"))

    assert config.history_limit == 10
