"""Configuration helpers for the CoverAlchemy project."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

API_KEY_ENV_NAMES = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    api_key: Optional[str] = None
    basic_model_id: str = "gemini-2.5-flash-image"
    pro_model_id: str = "gemini-3-pro-image-preview"
    aspect_ratio: str = "3:4"
    default_image_size: str = "1K"
    history_limit: int = 5
    loading_interval: float = 2.5
    log_dir: Path = Path("logs")
    download_dir: Path = Path("outputs")
    env_path: Path = Path(".env")
    billing_docs_url: str = "https://ai.google.dev/gemini-api/docs/billing"
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


def _int_env(name: str, default: int) -> int:
    try:
        return max(1, int(os.getenv(name, default)))
    except (TypeError, ValueError):
        return default


def _float_env(name: str, default: float) -> float:
    try:
        value = float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def resolve_api_key(env_path: Optional[Path] = None) -> Optional[str]:
    """Return the first configured Gemini API key, re-reading the .env file."""
    if env_path is not None:
        _load_env_file(env_path)
    for env_name in API_KEY_ENV_NAMES:
        value = os.getenv(env_name)
        if value:
            return value
    return None


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    defaults = AppConfig()
    metadata: dict[str, Any] = {
        "available_models": [
            {"label": "FLASH", "value": "basic"},
            {"label": "PRO (2K/4K)", "value": "pro"},
        ],
    }

    return AppConfig(
        api_key=resolve_api_key(),
        basic_model_id=os.getenv("BASIC_MODEL_ID") or defaults.basic_model_id,
        pro_model_id=os.getenv("PRO_MODEL_ID") or defaults.pro_model_id,
        history_limit=_int_env("HISTORY_LIMIT", defaults.history_limit),
        loading_interval=_float_env("LOADING_INTERVAL", defaults.loading_interval),
        log_dir=Path(os.getenv("LOG_DIR", str(defaults.log_dir))).expanduser(),
        download_dir=Path(os.getenv("DOWNLOAD_DIR", str(defaults.download_dir))).expanduser(),
        env_path=env_path,
        metadata=metadata,
    )
