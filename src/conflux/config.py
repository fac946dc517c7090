"""Configuration loading for capture sessions and API credentials."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import keyring

SERVICE_NAME = "conflux-mistral"
KEY_NAME = "api_key"
ENV_VAR = "MISTRAL_API_KEY"

DEFAULT_CONFIG_PATH = Path("config/capture_config.json")


def get_api_key() -> str:
    """Get Mistral API key: system keyring first, then MISTRAL_API_KEY env var.

    Raises:
        RuntimeError: If no key found anywhere, with actionable instructions.
    """
    api_key = keyring.get_password(SERVICE_NAME, KEY_NAME)
    if api_key:
        return api_key

    api_key = os.environ.get(ENV_VAR)
    if api_key:
        return api_key

    raise RuntimeError(
        "Mistral API key not found.\n"
        "Set it with: conflux config set-api-key YOUR_KEY\n"
        f"Or: export {ENV_VAR}=your-key"
    )


@dataclass
class CaptureConfig:
    """Settings for a smart capture session."""

    db_path: Path = field(default_factory=lambda: Path("data/conflux.db"))
    model: str = "mistral-small-latest"
    temperature: float = 0.3
    workspace_id: str | None = None
    created_by: str = "local"

    def __post_init__(self) -> None:
        if isinstance(self.db_path, str):
            self.db_path = Path(self.db_path)


def load_capture_config(config_path: Path | None = None) -> CaptureConfig:
    """Load capture configuration from JSON, falling back to defaults.

    Reads ``config/capture_config.json`` when *config_path* is ``None``.
    A missing file yields all defaults; unrecognised keys are ignored.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    data: dict = {}
    if config_path.exists():
        with open(config_path) as f:
            data = json.load(f)

    field_names = {f.name for f in fields(CaptureConfig)}
    kwargs = {k: v for k, v in data.items() if k in field_names}
    return CaptureConfig(**kwargs)
