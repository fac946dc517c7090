"""Tests for API key lookup and capture configuration loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conflux import config
from conflux.config import CaptureConfig, get_api_key, load_capture_config


class TestApiKey:
    def test_keyring_first(self, monkeypatch):
        monkeypatch.setattr(config.keyring, "get_password", lambda service, key: "from-keyring")
        monkeypatch.setenv("MISTRAL_API_KEY", "from-env")
        assert get_api_key() == "from-keyring"

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setattr(config.keyring, "get_password", lambda service, key: None)
        monkeypatch.setenv("MISTRAL_API_KEY", "from-env")
        assert get_api_key() == "from-env"

    def test_missing_key_raises(self, monkeypatch):
        monkeypatch.setattr(config.keyring, "get_password", lambda service, key: None)
        monkeypatch.delenv("MISTRAL_API_KEY", raising=False)
        with pytest.raises(RuntimeError, match="set-api-key"):
            get_api_key()


class TestCaptureConfig:
    def test_defaults_when_file_missing(self, tmp_path: Path):
        cfg = load_capture_config(tmp_path / "missing.json")
        assert cfg == CaptureConfig()
        assert cfg.db_path == Path("data/conflux.db")

    def test_file_values_merged(self, tmp_path: Path):
        path = tmp_path / "capture_config.json"
        path.write_text(
            json.dumps({"db_path": "/tmp/x.db", "temperature": 0.1, "unknown_key": True})
        )
        cfg = load_capture_config(path)
        assert cfg.db_path == Path("/tmp/x.db")
        assert cfg.temperature == 0.1
        assert cfg.model == "mistral-small-latest"
