"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from vitalguard.core.config.settings import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("ENCRYPTION_KEY", "PREDICTION_MODE", "CONFIDENCE_MODE", "DB_PATH"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)
        assert settings.vg_host == "127.0.0.1"
        assert settings.vg_port == 8001
        assert settings.vg_allow_insecure_bind is False
        assert settings.prediction_mode == "ensemble"
        assert settings.confidence_mode == "seeded"
        assert settings.history_limit == 50
        assert settings.encryption_key == ""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PREDICTION_MODE", "simple")
        monkeypatch.setenv("VG_PORT", "9100")
        monkeypatch.setenv("HISTORY_LIMIT", "10")

        settings = get_settings()
        assert settings.prediction_mode == "simple"
        assert settings.vg_port == 9100
        assert settings.history_limit == 10
        assert settings.confidence_mode == "fixed"

    def test_rejects_unknown_mode(self, monkeypatch):
        monkeypatch.setenv("PREDICTION_MODE", "neural")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
