"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """VitalGuard server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default. Binding elsewhere also needs vg_allow_insecure_bind,
    # since the server has no auth layer.
    vg_host: str = "127.0.0.1"
    vg_port: int = 8001
    vg_log_level: str = "info"
    vg_allow_insecure_bind: bool = False

    # Scoring
    prediction_mode: Literal["ensemble", "simple"] = "ensemble"
    confidence_mode: Literal["seeded", "fixed", "random"] = "seeded"
    confidence_seed: int = 0

    # History
    history_limit: int = 50
    db_path: str = "~/.vitalguard/vitals.db"

    # Encryption (empty disables persistent history)
    encryption_key: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
