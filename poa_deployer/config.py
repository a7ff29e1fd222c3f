"""POA Deployer — Configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class DeployerSettings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "POA_DEPLOYER_",
        "extra": "ignore",
    }

    # ── Deployment ─────────────────────────────────────────────
    registry_address: str = ""
    deployer_username: str = ""
    participation_token_decimals: int = 18

    # ── Wizard ─────────────────────────────────────────────────
    default_template: str = "custom"

    # ── Logging ────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "json"


settings = DeployerSettings()
