"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

import logging
import secrets
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings

from fantasy_bakes.models.rules import ScoringRuleSet

StorageBackend = Literal["memory", "json", "sql"]


class Settings(BaseSettings):
    """Fantasy Bakes configuration.

    All values can be overridden via environment variables or .env file.
    """

    # Environment
    fantasy_bakes_env: str = "development"

    # Logging
    fantasy_bakes_log_level: str = "INFO"

    # Storage
    storage_backend: StorageBackend = "json"
    data_file: str = "data/season.json"
    fallback_data_file: str = ""  # read-only seed used when the primary has no data
    database_url: str = "sqlite+aiosqlite:///fantasy_bakes.db"

    # Admin
    admin_password: str = ""

    # Scoring rules
    score_survived: float = 1.0
    score_technical_win: float = 2.0
    score_star_baker: float = 3.0
    score_handshake: float = 3.0
    score_soggy_bottom: float = -0.5

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _require_admin_password_in_production(self) -> Settings:
        """Reject a missing admin password in production; dev runs without admin access."""
        if self.fantasy_bakes_env == "production" and not self.admin_password:
            msg = "ADMIN_PASSWORD must be set in production."
            raise ValueError(msg)
        return self

    def scoring_rules(self) -> ScoringRuleSet:
        """The season's scoring rule set, built from the ``score_*`` settings."""
        return ScoringRuleSet(
            survived=self.score_survived,
            technical_win=self.score_technical_win,
            star_baker=self.score_star_baker,
            handshake=self.score_handshake,
            soggy_bottom=self.score_soggy_bottom,
        )


def verify_admin_password(settings: Settings, candidate: str | None) -> bool:
    """Check an admin password in constant time. An unset password never verifies."""
    if not settings.admin_password or not candidate:
        return False
    return secrets.compare_digest(candidate.encode(), settings.admin_password.encode())


def configure_logging(settings: Settings) -> None:
    """Configure root logging at the level named in settings."""
    logging.basicConfig(
        level=getattr(logging, settings.fantasy_bakes_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
