"""
tenure.settings
===============

Configuration settings for the Tenure application.

Plain module constants cover the database and API; the pydantic
:class:`Settings` model carries the per‑family engine policy.  Every
value can be overridden via environment variables.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

# Database settings
# ---------------------------------------------------------------------------
DB_FILE = os.environ.get("TENURE_DB_FILE", BASE_DIR / "tenure.db")
DB_URL = os.environ.get("TENURE_DB_URL", f"sqlite:///{DB_FILE}")
DB_ECHO = os.environ.get("TENURE_DB_ECHO", "False").lower() == "true"

# API settings
# ---------------------------------------------------------------------------
API_HOST = os.environ.get("TENURE_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("TENURE_API_PORT", "8000"))
API_DEBUG = os.environ.get("TENURE_API_DEBUG", "False").lower() == "true"

# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("TENURE_LOG_LEVEL", "INFO").upper()


# ---------------------------------------------------------------------------
# Pydantic settings model for engine policy
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Engine policy, loaded from ``TENURE_``‑prefixed environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TENURE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Unretire reopens the primary period (employment or activity) when True.
    unretire_reopens_individual: bool = Field(True, description="Performers and officials")
    unretire_reopens_team: bool = Field(True, description="Teams")
    unretire_reopens_championship: bool = Field(True, description="Championships")
    unretire_reopens_faction: bool = Field(False, description="Factions")

    def unretire_policy(self) -> Dict[str, bool]:
        """Family name → Unretire policy."""
        return {
            "individual": self.unretire_reopens_individual,
            "team": self.unretire_reopens_team,
            "championship": self.unretire_reopens_championship,
            "faction": self.unretire_reopens_faction,
        }


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Basic process‑wide logging setup used by the API and CLI entry points."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Initialize settings
settings = Settings()
