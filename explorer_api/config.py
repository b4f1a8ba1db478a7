"""
Configuration management for the WikiLoop Explorer API.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

BASE_DIR: Path = Path(__file__).parent.parent
load_dotenv(os.path.join(BASE_DIR, ".env"))

DEFAULT_DATASETS = "missingdateofbirth,missingdateofdeath,missingplaceofbirth,catfacts"


def _split(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class Settings:
    """API server configuration."""

    # Paths
    DATA_DIR: str = os.getenv("EXPLORER_DATA_DIR", str(BASE_DIR / "data"))

    # Store
    METADATA_SCHEMA: str = os.getenv("METADATABASE", "wikiloop")
    DATASETS: List[str] = _split(os.getenv("EXPLORER_DATASETS", DEFAULT_DATASETS))
    DB_TIMEOUT: int = int(os.getenv("DB_TIMEOUT", "30"))  # seconds

    # Server
    API_TITLE: str = "WikiLoop Explorer API"
    API_DESCRIPTION: str = "Read-only REST API over epoch-versioned WikiLoop datasets"
    API_VERSION: str = "1.0.0"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8081"))

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "")

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)


settings = Settings()
