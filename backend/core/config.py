"""
Application Settings

Runtime configuration loaded from environment variables (prefix HOOPCOACH_)
or a local .env file.
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Bundled template JSON files
TEMPLATES_DIR = Path(__file__).parent / "templates"


class Settings(BaseSettings):
    """Service settings."""

    # Application
    APP_NAME: str = "HoopCoach API"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Templates
    TEMPLATES_DIR: Path = TEMPLATES_DIR

    # Temporal analysis
    FPS_GUESS: int = 30
    REWIND_RESET_SECONDS: float = 0.5

    # Single-frame posture checks
    KNEE_OVER_TOE_THRESHOLD: float = 0.02  # normalized x distance

    # Scoring
    DEFAULT_AGE_GROUP: str = "16-18"

    model_config = SettingsConfigDict(
        env_prefix="HOOPCOACH_",
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
