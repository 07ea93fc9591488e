# greenquote/core/settings.py
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RULES_PATH = Path(__file__).resolve().parents[1] / "rules" / "lawn_defaults.yaml"


class Settings(BaseSettings):
    # === General ===
    APP_ENV: str = "local"  # local | development | production

    # === Database ===
    DATABASE_URL: str = "sqlite:///./greenquote.db"

    # === Logging ===
    LOG_LEVEL: str = "INFO"

    # === HTTP ===
    ALLOWED_ORIGINS: list[str] = ["*"]

    # === Mapping / geocoding ===
    GOOGLE_MAPS_API_KEY: Optional[str] = None
    GEOCODER_TIMEOUT_S: float = 10.0

    # === Estimation ===
    # "detecting..." pause before auto-estimated polygons appear; 0 disables it
    AUTO_ESTIMATE_DELAY_MS: int = Field(800, ge=0)
    LAWN_RULES_PATH: str = str(DEFAULT_RULES_PATH)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton Settings instance with simple per-environment overrides."""
    s = Settings()

    env = s.APP_ENV.lower()
    if env == "production":
        s.LOG_LEVEL = "WARNING"
    elif env == "development":
        s.LOG_LEVEL = "DEBUG"

    return s


settings = get_settings()
