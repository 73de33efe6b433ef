# app/config.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Dit bestand staat in <repo>/app/config.py → parents[1] = repo root
REPO_ROOT = Path(__file__).resolve().parents[1]
ENV_FILE = REPO_ROOT / ".env"
load_dotenv(ENV_FILE, override=False)  # pre-load in procesomgeving


class Settings(BaseSettings):
    # ---- App ----
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # ---- Provider credentials ----
    # Allemaal optioneel: features zonder key vallen netjes terug.
    CRYPTO_PANIC_KEY: Optional[str] = None
    NEWSDATA_KEY: Optional[str] = None
    GROQ_API_KEY: Optional[str] = None

    # ---- LLM (OpenAI-compatible endpoint) ----
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    GROQ_MODEL: str = "llama-3.3-70b-versatile"
    NEWS_ENRICH_MAX_CONCURRENCY: int = 5
    NEWS_ENRICH_TIMEOUT_S: float = 10.0

    # ---- Fetching ----
    NEWS_FETCH_TIMEOUT_S: float = 10.0
    NEWS_SOURCES_PATH: Path = REPO_ROOT / "configs" / "news_sources.yml"
    NEWS_DEFAULT_LIMIT: int = 30
    NEWS_MAX_LIMIT: int = 50

    # ---- Static ----
    OG_IMAGE_PATH: Path = REPO_ROOT / "public" / "og-image.png"

    # Pydantic v2 configuratie
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # negeer overige .env-keys
    )

    @property
    def ai_enabled(self) -> bool:
        return bool(self.GROQ_API_KEY)

    def credential_presence(self) -> Dict[str, bool]:
        """Presence flags for the health endpoint; never exposes the values."""
        return {
            "CRYPTO_PANIC_KEY": bool(self.CRYPTO_PANIC_KEY),
            "NEWSDATA_KEY": bool(self.NEWSDATA_KEY),
            "GROQ_API_KEY": bool(self.GROQ_API_KEY),
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Eén Settings-object per proces. Routers krijgen het via Depends(get_settings),
    tests kunnen het overschrijven via app.dependency_overrides.
    """
    return Settings()
