"""Application configuration via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
        "http://localhost:8000",
    ]

    # Ranking
    default_rank_score: int = 100  # promote() without an explicit score

    # Search: "fuzzy" uses the weighted index, "substring" requires every
    # query term to appear in the article's search vector
    search_mode: Literal["fuzzy", "substring"] = "fuzzy"
    search_threshold: float = 0.3  # lower = stricter matching
    search_min_match_length: int = 2

    # Seed data (default categories and RSS sources)
    seed_path: str | None = None  # defaults to config/seed.yaml
    load_seed_data: bool = True
    load_sample_articles: bool = False  # demo articles from config/sample_articles.yaml

    # NewsAPI (https://newsapi.org)
    news_api_key: str = ""
    news_api_url: str = "https://newsapi.org/v2"

    # Ingestion API key (protects POST /api/admin/refresh)
    ingest_api_key: str = ""

    # Background ingestion
    scheduler_enabled: bool = False
    ingest_interval_minutes: int = 30

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
