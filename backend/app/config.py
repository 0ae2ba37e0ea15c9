from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/proposals.db"
    secret_key: str = "dev-secret-key-change-in-production"
    token_expire_days: int = 30
    log_level: str = "INFO"

    # Comma-separated list of allowed frontend origins
    cors_origins: str = "http://localhost:5173"

    # OpenAI configuration
    openai_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.0
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    # Only the embedding input is truncated; full text is always stored
    embedding_input_limit: int = 9000

    # Retrieval and extraction tuning
    retrieval_top_k: int = 7
    secondary_domain_min_confidence: float = 0.7

    # Redis configuration
    redis_url: str = "redis://localhost:6379"

    # Celery configuration
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/0"
    celery_concurrency: int = 4
    analysis_time_limit_seconds: int = 900

    # ChromaDB configuration
    chroma_persist_directory: str = "./data/chroma_db"

    # Stalled job reaper
    stalled_job_minutes: int = 30
    reaper_interval_minutes: int = 10

    class Config:
        env_file = ".env"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
