"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Health Insights configuration."""

    model_config = {
        "env_prefix": "HEALTH_INSIGHTS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Storage
    data_dir: str = "data/health_insights"

    log_level: str = "info"

    # How much history the insight service hands to the engine
    metric_history_limit: int = 10
    detailed_history_limit: int = 30

    # Drop insights whose type/category/title already exist in the repository
    skip_duplicate_insights: bool = False


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
