from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database Configuration
    # Point this at PostgreSQL in production; the SQLite default keeps local runs self-contained.
    DATABASE_URL: str = "sqlite:///./workshop_flow.db"

    # Progress checkpointing
    SAVE_DEBOUNCE_SECONDS: float = 0.5
    SAVE_MAX_RETRIES: int = 3
    SAVE_RETRY_BASE_DELAY: float = 0.5
    SAVE_RETRY_JITTER: float = 0.25

    # Checklist templates
    # When a workshop has no rows for a template, fall back to the built-in one.
    USE_FALLBACK_TEMPLATE: bool = True
    DEFAULT_TEMPLATE_NAME: str = "standard_assembly"

    LOG_LEVEL: str = "INFO"

    # Loads from a .env file in the root directory
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

# Singleton instance
settings = Settings()
