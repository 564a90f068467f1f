from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Runtime configuration, read from the environment or a local .env file."""

    DATABASE_URL: str
    REDIS_URL: str = "redis://localhost:6379/0"

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # per-user writes allowed on quote endpoints within one window (seconds)
    RATE_LIMIT: int = 100
    RATE_LIMIT_WINDOW: int = 600
    IDEMPOTENCY_TTL: int = 300

    QUOTE_PAGE_SIZE: int = 20
    QUOTE_PAGE_SIZE_MAX: int = 100

    # brand colours served until an admin saves their own
    DEFAULT_LIGHT_MODE_COLOR: str = "#1E40AF"
    DEFAULT_DARK_MODE_COLOR: str = "#F9B200"

    API_TITLE: str = "Design Quote Service"
    API_DESCRIPTION: str = "Pricing and quoting API for web-design projects"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
