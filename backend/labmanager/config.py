from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./labmanager.db",
        env="DATABASE_URL",
    )
    database_echo: bool = Field(default=False, env="DATABASE_ECHO")

    # Auth
    jwt_secret_key: str = Field(default="dev-secret-change-me", env="JWT_SECRET_KEY")
    token_expire_seconds: int = Field(default=86400, env="TOKEN_EXPIRE_SECONDS")
    # When off, requests without a valid token act as an anonymous admin
    auth_required: bool = Field(default=False, env="AUTH_REQUIRED")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    # Pagination
    default_page_size: int = Field(default=10, env="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, env="MAX_PAGE_SIZE")

    # Validation
    enforce_email_domains: bool = Field(default=True, env="ENFORCE_EMAIL_DOMAINS")

    # Startup
    seed_demo_data: bool = Field(default=False, env="SEED_DEMO_DATA")

    # HTTP
    cors_origins: list[str] = Field(default=["*"], env="CORS_ORIGINS")

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
