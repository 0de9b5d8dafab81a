from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Postgres
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DATABASE: str = "cms_db"
    DATABASE_URL: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"

    # Caller identity
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    COOKIE_NAME: str = "cms_auth"
    TOKEN_TTL_MINUTES: int = 60 * 24 * 7

    # Listing
    DEFAULT_PAGE_SIZE: int = 6
    MAX_PAGE_SIZE: int = 50
    RELATED_POSTS_LIMIT: int = 3

    @property
    def postgres_url(self) -> str:
        return f"postgresql://{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"

    @property
    def database_url(self) -> str:
        return self.DATABASE_URL or self.postgres_url


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
