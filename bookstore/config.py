import os

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv(".env")


def _default_db_url() -> str:
    env_url = os.getenv("APP_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_url:
        return env_url

    user = os.getenv("DB_USER", "postgres")
    password = os.getenv("DB_PASSWORD", "postgres")
    db_name = os.getenv("DB_NAME", "bookstore")
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5432")
    return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{db_name}"


class Settings(BaseSettings):
    app_name: str = "Bookstore API"
    version: str = "1.0.0"
    database_url: str = Field(default_factory=_default_db_url)
    db_pool_size: int = 10
    db_max_overflow: int = 0
    db_pool_timeout: float = 30.0
    create_schema: bool = True
    cors_origins: str = "*"
    log_level: str = "INFO"
    otel_enabled: bool = False

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def get_settings() -> Settings:
    return Settings()
