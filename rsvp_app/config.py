"""Application configuration via environment variables."""
from pathlib import Path

from pydantic_settings import BaseSettings

ENVIRONMENTS = ("development", "test", "production")


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    APP_ENV: str = "development"

    # One SQLite file per environment; DATABASE_URL overrides all three.
    DB_STORAGE: str = "./database/rsvp_event_app_dev.sqlite"
    TEST_DB_STORAGE: str = "./database/rsvp_event_app_test.sqlite"
    PROD_DB_STORAGE: str = "./database/rsvp_event_app_prod.sqlite"
    DATABASE_URL: str = ""
    SQL_ECHO: bool = False

    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60
    RESET_TOKEN_EXPIRE_MINUTES: int = 10
    RSVP_TOKEN_BYTES: int = 24

    FRONTEND_URL: str = "http://localhost:3000"
    CORS_ORIGINS: str = "http://localhost:3000"

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"

    @property
    def database_path(self) -> Path:
        """Database file for the active environment."""
        if self.APP_ENV not in ENVIRONMENTS:
            raise ValueError(f"Unknown APP_ENV {self.APP_ENV!r}; expected one of {ENVIRONMENTS}")
        storage = {
            "development": self.DB_STORAGE,
            "test": self.TEST_DB_STORAGE,
            "production": self.PROD_DB_STORAGE,
        }[self.APP_ENV]
        return Path(storage)

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"sqlite:///{self.database_path}"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"


settings = Settings()
