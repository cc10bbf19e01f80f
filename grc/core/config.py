"""
Runtime configuration, read from the environment (and `.env`) once per process.

Nothing reads these values at import time except the module-level engine;
everything else receives a `Settings` through `get_settings`, which tests
override.
"""
import warnings
from functools import lru_cache
from typing import List, Optional

from pydantic import ConfigDict, field_validator, model_validator
from pydantic_settings import BaseSettings

# Keys that ship in examples and docs; never acceptable outside DEBUG.
KNOWN_WEAK_SECRETS = frozenset({
    "change-me",
    "changeme",
    "secret",
    "dev-secret",
})
MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "GRC Records"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Tokens
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 12

    # Database: DATABASE_URL wins, otherwise built from the POSTGRES_* parts
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: str = "grc"
    POSTGRES_PASSWORD: str = "grc"
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "grc"

    # Evidence files
    UPLOAD_DIR: str = "./uploads"
    UPLOADS_URL_PATH: str = "/uploads"
    PUBLIC_BASE_URL: Optional[str] = None
    MAX_UPLOAD_FILES: int = 10
    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024

    # Listings
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # First admin, created at startup only while the users table is empty
    ADMIN_BOOTSTRAP_EMAIL: Optional[str] = None
    ADMIN_BOOTSTRAP_PASSWORD: Optional[str] = None

    @field_validator('MAX_UPLOAD_FILES', 'MAX_UPLOAD_SIZE', 'DEFAULT_PAGE_SIZE', 'MAX_PAGE_SIZE',
                     'ACCESS_TOKEN_EXPIRE_MINUTES')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @model_validator(mode='after')
    def resolve_database_url(self) -> "Settings":
        if not self.DATABASE_URL:
            self.DATABASE_URL = (
                f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )
        return self

    @model_validator(mode='after')
    def check_secret_key(self) -> "Settings":
        weak = self.SECRET_KEY in KNOWN_WEAK_SECRETS or len(self.SECRET_KEY) < MIN_SECRET_LENGTH
        if not weak:
            return self
        if not self.DEBUG:
            raise ValueError(
                f"SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters and not a sample "
                "value; generate one with `openssl rand -hex 32`"
            )
        warnings.warn("Using a weak SECRET_KEY; acceptable only with DEBUG on", UserWarning)
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
