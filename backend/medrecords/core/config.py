from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Optional


class Settings(BaseSettings):
    APP_NAME: str = "MedRecords Patient Records API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api/v1"

    SECRET_KEY: str = "change-me-in-production-use-strong-random-key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    DATABASE_URL: str = "sqlite:///./medrecords.db"

    # Password hashing cost (bcrypt accepts 4..31)
    BCRYPT_ROUNDS: int = 12

    # Pagination
    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100

    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # First admin account, created on startup when both are set
    BOOTSTRAP_ADMIN_EMAIL: Optional[str] = None
    BOOTSTRAP_ADMIN_PASSWORD: Optional[str] = None

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str) and not v.startswith("["):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    model_config = SettingsConfigDict(env_file=".env")


settings = Settings()
