"""
Leave API settings, read from the environment or a local .env file
"""
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_ENVIRONMENTS = ("local", "staging", "prod")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
MIN_PROD_SECRET_LENGTH = 32


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=True)

    DATABASE_URL: str = Field(..., description="SQLAlchemy URL of the leave database")
    JWT_SECRET_KEY: str = Field(..., description="Signs access tokens")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = Field(default=1440, description="Access token lifetime")

    APP_ENV: str = "local"
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = Field(default="*", description="Comma-separated CORS origins")
    VERSION: Optional[str] = Field(default=None, description="Reported by /health")

    # Seeded on startup when the users table has no admin
    INITIAL_ADMIN_EMAIL: str = "admin@company.com"
    INITIAL_ADMIN_PASSWORD: str = "Admin@12345"

    ACCRUAL_SCHEDULER_ENABLED: bool = Field(
        default=True,
        description="Run the casual leave accrual at 00:00 on the 1st of each month inside the API process",
    )

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        if v not in APP_ENVIRONMENTS:
            raise ValueError(f"APP_ENV must be one of {list(APP_ENVIRONMENTS)}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {list(LOG_LEVELS)}")
        return level

    def validate_production(self) -> None:
        """
        Refuse to run prod with a weak token secret or open CORS.

        Raises:
            ValueError: naming the offending setting
        """
        if self.APP_ENV != "prod":
            return
        if len(self.JWT_SECRET_KEY) < MIN_PROD_SECRET_LENGTH:
            raise ValueError(f"JWT_SECRET_KEY must be at least {MIN_PROD_SECRET_LENGTH} characters in prod")
        if not self.ALLOWED_ORIGINS or self.ALLOWED_ORIGINS == "*":
            raise ValueError("ALLOWED_ORIGINS must list explicit origins in prod")

    def get_allowed_origins_list(self) -> List[str]:
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


settings = Settings()
settings.validate_production()
