from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Required by the API server; the process refuses to start without it.
    # Example: "postgresql://dailyflow:dailyflow@db:5432/dailyflow"
    DATABASE_URL: Optional[str] = None
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Comma-separated allowed origins, or "*" to allow all.
    CORS_ORIGINS: str = "*"

    # Base URL the tracker client talks to.
    API_URL: str = "http://localhost:4000/api"

    # IANA zone used for every date key. Empty means the host's local time.
    TIMEZONE: str = ""

    SAVE_DEBOUNCE_SECONDS: float = 0.4

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()

# Request header carrying the caller's mobile number.
IDENTITY_HEADER = "X-User-Mobile"
