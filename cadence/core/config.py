from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://cadence:cadence@db:5432/cadence"
    APP_ENV: str = "development"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"
    # JSON lines in production; human-readable console output otherwise.
    LOG_JSON: bool = False

    # How far back the current-streak scan may walk from today.
    STREAK_LOOKBACK_DAYS: int = 365
    # Upper bound on the length of a recurrence evaluation window.
    MAX_WINDOW_DAYS: int = 366
    # Default horizon for materializing concrete recurring instances.
    MATERIALIZE_HORIZON_DAYS: int = 30

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"


settings = Settings()
