from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Service ---
    PROJECT_NAME: str = "Tableside_Orders"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # --- Storage ---
    DATABASE_URL: str = "sqlite:///./tableside.db"
    REDIS_URL: str | None = None  # Empty -> carts live in process RAM
    SESSION_TTL_SECONDS: int = 3600  # Guest carts expire after 1 hour

    # --- Admin ---
    ADMIN_API_TOKEN: str | None = None  # Unset -> admin routes are open

    # --- Business Rules ---
    TIMEZONE: str = "Asia/Colombo"
    NOTIFICATION_RETENTION_DAYS: int = 3

    # --- Retries ---
    READ_RETRY_ATTEMPTS: int = 3
    READ_RETRY_BASE_DELAY: float = 0.2
    DB_CONNECT_RETRIES: int = 10
    DB_CONNECT_WAIT_SECONDS: float = 3
    RECLEAR_ATTEMPTS: int = 5
    RECLEAR_BASE_DELAY: float = 1.0

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # Shared .env files carry POSTGRES_* and friends
    )

settings = Settings()
