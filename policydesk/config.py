from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/policydesk.db"
    DATA_DIR: str = "./data"

    # Security
    SECRET_KEY: str = "dev-secret-change-in-prod"
    SESSION_COOKIE: str = "policydesk_session"
    SESSION_MAX_AGE_SECONDS: int = 24 * 60 * 60
    SESSION_HTTPS_ONLY: bool = False
    ALLOWED_ORIGINS: str = "http://localhost:5173"
    BCRYPT_ROUNDS: int = 12
    # Failed logins allowed per client address and username
    LOGIN_RATE_LIMIT: str = "10 per 15 minutes"

    # Bootstrap admin, created only when the users table is empty
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    # Spreadsheet ingestion webhook; empty disables it
    IMPORT_WEBHOOK_TOKEN: str = ""

    # Tasks
    TASK_RETENTION_DAYS: int = 7

    # App
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_LEVEL_SQL: str = "WARNING"
    SLOW_REQUEST_MS: int = 1000

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
