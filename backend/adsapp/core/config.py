from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Database
    RAW_DATABASE_URL: str = "sqlite+aiosqlite:///./adsapp.db"

    # Supabase (authenticated identity)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""

    # Celery broker for the scheduled sweep
    REDIS_URL: str = "redis://redis:6379/0"

    # Shared secret for internal (cron) endpoints. Empty disables them.
    INTERNAL_API_SECRET: str = ""

    # Public URL of the web app, used to build acceptance links
    APP_BASE_URL: str = "http://localhost:3000"

    # Invitations & licenses
    INVITATION_EXPIRY_DAYS: int = 7
    INVITATION_MAX_REMINDERS: int = 3
    INVITATION_SWEEP_INTERVAL_MINUTES: int = 60
    # Defaults for organizations without their own invitation settings
    INVITATION_REMINDER_INTERVAL_DAYS: int = 2
    INVITATION_AUTO_REMINDERS: bool = False
    INVITATION_REMINDER_CHECK_MINUTES: int = 360
    INVITATION_BULK_MAX: int = 50
    DEFAULT_MAX_TEAM_MEMBERS: int = 1

    # Email
    SMTP_SERVER: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    FROM_EMAIL: str = "no-reply@adsapp.local"
    FROM_NAME: str = "ADSapp"
    SEND_EMAILS: bool = False

    LOG_LEVEL: str = "INFO"

    @property
    def DATABASE_URL(self) -> str:
        # SQLAlchemy 2.0 requires the asyncpg driver for async operations
        if self.RAW_DATABASE_URL.startswith("postgresql://"):
            return self.RAW_DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)
        return self.RAW_DATABASE_URL

    @property
    def SYNC_DATABASE_URL(self) -> str:
        # Alembic needs a synchronous driver
        if self.RAW_DATABASE_URL.startswith("postgresql://"):
            return self.RAW_DATABASE_URL.replace("postgresql://", "postgresql+psycopg2://", 1)
        if self.RAW_DATABASE_URL.startswith("sqlite+aiosqlite"):
            return self.RAW_DATABASE_URL.replace("sqlite+aiosqlite", "sqlite", 1)
        return self.RAW_DATABASE_URL

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
