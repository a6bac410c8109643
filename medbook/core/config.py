from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (and `.env` when present).
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    PROJECT_NAME: str = "MedBook Appointment API"
    VERSION: str = "0.1.0"

    # Database
    DATABASE_URL: str = Field("sqlite:///./medbook.db", description="SQLAlchemy database URL")
    DB_ECHO: bool = Field(False, description="Log SQL statements")

    # Sessions
    SECRET_KEY: str = Field("change-me-in-production", description="Key used to sign the session cookie")
    SESSION_COOKIE: str = Field("medbook_session", description="Name of the session cookie")
    SESSION_MAX_AGE: int = Field(7 * 24 * 60 * 60, description="Session lifetime in seconds")

    # Startup
    SEED_DATABASE: bool = Field(True, description="Insert demo data when the database is empty")

    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")
    LOG_LEVEL: str = Field("INFO", description="Root log level")


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """
    Return the cached settings instance so the environment is read only once.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
