# backend/scheduler/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # project root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/scheduler.db"
    redis_url: str = "redis://localhost:6379/0"

    business_timezone: str = "America/Los_Angeles"
    public_base_url: str = "http://localhost:3000"

    default_duration_minutes: int = 60

    reminders_enabled: bool = True
    remind_before_minutes: int = 1440
    reminder_check_interval: int = 60

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative SQLite paths are resolved against the project root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
