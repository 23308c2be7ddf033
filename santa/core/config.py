import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str
    log_path: str


def load_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL") or "sqlite+pysqlite:///secret_santa.db"
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_path = os.getenv("LOG_PATH", "logs/santa.log")

    if log_level not in LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(LOG_LEVELS))}, got {log_level!r}.")

    return Settings(
        database_url=database_url,
        log_level=log_level,
        log_path=log_path,
    )
