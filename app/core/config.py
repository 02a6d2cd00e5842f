from functools import lru_cache
from pathlib import Path
import os


class Settings:
    app_name: str = "RunItSimply"
    secret_key: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./runitsimply.db")
    session_cookie: str = "runitsimply_session"
    schedule_cookie: str = "runitsimply_ranges"
    schedule_cookie_max_ranges: int = int(os.getenv("SCHEDULE_COOKIE_MAX_RANGES", "48"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    base_dir: Path = Path(__file__).resolve().parent.parent


@lru_cache
def get_settings() -> Settings:
    return Settings()
