from pydantic_settings import BaseSettings
from pathlib import Path

# Get the project root directory (parent of tracker folder)
PROJECT_ROOT = Path(__file__).parent.parent

class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'data' / 'tracker.db'}"
    echo_sql: bool = False

    # Logging
    log_level: str = "WARNING"

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        extra = "ignore"

settings = Settings()
