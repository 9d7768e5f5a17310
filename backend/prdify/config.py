# backend/prdify/config.py
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./prdify.db"  # Default if not in .env

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False

    # Storage Paths
    STORAGE_PATH: Path = Path("storage")
    LOG_PATH: Optional[Path] = None  # Will be set based on STORAGE_PATH
    LOG_LEVEL: str = "INFO"

    # Completion provider
    OPENROUTER_API_KEY: Optional[str] = None
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_DEFAULT_MODEL: str = "anthropic/claude-3.5-sonnet"
    OPENROUTER_TIMEOUT_SECONDS: float = 120.0
    OPENROUTER_MAX_ATTEMPTS: int = 3
    OPENROUTER_BASE_DELAY_MS: int = 1000

    # Sent to the provider for attribution
    SITE_URL: str = "https://prdify.com"
    APP_TITLE: str = "PRDify"

    # Planning session
    QUESTIONS_PER_ROUND: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def model_post_init(self, __context) -> None:
        """Post initialization hook to set derived paths"""
        if isinstance(self.STORAGE_PATH, str):
            self.STORAGE_PATH = Path(self.STORAGE_PATH)

        self.LOG_PATH = Path(self.LOG_PATH) if self.LOG_PATH else self.STORAGE_PATH / "logs"

        self.create_storage_dirs()

    def create_storage_dirs(self) -> None:
        """Create necessary storage directories if they don't exist"""
        for path in [self.STORAGE_PATH, self.LOG_PATH]:
            path.mkdir(parents=True, exist_ok=True)


settings = Settings()
