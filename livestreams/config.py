import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / "data"


class Config:
    TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
    ADMIN_CHAT_ID: int = int(os.getenv("ADMIN_CHAT_ID", "0"))
    YOUTUBE_API_KEY: str = os.getenv("YOUTUBE_API_KEY", "")
    YOUTUBE_API_BASE_URL: str = os.getenv(
        "YOUTUBE_API_BASE_URL", "https://youtube.googleapis.com/"
    )
    DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", str(DATA_DIR / "livestreams.db")))
    POLL_INTERVAL_MINUTES: int = int(os.getenv("POLL_INTERVAL_MINUTES", "60"))

    @classmethod
    def validate(cls) -> list[str]:
        errors = []
        if not cls.TELEGRAM_BOT_TOKEN:
            errors.append("TELEGRAM_BOT_TOKEN is required")
        if not cls.ADMIN_CHAT_ID:
            errors.append("ADMIN_CHAT_ID is required")
        if not cls.YOUTUBE_API_KEY:
            errors.append("YOUTUBE_API_KEY is required")
        if cls.POLL_INTERVAL_MINUTES <= 0:
            errors.append("POLL_INTERVAL_MINUTES must be positive")
        return errors


@dataclass(frozen=True)
class YouTubeSettings:
    """Connection settings handed to YouTubeClient at construction time."""

    api_key: str
    base_url: str = "https://youtube.googleapis.com/"

    @classmethod
    def from_config(cls) -> "YouTubeSettings":
        return cls(api_key=Config.YOUTUBE_API_KEY, base_url=Config.YOUTUBE_API_BASE_URL)
