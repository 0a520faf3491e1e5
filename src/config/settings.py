"""Configuration management for the YouTube channel watcher."""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from croniter import croniter

load_dotenv()

_TRUTHY = ("1", "true", "yes", "y")
_URGENCIES = ("low", "normal", "critical")


def default_home_dir() -> Path:
    """Get the platform default store directory."""
    home = Path.home()
    if sys.platform.startswith("win"):
        return home / "AppData" / "Local" / "yt-notify"
    return home / ".local" / "share" / "yt-notify"


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


@dataclass(frozen=True)
class WatcherConfig:
    """Immutable configuration for the watcher."""

    # File paths
    home_dir: Path
    archive_dir: Path

    # Timing configuration
    poll_interval: float
    poll_cron: Optional[str]
    resync_on_start: bool

    # External commands
    ytdlp_binary: str
    ffmpeg_binary: str
    lookup_timeout: Optional[float]
    archive_workers: int

    # Notification configuration
    notify_timeout: int
    notify_urgency: str

    # Telegram relay (optional)
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""

    @property
    def icons_dir(self) -> Path:
        """Get the directory holding channel notification icons."""
        return self.home_dir / "icons"

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    @classmethod
    def from_env(cls) -> "WatcherConfig":
        """Create configuration from environment variables."""
        home = os.getenv("YT_NOTIFY_HOME", "").strip()
        archive = os.getenv("ARCHIVE_DIR", "").strip()

        return cls(
            home_dir=Path(home).expanduser() if home else default_home_dir(),
            archive_dir=Path(archive).expanduser() if archive else Path.home() / "Downloads",
            poll_interval=float(os.getenv("POLL_INTERVAL", "15")),       # Seconds between ticks
            poll_cron=os.getenv("POLL_CRON", "").strip() or None,
            resync_on_start=os.getenv("RESYNC_ON_START", "true").lower() in _TRUTHY,
            ytdlp_binary=os.getenv("YTDLP_BINARY", "yt-dlp"),
            ffmpeg_binary=os.getenv("FFMPEG_BINARY", "ffmpeg"),
            lookup_timeout=_optional_float("LOOKUP_TIMEOUT"),
            archive_workers=int(os.getenv("ARCHIVE_WORKERS", "4")),
            notify_timeout=int(os.getenv("NOTIFY_TIMEOUT", "0")),        # 0 = never expire
            notify_urgency=os.getenv("NOTIFY_URGENCY", "normal").strip().lower(),
            telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN", "").strip(),
            telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID", "").strip(),
        )

    def validate(self) -> None:
        """Validate configuration values."""
        if self.poll_interval <= 0:
            raise ValueError(f"POLL_INTERVAL must be positive, got {self.poll_interval}")

        if self.poll_cron:
            try:
                croniter(self.poll_cron)
            except ValueError as e:
                raise ValueError(f"Invalid POLL_CRON expression: {e}")

        if self.lookup_timeout is not None and self.lookup_timeout <= 0:
            raise ValueError(f"LOOKUP_TIMEOUT must be positive, got {self.lookup_timeout}")

        if self.archive_workers < 1:
            raise ValueError(f"ARCHIVE_WORKERS must be at least 1, got {self.archive_workers}")

        if self.notify_timeout < 0:
            raise ValueError(f"NOTIFY_TIMEOUT cannot be negative, got {self.notify_timeout}")

        if self.notify_urgency not in _URGENCIES:
            raise ValueError(f"NOTIFY_URGENCY must be one of {', '.join(_URGENCIES)}")
