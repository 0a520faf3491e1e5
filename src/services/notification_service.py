"""Desktop notifications for newly detected videos."""

import subprocess
from typing import Optional, Protocol

from ..models.channel import Channel
from ..models.video import Video
from .telegram_service import TelegramService


class NotificationSink(Protocol):
    """Protocol for anything that can announce a new video."""

    def notify(self, video: Video, channel: Channel) -> bool:
        """Announce a video. Returns False when delivery failed."""
        ...


def passes_notif_filter(video: Video, channel: Channel) -> bool:
    """Keyword gate for notifications. Every video passes for now."""
    return True


def render_body(video: Video, channel: Channel) -> str:
    if video.is_live:
        return f"{channel.name} is live"
    return f"{channel.name} has uploaded a video"


class DesktopNotificationService:
    """Shows notifications through ``notify-send``."""

    def __init__(self, timeout: int = 0, urgency: str = "normal",
                 telegram: Optional[TelegramService] = None):
        self._timeout = timeout
        self._urgency = urgency
        self._telegram = telegram

    def notify(self, video: Video, channel: Channel) -> bool:
        if not passes_notif_filter(video, channel):
            return True

        delivered = self._show(video, channel)
        if self._telegram is not None:
            delivered = self._telegram.send_video_notification(video, channel) and delivered
        return delivered

    def _show(self, video: Video, channel: Channel) -> bool:
        cmd = ["notify-send", "-u", self._urgency, "-a", "yt-notify"]
        # -t 0 keeps the notification on screen until dismissed
        cmd += ["-t", str(self._timeout * 1000)]
        if channel.icon_path.is_file():
            cmd += ["-i", str(channel.icon_path)]
        cmd += [video.title, render_body(video, channel)]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            print(f"[notify] Couldn't notify; {e}")
            return False

        if result.returncode != 0:
            print(f"[notify] Couldn't notify; notify-send exited {result.returncode}: {result.stderr.strip()}")
            return False
        return True
