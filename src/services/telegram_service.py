"""Telegram relay for new-video notifications."""

import requests

from ..models.channel import Channel
from ..models.video import Video


class TelegramService:
    """Service for relaying notifications to a Telegram chat."""

    def __init__(self, bot_token: str, chat_id: str):
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._base_url = f"https://api.telegram.org/bot{bot_token}"

    def send_message(self, text: str) -> bool:
        """Send a text message."""
        url = f"{self._base_url}/sendMessage"
        data = {
            "chat_id": self._chat_id,
            "text": text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": True
        }

        try:
            response = requests.post(url, data=data, timeout=15)
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            print(f"[telegram] Error sending message: {e}")
            return False

    def send_video_notification(self, video: Video, channel: Channel) -> bool:
        """Send notification for a newly detected video."""
        if video.is_live:
            headline = f"🔴 *{channel.name}* is live"
        else:
            headline = f"📺 *{channel.name}* has uploaded a video"

        message = f"{headline}\n{video.title}\n{video.link}"
        return self.send_message(message)
