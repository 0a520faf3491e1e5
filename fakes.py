"""In-memory stand-ins for the yt-dlp data source, shared by the tests."""

from pathlib import Path
from typing import Optional

from src.models.channel import Channel, Watermark
from src.models.video import Video
from src.services.errors import VideoLookupError


def make_video(video_id: str, is_live: bool = False) -> Video:
    return Video(
        video_id=video_id,
        title=f"Video {video_id}",
        description=f"Description of {video_id}",
        is_live=is_live,
        tags=("test",)
    )


def make_channel(base_dir: Path, channel_id: str = "UCtest", name: str = "Test Channel",
                 watermark: Optional[Watermark] = None, archive_flag: bool = False) -> Channel:
    return Channel(
        name=name,
        channel_id=channel_id,
        storage_path=Path(base_dir) / f"{channel_id}.json",
        icon_path=Path(base_dir) / "icons" / f"{channel_id}.png",
        archive_flag=archive_flag,
        watermark=watermark or Watermark()
    )


class FakeDataSource:
    """Serves listings and videos from dictionaries and records every call."""

    def __init__(self):
        self.listings: dict[str, list[str]] = {}
        self.videos: dict[str, Video] = {}
        self.heads: dict[str, str] = {}
        self.broken_ids: set[str] = set()
        self.calls: list[tuple] = []

    def add_listing(self, feed_url: str, videos: list[Video]) -> None:
        self.listings[feed_url] = [v.video_id for v in videos]
        for video in videos:
            self.videos[video.video_id] = video

    def fetch_by_id(self, video_id: str) -> Video:
        self.calls.append(("fetch_by_id", video_id))
        if video_id in self.broken_ids or video_id not in self.videos:
            raise VideoLookupError(f"no metadata for {video_id}")
        return self.videos[video_id]

    def fetch_channel_head(self, feed_url: str) -> tuple[str, str]:
        self.calls.append(("fetch_channel_head", feed_url))
        if feed_url not in self.heads:
            raise VideoLookupError(f"unknown channel {feed_url}")
        channel_id = self.heads[feed_url]
        ids = self.listings.get(f"https://www.youtube.com/channel/{channel_id}/videos", [])
        if not ids:
            raise VideoLookupError(f"channel {channel_id} has no videos")
        return channel_id, ids[0]

    def fetch_id_at(self, feed_url: str, index: int) -> str:
        self.calls.append(("fetch_id_at", feed_url, index))
        ids = self.listings.get(feed_url, [])
        if index >= len(ids):
            raise VideoLookupError(f"no video at index {index}")
        return ids[index]
