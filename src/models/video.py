"""Video-related data models."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Video:
    """Represents a YouTube video as reported by the data source."""

    video_id: str
    title: str
    description: str = ""
    is_live: bool = False
    tags: Optional[tuple[str, ...]] = None

    @property
    def link(self) -> str:
        """Get YouTube watch URL."""
        return f"https://www.youtube.com/watch?v={self.video_id}"

    def to_dict(self) -> dict:
        """Convert to dictionary for display and relays."""
        return {
            "video_id": self.video_id,
            "title": self.title,
            "description": self.description,
            "is_live": self.is_live,
            "tags": list(self.tags) if self.tags is not None else None,
            "link": self.link
        }

    @classmethod
    def from_info_dict(cls, data: dict, video_id: Optional[str] = None) -> "Video":
        """Create Video from a yt-dlp ``--dump-json`` document.

        Title and description are required; a missing live flag means the
        video is not live.
        """
        vid = video_id or data.get("id")
        title = data.get("title")
        description = data.get("description")

        if not vid or not isinstance(vid, str):
            raise ValueError("info dict has no video id")
        if not isinstance(title, str):
            raise ValueError(f"info dict for {vid} has no title")
        if not isinstance(description, str):
            raise ValueError(f"info dict for {vid} has no description")

        raw_tags = data.get("tags")
        tags = None
        if isinstance(raw_tags, list):
            tags = tuple(str(tag) for tag in raw_tags)

        return cls(
            video_id=vid,
            title=title,
            description=description,
            is_live=data.get("is_live") is True,
            tags=tags
        )
