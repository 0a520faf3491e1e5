"""Channel-related data models."""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional


class ChannelKind(str, Enum):
    """How a channel is addressed in its URL."""

    CHANNEL = "channel"  # Direct channel id (UC...)
    USER = "user"        # Legacy username
    C = "c"              # Vanity alias

    @property
    def path_marker(self) -> str:
        return self.value


@dataclass(frozen=True)
class Watermark:
    """The last two notified video ids, newest first."""

    last_id: Optional[str] = None
    second_last_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.last_id is None and self.second_last_id is None

    def matches(self, video_id: str) -> bool:
        """Check whether a video id is one of the remembered ids."""
        return video_id is not None and video_id in (self.last_id, self.second_last_id)

    def to_dict(self) -> dict:
        return {"last_id": self.last_id, "second_last_id": self.second_last_id}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Watermark":
        """Create Watermark from a stored record.

        Raises ValueError when the record is not an object or an id is not
        a string.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"watermark must be an object, got {type(data).__name__}")

        last_id = data.get("last_id")
        second_last_id = data.get("second_last_id")
        for value in (last_id, second_last_id):
            if value is not None and not isinstance(value, str):
                raise ValueError(f"watermark ids must be strings, got {value!r}")
        return cls(last_id=last_id, second_last_id=second_last_id)


@dataclass
class Channel:
    """Represents a tracked YouTube channel."""

    name: str
    channel_id: str
    storage_path: Path
    icon_path: Path
    channel_kind: ChannelKind = ChannelKind.CHANNEL
    filter_keywords: list[str] = field(default_factory=list)
    archive_flag: bool = False
    archive_filter_keywords: Optional[list[str]] = None
    watermark: Watermark = field(default_factory=Watermark)

    @property
    def link(self) -> str:
        """Get YouTube channel URL."""
        return f"https://www.youtube.com/{self.channel_kind.path_marker}/{self.channel_id}"

    @property
    def feed_url(self) -> str:
        """Get the uploads listing the data source walks for candidates."""
        return f"{self.link}/videos"

    def with_watermark(self, watermark: Watermark) -> "Channel":
        """Return a copy of this channel with a new watermark."""
        return replace(self, watermark=watermark)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "channel_id": self.channel_id,
            "channel_kind": self.channel_kind.value,
            "filter_keywords": list(self.filter_keywords),
            "archive_flag": self.archive_flag,
            "archive_filter_keywords": (
                list(self.archive_filter_keywords)
                if self.archive_filter_keywords is not None else None
            ),
            "storage_path": str(self.storage_path),
            "icon_path": str(self.icon_path),
            "watermark": self.watermark.to_dict()
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Channel":
        """Create Channel from a stored record.

        Raises KeyError or ValueError when a required field is missing or
        the channel kind is unknown.
        """
        archive_filters = data.get("archive_filter_keywords")
        return cls(
            name=data["name"],
            channel_id=data["channel_id"],
            channel_kind=ChannelKind(data.get("channel_kind", ChannelKind.CHANNEL.value)),
            filter_keywords=list(data.get("filter_keywords") or []),
            archive_flag=bool(data.get("archive_flag", False)),
            archive_filter_keywords=list(archive_filters) if archive_filters is not None else None,
            storage_path=Path(data["storage_path"]),
            icon_path=Path(data["icon_path"]),
            watermark=Watermark.from_dict(data.get("watermark"))
        )
