"""Flat-file persistence for tracked channels, one JSON record per channel."""

import json
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from ..models.channel import Channel, ChannelKind, Watermark
from .errors import ChannelLookupError, ChannelStoreError, ChannelValidationError, VideoLookupError
from .reconciler import fetch_head_watermark
from .video_source import VideoDataSource

RECORD_SUFFIX = ".json"

# Checked in this order when a URL contains more than one marker
_KIND_PRIORITY = (ChannelKind.CHANNEL, ChannelKind.USER, ChannelKind.C)


def parse_channel_url(url: str) -> tuple[ChannelKind, str]:
    """Extract the channel kind and raw id from a channel URL."""
    segments = urlparse(url.strip()).path.split("/")

    for kind in _KIND_PRIORITY:
        if kind.path_marker not in segments:
            continue
        position = segments.index(kind.path_marker)
        if position + 1 >= len(segments) or not segments[position + 1]:
            raise ChannelValidationError(f"URL has /{kind.path_marker}/ but no id after it: {url}")
        return kind, segments[position + 1]

    raise ChannelValidationError(
        f"URL must contain /channel/, /user/ or /c/ followed by an id: {url}"
    )


class ChannelStore:
    """Reads and writes channel records under a base directory."""

    def __init__(self, base_dir: Path, source: Optional[VideoDataSource] = None):
        self._base_dir = Path(base_dir)
        self._source = source

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def icons_dir(self) -> Path:
        return self._base_dir / "icons"

    def record_path(self, channel_id: str) -> Path:
        return self._base_dir / f"{channel_id}{RECORD_SUFFIX}"

    def icon_path(self, channel_id: str) -> Path:
        return self.icons_dir / f"{channel_id}.png"

    def ensure_dirs(self) -> None:
        """Create the store and icon directories if they are missing."""
        for path in (self._base_dir, self.icons_dir):
            if path.exists():
                if not path.is_dir():
                    raise ChannelStoreError(
                        f"The expected config dir is a file! Please delete it at {path} to continue."
                    )
                continue
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ChannelStoreError(
                    f"Could not create config dir at {path}! Do you have permission? ({e})"
                ) from e

    def create(
        self,
        name: str,
        url: str,
        filters: Optional[list[str]] = None,
        archive_flag: bool = False,
        archive_filters: Optional[list[str]] = None,
    ) -> Channel:
        """Validate and resolve a new channel. Nothing is written to disk."""
        name = (name or "").strip()
        url = (url or "").strip()
        if not name or not url:
            raise ChannelValidationError("Channel name and URL must both be given")

        kind, raw_id = parse_channel_url(url)
        if self._source is None:
            raise ChannelLookupError("No data source configured to verify channels")

        channel_id = raw_id
        if kind is not ChannelKind.CHANNEL:
            alias_url = f"https://www.youtube.com/{kind.path_marker}/{raw_id}/videos"
            try:
                channel_id, _ = self._source.fetch_channel_head(alias_url)
            except VideoLookupError as e:
                raise ChannelLookupError(f"Could not resolve {alias_url} to a channel id: {e}") from e
            print(f"[store] Resolved {kind.path_marker}/{raw_id} to channel/{channel_id}")

        channel = Channel(
            name=name,
            channel_id=channel_id,
            channel_kind=ChannelKind.CHANNEL,
            filter_keywords=_clean_keywords(filters),
            archive_flag=archive_flag,
            archive_filter_keywords=_clean_keywords(archive_filters) if archive_flag else None,
            storage_path=self.record_path(channel_id),
            icon_path=self.icon_path(channel_id)
        )

        try:
            watermark = fetch_head_watermark(self._source, channel.feed_url)
        except VideoLookupError as e:
            raise ChannelLookupError(f"Could not read the uploads of {channel.link}: {e}") from e

        return channel.with_watermark(watermark)

    def save(self, channel: Channel) -> None:
        """Serialize the full record and overwrite its file."""
        try:
            with open(channel.storage_path, "w", encoding="utf-8") as f:
                json.dump(channel.to_dict(), f, indent=2)
        except (OSError, TypeError) as e:
            raise ChannelStoreError(f"Could not write {channel.storage_path}: {e}") from e

    def load(self, path: Path) -> Channel:
        """Read one channel record."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise ChannelStoreError(f"Could not read {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ChannelStoreError(f"Malformed channel record {path}: {e}") from e

        if not isinstance(data, dict):
            raise ChannelStoreError(f"Malformed channel record {path}: not an object")

        try:
            return Channel.from_dict(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise ChannelStoreError(f"Malformed channel record {path}: {e!r}") from e

    def list_saved(self) -> list[Path]:
        """Get every channel record file in the store directory."""
        try:
            entries = list(self._base_dir.iterdir())
        except OSError as e:
            raise ChannelStoreError(f"Could not list {self._base_dir}: {e}") from e
        return sorted(p for p in entries if p.is_file() and p.suffix == RECORD_SUFFIX)

    def load_all(self) -> list[Channel]:
        """Load every saved channel, skipping records that fail to load."""
        channels = []
        for path in self.list_saved():
            try:
                channels.append(self.load(path))
            except ChannelStoreError as e:
                print(f"[store] Skipping channel record: {e}")
        return channels

    def update_watermark(self, channel: Channel, watermark: Watermark) -> Channel:
        """Rewrite a channel's whole record with a new watermark."""
        print(f"[store] {channel.name}: watermark {_fmt(channel.watermark)} -> {_fmt(watermark)}")
        updated = channel.with_watermark(watermark)
        self.save(updated)
        return updated


def _clean_keywords(words: Optional[list[str]]) -> list[str]:
    if not words:
        return []
    return [w.strip() for w in words if w and w.strip()]


def _fmt(watermark: Watermark) -> str:
    return f"({watermark.last_id}, {watermark.second_last_id})"
