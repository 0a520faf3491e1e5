"""Video metadata lookups backed by the yt-dlp command line tool."""

import json
import subprocess
from typing import Optional, Protocol

from ..models.video import Video
from .errors import VideoLookupError


class VideoDataSource(Protocol):
    """Protocol for video metadata lookups."""

    def fetch_by_id(self, video_id: str) -> Video:
        """Get full metadata for one video."""
        ...

    def fetch_channel_head(self, feed_url: str) -> tuple[str, str]:
        """Get (channel_id, newest_video_id) for a channel listing."""
        ...

    def fetch_id_at(self, feed_url: str, index: int) -> str:
        """Get the id of the video at a zero-based position of a listing."""
        ...


class YtDlpDataSource:
    """Data source that shells out to yt-dlp for every lookup."""

    def __init__(self, binary: str = "yt-dlp", timeout: Optional[float] = None):
        self._binary = binary
        self._timeout = timeout

    def fetch_by_id(self, video_id: str) -> Video:
        data = self._dump_json(["--dump-json", f"https://www.youtube.com/watch?v={video_id}"])
        try:
            return Video.from_info_dict(data, video_id=video_id)
        except ValueError as e:
            raise VideoLookupError(str(e)) from e

    def fetch_channel_head(self, feed_url: str) -> tuple[str, str]:
        data = self._dump_json(["--skip-download", "--playlist-end", "1", "--dump-json", feed_url])
        channel_id = data.get("channel_id")
        video_id = data.get("id")
        if not isinstance(channel_id, str) or not channel_id:
            raise VideoLookupError(f"no channel id in listing {feed_url}")
        if not isinstance(video_id, str) or not video_id:
            raise VideoLookupError(f"no video id in listing {feed_url}")
        return channel_id, video_id

    def fetch_id_at(self, feed_url: str, index: int) -> str:
        if index < 0:
            raise VideoLookupError(f"negative playlist index {index}")
        data = self._dump_json([
            "--skip-download", "--playlist-items", str(index + 1), "--dump-json", feed_url
        ])
        video_id = data.get("id")
        if not isinstance(video_id, str) or not video_id:
            raise VideoLookupError(f"no video at index {index} of {feed_url}")
        return video_id

    def _dump_json(self, args: list[str]) -> dict:
        """Run yt-dlp and parse the first JSON document it prints."""
        cmd = [self._binary, *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout
            )
        except FileNotFoundError as e:
            raise VideoLookupError(f"{self._binary} is not installed") from e
        except subprocess.TimeoutExpired as e:
            raise VideoLookupError(f"{self._binary} timed out for {args[-1]}") from e

        line = next((ln for ln in result.stdout.splitlines() if ln.strip()), "")
        if not line:
            stderr = result.stderr.strip().splitlines()
            reason = stderr[-1] if stderr else f"exit status {result.returncode}"
            raise VideoLookupError(f"{self._binary} returned nothing for {args[-1]}: {reason}")

        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise VideoLookupError(f"invalid JSON from {self._binary}: {e}") from e

        if not isinstance(data, dict):
            raise VideoLookupError(f"unexpected JSON from {self._binary}")
        return data
