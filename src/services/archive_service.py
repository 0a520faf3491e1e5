"""Background capture of livestreams with yt-dlp and ffmpeg."""

import re
import subprocess
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from ..models.channel import Channel
from ..models.video import Video

_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')
# Most filesystems cap a single name at 255 bytes
_MAX_NAME_BYTES = 255
_MAX_TITLE_BYTES = 200


def passes_archive_filter(video: Video, channel: Channel) -> bool:
    """Keyword gate for captures. Every stream passes for now."""
    return True


def safe_filename(title: str, max_bytes: int = _MAX_TITLE_BYTES) -> str:
    """Make a title usable as a file name no longer than ``max_bytes`` in UTF-8."""
    cleaned = _UNSAFE_CHARS.sub("_", title).strip().strip(".")
    truncated = cleaned.encode("utf-8")[:max_bytes].decode("utf-8", errors="ignore")
    return truncated.strip() or "untitled"


class ArchiveService:
    """Starts fire-and-forget capture jobs for live videos.

    A job is skipped when its destination file already exists or when a job
    for the same video is still running in this process.
    """

    def __init__(self, archive_dir: Path, ytdlp_binary: str = "yt-dlp",
                 ffmpeg_binary: str = "ffmpeg", executor: Optional[Executor] = None,
                 workers: int = 4):
        self._archive_dir = Path(archive_dir)
        self._ytdlp_binary = ytdlp_binary
        self._ffmpeg_binary = ffmpeg_binary
        self._executor = executor or ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="archive"
        )
        self._jobs: dict[str, Future] = {}
        self._lock = threading.Lock()

    def destination_for(self, video: Video) -> Path:
        """Get the deterministic output path for a video."""
        suffix = f" [{video.video_id}].mp4"
        budget = _MAX_NAME_BYTES - len(suffix.encode("utf-8"))
        return self._archive_dir / f"{safe_filename(video.title, budget)}{suffix}"

    def is_running(self, video_id: str) -> bool:
        with self._lock:
            future = self._jobs.get(video_id)
            return future is not None and not future.done()

    def trigger(self, video: Video, channel: Channel) -> bool:
        """Dispatch a capture job. Returns True when a job was started."""
        if not video.is_live or not passes_archive_filter(video, channel):
            return False

        destination = self.destination_for(video)
        try:
            if destination.exists():
                return False
        except OSError as e:
            print(f"[archive] Could not check {destination}: {e}")
            return False

        if self.is_running(video.video_id):
            return False

        try:
            self._archive_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            print(f"[archive] Could not create {self._archive_dir}: {e}")
            return False

        print(f"[archive] Capturing {channel.name}'s stream {video.video_id} to {destination}")
        future = self._executor.submit(self._capture, video.video_id, destination)
        with self._lock:
            self._jobs[video.video_id] = future
        future.add_done_callback(lambda _f, vid=video.video_id: self._forget(vid))
        return True

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)

    def _forget(self, video_id: str) -> None:
        with self._lock:
            future = self._jobs.get(video_id)
            if future is not None and future.done():
                del self._jobs[video_id]

    def _capture(self, video_id: str, destination: Path) -> int:
        """Resolve the stream URL, then copy the stream to disk."""
        stream_url = self._resolve_stream_url(video_id)
        if not stream_url:
            return 1

        cmd = [
            self._ffmpeg_binary,
            "-i", stream_url,
            "-loglevel", "panic",
            "-c", "copy",
            str(destination)
        ]
        try:
            result = subprocess.run(cmd, check=False)
        except OSError as e:
            print(f"[archive] Could not start {self._ffmpeg_binary}: {e}")
            return 1

        print(f"[archive] Capture of {video_id} finished with exit status {result.returncode}")
        return result.returncode

    def _resolve_stream_url(self, video_id: str) -> Optional[str]:
        cmd = [
            self._ytdlp_binary,
            "-f", "best",
            "-g",
            f"https://www.youtube.com/watch?v={video_id}"
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            print(f"[archive] Could not start {self._ytdlp_binary}: {e}")
            return None

        lines = [ln.strip() for ln in result.stdout.splitlines() if ln.strip()]
        if not lines:
            print(f"[archive] No stream URL for {video_id}: {result.stderr.strip()}")
            return None
        return lines[0]
