"""Main watcher service: the poll loop and the archive-only loop."""

import time
from datetime import datetime
from enum import Enum
from typing import Callable, Optional
from croniter import croniter

from ..config.settings import WatcherConfig
from ..models.channel import Channel
from .archive_service import ArchiveService
from .channel_store import ChannelStore
from .errors import ChannelStoreError, VideoLookupError
from .notification_service import DesktopNotificationService, NotificationSink
from .reconciler import ReconciliationEngine, fetch_head_watermark
from .telegram_service import TelegramService
from .video_source import VideoDataSource, YtDlpDataSource


class PollState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"


class WatcherService:
    """Polls every saved channel on a schedule and acts on new videos."""

    def __init__(
        self,
        config: WatcherConfig,
        store: Optional[ChannelStore] = None,
        source: Optional[VideoDataSource] = None,
        notifier: Optional[NotificationSink] = None,
        archiver: Optional[ArchiveService] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._config = config
        self._source = source or YtDlpDataSource(config.ytdlp_binary, config.lookup_timeout)
        self._store = store or ChannelStore(config.home_dir, self._source)
        self._engine = ReconciliationEngine(self._source)
        self._sleep = sleep
        self._clock = clock

        if notifier is None:
            telegram = None
            if config.telegram_enabled:
                telegram = TelegramService(config.telegram_bot_token, config.telegram_chat_id)
            notifier = DesktopNotificationService(
                timeout=config.notify_timeout,
                urgency=config.notify_urgency,
                telegram=telegram
            )
        self._notifier = notifier

        self._archiver = archiver or ArchiveService(
            config.archive_dir,
            ytdlp_binary=config.ytdlp_binary,
            ffmpeg_binary=config.ffmpeg_binary,
            workers=config.archive_workers
        )
        self._cron: Optional[croniter] = None
        self.state = PollState.IDLE

    def start(self) -> None:
        """Run the poll loop until the process is stopped."""
        print("yt-notify watcher starting…")
        print(f"HOME={self._config.home_dir}, "
              f"POLL_INTERVAL={self._config.poll_interval}, "
              f"POLL_CRON={self._config.poll_cron}, "
              f"RESYNC_ON_START={self._config.resync_on_start}")

        try:
            if self._config.resync_on_start:
                self.resync_watermarks()

            while True:
                self.poll_once()
                self._wait_for_next_tick()
        finally:
            self._archiver.shutdown(wait=False)

    def run_archive(self) -> None:
        """Run the archive-only loop until the process is stopped."""
        print(f"yt-notify archiver starting, saving to {self._config.archive_dir}…")
        try:
            while True:
                self.archive_once()
                self._wait_for_next_tick()
        finally:
            self._archiver.shutdown(wait=False)

    def poll_once(self) -> int:
        """Run one tick over every saved channel. Returns the new video count."""
        self.state = PollState.SCANNING
        found = 0
        try:
            for channel in self._store.load_all():
                found += self._process_channel(channel)
        finally:
            self.state = PollState.IDLE

        if found == 0:
            print("[poll] Tick completed. No new videos found.")
        else:
            print(f"[poll] Tick completed. {found} new video{'s' if found > 1 else ''}.")
        return found

    def archive_once(self) -> int:
        """Start captures for archive-flagged channels that are live right now."""
        started = 0
        for channel in self._store.load_all():
            if not channel.archive_flag:
                continue

            try:
                video_id = self._source.fetch_id_at(channel.feed_url, 0)
                video = self._source.fetch_by_id(video_id)
            except VideoLookupError as e:
                print(f"[archive] {channel.name}: could not read newest video ({e})")
                continue

            if video.is_live and self._archiver.trigger(video, channel):
                started += 1
        return started

    def resync_watermarks(self) -> None:
        """Move every watermark to the channel's current head without notifying."""
        print("[poll] Re-initializing channel watermarks…")
        for channel in self._store.load_all():
            try:
                watermark = fetch_head_watermark(self._source, channel.feed_url)
            except VideoLookupError as e:
                print(f"[poll] Could not re-initialize channel {channel.name}; using latest ids "
                      f"{channel.watermark.last_id} and {channel.watermark.second_last_id} ({e})")
                continue

            if watermark != channel.watermark:
                try:
                    self._store.update_watermark(channel, watermark)
                except ChannelStoreError as e:
                    print(f"[poll] {e}")

    def _process_channel(self, channel: Channel) -> int:
        result = self._engine.scan(channel)
        if not result.has_new:
            return 0

        for video in result.new_videos:
            kind = "live" if video.is_live else "upload"
            print(f"[poll] New {kind} from {channel.name}: {video.title} ({video.video_id})")
            self._notifier.notify(video, channel)
            if channel.archive_flag and video.is_live:
                self._archiver.trigger(video, channel)

        try:
            self._store.update_watermark(channel, result.watermark)
        except ChannelStoreError as e:
            print(f"[poll] {e}")
        return len(result.new_videos)

    def _wait_for_next_tick(self) -> None:
        if not self._config.poll_cron:
            self._sleep(self._config.poll_interval)
            return

        if self._cron is None:
            self._cron = croniter(self._config.poll_cron, self._clock())

        next_poll = self._cron.get_next(datetime)
        print(f"[poll] Next poll scheduled at: {next_poll.strftime('%Y-%m-%d %H:%M:%S')}")

        # Calculate sleep time until next execution
        sleep_seconds = (next_poll - self._clock()).total_seconds()
        if sleep_seconds > 0:
            self._sleep(sleep_seconds)
