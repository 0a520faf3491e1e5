"""Decides which of a channel's newest videos are new since the last poll.

The scan looks at no more than ``SCAN_WINDOW`` candidates, newest first, and
stops at the first one whose id is in the channel's watermark. Anything
scanned before that point is new. If more than ``SCAN_WINDOW`` videos were
published between two ticks the older ones are never reported.
"""

from dataclasses import dataclass
from itertools import islice
from typing import Iterable, Iterator, Optional

from ..models.channel import Channel, Watermark
from ..models.video import Video
from .errors import VideoLookupError
from .video_source import VideoDataSource

SCAN_WINDOW = 3


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of reconciling one channel."""

    new_videos: tuple[Video, ...]
    watermark: Watermark

    @property
    def has_new(self) -> bool:
        return bool(self.new_videos)


def reconcile(watermark: Watermark, candidates: Iterable[Optional[Video]]) -> ReconcileResult:
    """Compare newest-first candidates against a watermark.

    ``None`` marks a slot whose lookup failed: it is skipped and never
    counted as new. The candidate iterable is consumed lazily, so nothing
    past the first watermark match is fetched.
    """
    new_videos: list[Video] = []
    second_id: Optional[str] = None

    for index, video in enumerate(islice(candidates, SCAN_WINDOW)):
        if video is None:
            continue
        if index == 1:
            second_id = video.video_id
        if watermark.matches(video.video_id):
            break
        new_videos.append(video)

    if not new_videos:
        return ReconcileResult(new_videos=(), watermark=watermark)

    newest_id = new_videos[0].video_id
    if second_id == newest_id:
        second_id = None

    return ReconcileResult(
        new_videos=tuple(new_videos),
        watermark=Watermark(last_id=newest_id, second_last_id=second_id)
    )


def fetch_head_watermark(source: VideoDataSource, feed_url: str) -> Watermark:
    """Build a watermark from the two newest ids of a listing.

    The newest id is required; the second is left empty when the listing
    has only one video or its lookup fails.
    """
    last_id = source.fetch_id_at(feed_url, 0)
    try:
        second_id: Optional[str] = source.fetch_id_at(feed_url, 1)
    except VideoLookupError:
        second_id = None
    return Watermark(last_id=last_id, second_last_id=second_id)


class ReconciliationEngine:
    """Runs ``reconcile`` for a channel against a live data source."""

    def __init__(self, source: VideoDataSource):
        self._source = source

    def scan(self, channel: Channel) -> ReconcileResult:
        """Reconcile a channel's current listing with its watermark."""
        return reconcile(channel.watermark, self._candidates(channel))

    def _candidates(self, channel: Channel) -> Iterator[Optional[Video]]:
        for index in range(SCAN_WINDOW):
            try:
                video_id = self._source.fetch_id_at(channel.feed_url, index)
                yield self._source.fetch_by_id(video_id)
            except VideoLookupError as e:
                print(f"[lookup] {channel.name}: no video at index {index} ({e})")
                yield None
