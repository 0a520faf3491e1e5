#!/usr/bin/env python3
"""
Tests for the new-video reconciliation logic.
"""

import sys

from fakes import FakeDataSource, make_channel, make_video
from src.models.channel import Watermark
from src.services.reconciler import (
    SCAN_WINDOW, ReconciliationEngine, fetch_head_watermark, reconcile
)

V1, V2, V3, V4, V5 = (make_video(f"V{i}") for i in range(1, 6))


def test_match_at_first_index_finds_nothing():
    result = reconcile(Watermark("V3", "V2"), [V3, V2, V1])
    assert result.new_videos == ()
    assert result.watermark == Watermark("V3", "V2")
    assert not result.has_new


def test_match_at_third_index():
    result = reconcile(Watermark("V2", "V1"), [V4, V3, V2])
    assert [v.video_id for v in result.new_videos] == ["V4", "V3"]
    assert result.watermark == Watermark("V4", "V3")


def test_second_slot_is_an_accepted_marker():
    # Feed order and upload order can disagree by one position
    result = reconcile(Watermark("V2", "V3"), [V4, V3, V2])
    assert [v.video_id for v in result.new_videos] == ["V4"]
    assert result.watermark == Watermark("V4", "V3")


def test_prefix_before_match_is_new_for_every_position():
    candidates = [V5, V4, V3]
    for k, matched in enumerate(candidates):
        for watermark in (Watermark(matched.video_id, "X"), Watermark("X", matched.video_id)):
            result = reconcile(watermark, candidates)
            assert list(result.new_videos) == candidates[:k]
            if k > 0:
                assert result.watermark.last_id == "V5"
            else:
                assert result.watermark == watermark


def test_no_match_reports_whole_window():
    result = reconcile(Watermark("OLD2", "OLD1"), [V5, V4, V3])
    assert [v.video_id for v in result.new_videos] == ["V5", "V4", "V3"]
    assert result.watermark == Watermark("V5", "V4")


def test_window_bounds_the_scan():
    # V2 and V1 sit past the window and are never looked at
    result = reconcile(Watermark("V1", None), [V5, V4, V3, V2, V1])
    assert len(result.new_videos) == SCAN_WINDOW
    assert result.watermark == Watermark("V5", "V4")


def test_empty_watermark_treats_everything_as_new():
    result = reconcile(Watermark(), [V3, V2, V1])
    assert [v.video_id for v in result.new_videos] == ["V3", "V2", "V1"]
    assert result.watermark == Watermark("V3", "V2")


def test_single_candidate_leaves_second_slot_empty():
    result = reconcile(Watermark(), [V1])
    assert result.watermark == Watermark("V1", None)


def test_failed_lookup_is_skipped_not_new():
    result = reconcile(Watermark("V2", "V1"), [V4, None, V2])
    assert [v.video_id for v in result.new_videos] == ["V4"]
    assert result.watermark == Watermark("V4", None)


def test_failed_first_slot_uses_next_video_as_newest():
    result = reconcile(Watermark("V1", None), [None, V3, V1])
    assert [v.video_id for v in result.new_videos] == ["V3"]
    assert result.watermark == Watermark("V3", None)


def test_fully_failed_scan_changes_nothing():
    watermark = Watermark("V2", "V1")
    result = reconcile(watermark, [None, None, None])
    assert result.new_videos == ()
    assert result.watermark is watermark


def test_reconcile_is_idempotent_on_unchanged_listing():
    first = reconcile(Watermark("V1", None), [V3, V2, V1])
    second = reconcile(first.watermark, [V3, V2, V1])
    third = reconcile(second.watermark, [V3, V2, V1])
    assert second.new_videos == () and third.new_videos == ()
    assert second.watermark == first.watermark == third.watermark


def test_engine_stops_fetching_after_match(tmp_path):
    source = FakeDataSource()
    channel = make_channel(tmp_path, watermark=Watermark("V3", "V2"))
    source.add_listing(channel.feed_url, [V3, V2, V1])

    result = ReconciliationEngine(source).scan(channel)

    assert result.new_videos == ()
    assert source.calls == [
        ("fetch_id_at", channel.feed_url, 0),
        ("fetch_by_id", "V3"),
    ]


def test_engine_treats_lookup_errors_as_absent(tmp_path):
    source = FakeDataSource()
    channel = make_channel(tmp_path, watermark=Watermark("V2", "V1"))
    source.add_listing(channel.feed_url, [V4, V3, V2])
    source.broken_ids.add("V3")

    result = ReconciliationEngine(source).scan(channel)

    assert [v.video_id for v in result.new_videos] == ["V4"]
    assert result.watermark == Watermark("V4", None)


def test_engine_on_empty_listing(tmp_path):
    source = FakeDataSource()
    channel = make_channel(tmp_path, watermark=Watermark("V2", "V1"))

    result = ReconciliationEngine(source).scan(channel)

    assert result.new_videos == ()
    assert result.watermark == Watermark("V2", "V1")


def test_fetch_head_watermark(tmp_path):
    source = FakeDataSource()
    channel = make_channel(tmp_path)
    source.add_listing(channel.feed_url, [V2, V1])
    assert fetch_head_watermark(source, channel.feed_url) == Watermark("V2", "V1")

    source.add_listing(channel.feed_url, [V1])
    assert fetch_head_watermark(source, channel.feed_url) == Watermark("V1", None)


if __name__ == "__main__":
    import pytest
    sys.exit(pytest.main([__file__, "-v"]))
