#!/usr/bin/env python3
"""
Tests for the command line surface.
"""

import sys
from dataclasses import replace
from pathlib import Path
from unittest.mock import patch

import pytest

from fakes import FakeDataSource, make_video
from src.cli import commands
from src.config.settings import WatcherConfig
from src.models.channel import Watermark
from src.services.channel_store import ChannelStore


def _config(home: Path) -> WatcherConfig:
    with patch.dict("os.environ", {}, clear=True):
        config = WatcherConfig.from_env()
    return replace(config, home_dir=home, archive_dir=home / "archive")


def _answers(*values):
    it = iter(values)
    return lambda _prompt: next(it)


def _store(tmp_path):
    source = FakeDataSource()
    source.add_listing("https://www.youtube.com/channel/UCcats/videos",
                       [make_video("new"), make_video("old")])
    store = ChannelStore(tmp_path, source)
    store.ensure_dirs()
    return store


def test_split_keywords():
    assert commands.split_keywords("") == []
    assert commands.split_keywords("live, music ,,karaoke") == ["live", "music", "karaoke"]


def test_add_channel_saves_record(tmp_path):
    store = _store(tmp_path)
    answers = _answers("Cats", "https://www.youtube.com/channel/UCcats", "meow, purr", "y", "")

    assert commands.add_channel(store, answers) is True

    saved = store.load(tmp_path / "UCcats.json")
    assert saved.name == "Cats"
    assert saved.filter_keywords == ["meow", "purr"]
    assert saved.archive_flag is True
    assert saved.archive_filter_keywords == []
    assert saved.watermark == Watermark("new", "old")


def test_add_channel_rejects_bad_url(tmp_path):
    store = _store(tmp_path)
    answers = _answers("Cats", "https://www.youtube.com/watch?v=abc", "", "n")

    assert commands.add_channel(store, answers) is False
    assert store.list_saved() == []


def test_no_flags_starts_daemon(tmp_path):
    with patch.object(commands, "WatcherService") as watcher:
        commands.run([], _config(tmp_path))
    watcher.return_value.start.assert_called_once()
    assert (tmp_path / "icons").is_dir()


def test_dump_does_not_start_daemon(tmp_path, capsys):
    config = _config(tmp_path)
    store = _store(tmp_path)
    store.save(store.create("Cats", "https://www.youtube.com/channel/UCcats"))

    with patch.object(commands, "WatcherService") as watcher:
        commands.run(["--dump"], config)

    watcher.assert_not_called()
    assert "UCcats" in capsys.readouterr().out


def test_archive_flag_runs_archive_loop(tmp_path):
    with patch.object(commands, "WatcherService") as watcher:
        commands.run(["--archive"], _config(tmp_path))
    watcher.return_value.run_archive.assert_called_once()
    watcher.return_value.start.assert_not_called()


def test_remove_and_edit_only_log_intent(tmp_path, capsys):
    with patch.object(commands, "WatcherService") as watcher:
        commands.run(["-r", "-e"], _config(tmp_path), input_fn=_answers("UCone", "UCtwo"))

    out = capsys.readouterr().out
    assert "Eventually, I will remove the channel with id UCone" in out
    assert "Eventually, I will edit the channel with id UCtwo" in out
    watcher.assert_not_called()


def test_bootstrap_failure_exits(tmp_path):
    blocker = tmp_path / "home"
    blocker.write_text("")
    with pytest.raises(SystemExit) as exc:
        commands.run(["--dump"], _config(blocker))
    assert exc.value.code == 1


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
