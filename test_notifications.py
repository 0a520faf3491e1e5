#!/usr/bin/env python3
"""
Tests for desktop notifications and the Telegram relay.
"""

import subprocess
import sys
from unittest.mock import Mock, patch

import pytest
import requests

from fakes import make_channel, make_video
from src.services.notification_service import DesktopNotificationService, render_body
from src.services.telegram_service import TelegramService


def test_render_body(tmp_path):
    channel = make_channel(tmp_path, name="Cats")
    assert render_body(make_video("v"), channel) == "Cats has uploaded a video"
    assert render_body(make_video("v", is_live=True), channel) == "Cats is live"


def test_notify_send_command(tmp_path):
    channel = make_channel(tmp_path, name="Cats")
    channel.icon_path.parent.mkdir(parents=True)
    channel.icon_path.write_bytes(b"png")
    video = make_video("abc", is_live=True)
    service = DesktopNotificationService(timeout=5, urgency="critical")

    with patch("src.services.notification_service.subprocess.run",
               return_value=subprocess.CompletedProcess([], 0, stdout="", stderr="")) as run:
        assert service.notify(video, channel) is True

    cmd = run.call_args.args[0]
    assert cmd == [
        "notify-send", "-u", "critical", "-a", "yt-notify",
        "-t", "5000",
        "-i", str(channel.icon_path),
        "Video abc", "Cats is live",
    ]


def test_notify_without_icon_never_expires(tmp_path):
    channel = make_channel(tmp_path)
    service = DesktopNotificationService()

    with patch("src.services.notification_service.subprocess.run",
               return_value=subprocess.CompletedProcess([], 0, stdout="", stderr="")) as run:
        service.notify(make_video("abc"), channel)

    cmd = run.call_args.args[0]
    assert cmd[cmd.index("-t") + 1] == "0"
    assert "-i" not in cmd


def test_notify_failures_are_not_raised(tmp_path):
    channel = make_channel(tmp_path)
    service = DesktopNotificationService()

    with patch("src.services.notification_service.subprocess.run",
               side_effect=FileNotFoundError("notify-send")):
        assert service.notify(make_video("abc"), channel) is False

    with patch("src.services.notification_service.subprocess.run",
               return_value=subprocess.CompletedProcess([], 1, stdout="", stderr="no bus")):
        assert service.notify(make_video("abc"), channel) is False


def test_telegram_relay_is_called(tmp_path):
    channel = make_channel(tmp_path)
    telegram = Mock(spec=TelegramService)
    telegram.send_video_notification.return_value = True
    service = DesktopNotificationService(telegram=telegram)
    video = make_video("abc")

    with patch("src.services.notification_service.subprocess.run",
               return_value=subprocess.CompletedProcess([], 0, stdout="", stderr="")):
        assert service.notify(video, channel) is True

    telegram.send_video_notification.assert_called_once_with(video, channel)


def test_telegram_message(tmp_path):
    channel = make_channel(tmp_path, name="Cats")
    service = TelegramService("token", "chat")
    response = Mock()

    with patch("src.services.telegram_service.requests.post", return_value=response) as post:
        assert service.send_video_notification(make_video("abc", is_live=True), channel) is True

    url = post.call_args.args[0]
    data = post.call_args.kwargs["data"]
    assert url == "https://api.telegram.org/bottoken/sendMessage"
    assert data["chat_id"] == "chat"
    assert "*Cats* is live" in data["text"]
    assert "https://www.youtube.com/watch?v=abc" in data["text"]


def test_telegram_errors_return_false(tmp_path):
    service = TelegramService("token", "chat")
    with patch("src.services.telegram_service.requests.post",
               side_effect=requests.ConnectionError("offline")):
        assert service.send_message("hello") is False


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
