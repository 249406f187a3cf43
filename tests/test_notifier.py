"""Tests for webhook notifications."""

from unittest.mock import patch, MagicMock

import requests

from domain import Event, EventType, NotificationStatus
from infrastructure import SlackNotifier
from infrastructure.notifier import build_message


def make_event(**overrides):
    values = dict(
        id="evt-202403150930-abc123",
        project_id="p1",
        project_name="Alpha",
        date="2024-03-15",
        start_time="09:30",
        agenda="- 進捗\n- 課題",
        facilitator_id="m1",
        facilitator_name="Alice",
        facilitator_mention="<@U123>",
    )
    values.update(overrides)
    return Event(**values)


class TestBuildMessage:

    def test_meeting_message(self):
        lines = build_message(make_event()).split("\n")
        assert lines == [
            "*Alpha* のミーティング",
            "日時: 2024-03-15 09:30",
            "ファシリテーター: Alice <@U123>",
            "アジェンダ:",
            "- 進捗",
            "- 課題",
        ]

    def test_shared_event_without_facilitator(self):
        message = build_message(make_event(
            event_type=EventType.SHARED, facilitator_id="", facilitator_name="", facilitator_mention=""
        ))
        assert message.startswith("*Alpha* の共有イベント")
        assert "ファシリテーター" not in message


class TestSlackNotifier:

    def test_not_configured(self):
        with patch("infrastructure.notifier.requests.post") as mock_post:
            assert SlackNotifier("").notify(make_event()) == NotificationStatus.NOT_CONFIGURED
        mock_post.assert_not_called()

    def test_sent(self):
        notifier = SlackNotifier("https://hooks.example.com/x", timeout=3)
        with patch("infrastructure.notifier.requests.post") as mock_post:
            mock_post.return_value = MagicMock(ok=True, status_code=200)
            assert notifier.notify(make_event()) == NotificationStatus.SENT

        args, kwargs = mock_post.call_args
        assert args == ("https://hooks.example.com/x",)
        assert kwargs["timeout"] == 3
        assert kwargs["json"]["text"].startswith("*Alpha*")

    def test_failed(self):
        notifier = SlackNotifier("https://hooks.example.com/x")
        with patch("infrastructure.notifier.requests.post") as mock_post:
            mock_post.return_value = MagicMock(ok=False, status_code=404, text="no_service")
            assert notifier.notify(make_event()) == NotificationStatus.FAILED

    def test_error(self):
        notifier = SlackNotifier("https://hooks.example.com/x")
        with patch("infrastructure.notifier.requests.post", side_effect=requests.Timeout()):
            assert notifier.notify(make_event()) == NotificationStatus.ERROR
