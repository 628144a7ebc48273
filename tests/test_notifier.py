from datetime import datetime

import pytest
import requests

import notifier
from notifier import NotificationError, format_alert, send_notification


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code


class CallLog(list):
    pass


@pytest.fixture
def post_log(monkeypatch):
    log = CallLog()
    log.status_code = 204

    def fake_post(url, **kwargs):
        log.append((url, kwargs))
        return FakeResponse(log.status_code)

    monkeypatch.setattr(notifier.requests, "post", fake_post)
    return log


def test_format_alert():
    text = format_alert("abc-123", "High disk usage", "Current usage: 96.00 GB",
                        now=datetime(2024, 3, 5, 7, 8, 9))

    assert text == (
        "🚨 Alert for volume abc-123\n"
        "Reason: High disk usage\n"
        "Details: Current usage: 96.00 GB\n"
        "Time: 2024-03-05 07:08:09"
    )


def test_empty_webhook_is_noop(post_log):
    assert send_notification("", "vol", "High disk usage", "details") is None
    assert post_log == []


def test_posts_json_content(post_log):
    send_notification("https://hooks.example/abc", "vol", "High disk usage", "Current usage: 99.10 GB")

    assert len(post_log) == 1
    url, kwargs = post_log[0]
    assert url == "https://hooks.example/abc"
    assert list(kwargs["json"]) == ["content"]
    content = kwargs["json"]["content"]
    assert "Alert for volume vol" in content
    assert "Reason: High disk usage" in content
    assert "Details: Current usage: 99.10 GB" in content


def test_non_204_is_error(post_log):
    post_log.status_code = 200

    with pytest.raises(NotificationError, match="200"):
        send_notification("https://hooks.example/abc", "vol", "High disk usage", "d")


def test_transport_failure_is_error(monkeypatch):
    def fake_post(url, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(notifier.requests, "post", fake_post)

    with pytest.raises(NotificationError, match="connection refused"):
        send_notification("https://hooks.example/abc", "vol", "High disk usage", "d")
