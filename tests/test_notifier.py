# tests/test_notifier.py

"""Tests for the Discord webhook notifier."""

from types import SimpleNamespace

import aiohttp
import discord
import pytest
from announcer.services.notifier import WebhookNotifier
from announcer.utils.exceptions import ConfigError, NotifyError

WEBHOOK_URL = "https://discord.com/api/webhooks/123456789012345678/" + "a1B2c3D4e5" * 7


class StubWebhook:
    """Records send() calls, or raises the configured error."""

    def __init__(self, error: Exception = None):
        self.error = error
        self.sent = []

    async def send(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.sent.append(kwargs)


@pytest.fixture
async def http_session():
    session = aiohttp.ClientSession()
    yield session
    await session.close()


def make_notifier(http_session, webhook: StubWebhook) -> WebhookNotifier:
    notifier = WebhookNotifier(WEBHOOK_URL, http_session)
    notifier.webhook = webhook
    return notifier


async def test_send_disables_mentions(http_session):
    webhook = StubWebhook()

    await make_notifier(http_session, webhook).send("First blood for **Baby Web** goes to **@everyone**!")

    assert webhook.sent[0]["content"] == "First blood for **Baby Web** goes to **@everyone**!"
    mentions = webhook.sent[0]["allowed_mentions"]
    assert mentions.everyone is False
    assert mentions.users is False
    assert mentions.roles is False


async def test_long_message_is_truncated(http_session):
    webhook = StubWebhook()

    await make_notifier(http_session, webhook).send("x" * 2100)

    content = webhook.sent[0]["content"]
    assert len(content) == 2000
    assert content.endswith("...")


async def test_http_error_becomes_notify_error(http_session):
    response = SimpleNamespace(status=500, reason="Internal Server Error")
    notifier = make_notifier(http_session, StubWebhook(discord.HTTPException(response, "boom")))

    with pytest.raises(NotifyError) as exc_info:
        await notifier.send("hello")
    assert "HTTP 500: boom" in str(exc_info.value)


async def test_connection_error_becomes_notify_error(http_session):
    notifier = make_notifier(http_session, StubWebhook(aiohttp.ClientConnectionError("connection reset")))

    with pytest.raises(NotifyError):
        await notifier.send("hello")


async def test_invalid_webhook_url_is_config_error(http_session):
    with pytest.raises(ConfigError) as exc_info:
        WebhookNotifier("not-a-url", http_session)
    assert exc_info.value.setting == "WEBHOOK_URL"
