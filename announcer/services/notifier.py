"""
Discord webhook notifier.

Posts plain-text announcements through a discord.py ``Webhook`` bound to
the process-wide aiohttp session.
"""

import aiohttp
import discord

from announcer.constants import MessageConstants
from announcer.utils.exceptions import ConfigError, NotifyError
from announcer.utils.logger import setup_logger

logger = setup_logger(__name__)


class WebhookNotifier:
    """Sends announcement text to a Discord webhook."""

    def __init__(self, webhook_url: str, session: aiohttp.ClientSession):
        try:
            self.webhook = discord.Webhook.from_url(webhook_url, session=session)
        except ValueError as e:
            raise ConfigError('WEBHOOK_URL', 'is not a valid Discord webhook URL') from e
        self.logger = logger

    async def send(self, text: str):
        """Send one message; raises NotifyError if Discord did not accept it"""
        if len(text) > MessageConstants.MAX_MESSAGE_LENGTH:
            text = text[:MessageConstants.MAX_MESSAGE_LENGTH - 3] + "..."

        try:
            await self.webhook.send(
                content=text,
                allowed_mentions=discord.AllowedMentions.none()
            )
        except discord.HTTPException as e:
            raise NotifyError(f"HTTP {e.status}: {e.text}") from e
        except aiohttp.ClientError as e:
            raise NotifyError(f"{type(e).__name__}: {e}") from e

        self.logger.debug(f"Delivered webhook message: {text}")
