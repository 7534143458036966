"""Telegram notification adapter."""

import asyncio
import logging

import telegramify_markdown
from telegram import Bot

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """
    Sends notifications as Telegram messages.

    Implements Notifier protocol. Delivery failures are logged, never raised.
    """

    def __init__(self, bot_token: str, chat_ids: list[int]):
        if not bot_token:
            raise ValueError(
                "TELEGRAM_BOT_TOKEN not configured. "
                "Get a token from @BotFather on Telegram and add it to dayplan.conf"
            )
        self.bot_token = bot_token
        self.chat_ids = chat_ids

    def notify(self, title: str, body: str) -> None:
        if not self.chat_ids:
            logger.warning("No TELEGRAM_CHAT_IDS configured - notification dropped")
            return
        text = telegramify_markdown.markdownify(f"**{title}**\n\n{body}")
        try:
            asyncio.run(self._send(text))
        except Exception as e:
            logger.error(f"Failed to send Telegram notification: {e}")

    async def _send(self, text: str) -> None:
        bot = Bot(self.bot_token)
        async with bot:
            for chat_id in self.chat_ids:
                try:
                    await bot.send_message(chat_id=chat_id, text=text, parse_mode="MarkdownV2")
                except Exception as e:
                    logger.error(f"Failed to send notification to chat {chat_id}: {e}")
