"""
Telegram Notifier - delivers launch alerts to a Telegram chat.

Delivery failures are logged and reported as False; they never stop the
polling loop.
"""
import asyncio
import logging
from typing import Optional

from telegram import Bot
from telegram.error import TelegramError

from alert_formatter import format_alert_message
from pumpwatch.filters import AlertData

logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT_SECONDS = 10


class TelegramNotifier:
    """
    Sends formatted alerts with python-telegram-bot.

    In dry-run mode messages are logged instead of sent and no credentials
    are needed.
    """

    def __init__(self, bot_token: str = "", chat_id: str = "", dry_run: bool = False,
                 timeout_seconds: float = DEFAULT_SEND_TIMEOUT_SECONDS,
                 bot: Optional[Bot] = None):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.dry_run = dry_run
        self.timeout_seconds = timeout_seconds
        self.enabled = dry_run or bool(bot_token and chat_id)

        if bot is not None:
            self.bot = bot
        elif self.bot_token and not dry_run:
            self.bot = Bot(token=self.bot_token)
        else:
            self.bot = None

        self._initialized = False
        self.sent_count = 0
        self.failed_count = 0

    async def start(self):
        """Initialize the bot's HTTP client."""
        if self.bot is not None and not self._initialized:
            await self.bot.initialize()
            self._initialized = True

    async def close(self):
        if self.bot is not None and self._initialized:
            await self.bot.shutdown()
            self._initialized = False

    async def send_message_async(self, message: str) -> bool:
        """Send a raw Markdown message."""
        if not self.enabled:
            return False

        if self.dry_run or self.bot is None:
            logger.info(f"[TELEGRAM][DRY-RUN]\n{message}")
            return True

        try:
            await asyncio.wait_for(
                self.bot.send_message(
                    chat_id=self.chat_id,
                    text=message,
                    parse_mode='Markdown',
                ),
                timeout=self.timeout_seconds,
            )
            return True
        except asyncio.TimeoutError:
            logger.error(f"[TELEGRAM] Send timed out after {self.timeout_seconds:.0f}s")
            return False
        except TelegramError as e:
            logger.error(f"[TELEGRAM] Send error: {e}")
            return False

    async def send_alert_async(self, alert: AlertData) -> bool:
        """Format and deliver one alert."""
        message = format_alert_message(alert)
        ok = await self.send_message_async(message)

        signal = alert.signal
        if ok:
            self.sent_count += 1
            logger.info(f"✅ Alert sent for {signal.symbol} (Score: {alert.score_result.score})")
        else:
            self.failed_count += 1
            logger.warning(f"❌ Alert not delivered for {signal.symbol} ({signal.token_id})")
        return ok
