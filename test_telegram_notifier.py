
import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock

from telegram.error import TelegramError

from telegram_notifier import TelegramNotifier
from test_alert_formatter import sample_alert


class TestTelegramNotifier(unittest.IsolatedAsyncioTestCase):

    def _notifier(self, **kwargs):
        bot = MagicMock()
        bot.send_message = AsyncMock()
        bot.initialize = AsyncMock()
        bot.shutdown = AsyncMock()
        notifier = TelegramNotifier(bot_token='123:abc', chat_id='-100', bot=bot, **kwargs)
        return notifier, bot

    async def test_sends_markdown_message(self):
        notifier, bot = self._notifier()
        ok = await notifier.send_alert_async(sample_alert())

        self.assertTrue(ok)
        self.assertEqual(notifier.sent_count, 1)
        kwargs = bot.send_message.call_args.kwargs
        self.assertEqual(kwargs['chat_id'], '-100')
        self.assertEqual(kwargs['parse_mode'], 'Markdown')
        self.assertIn('DTMOON', kwargs['text'])

    async def test_telegram_error_is_reported_not_raised(self):
        notifier, bot = self._notifier()
        bot.send_message.side_effect = TelegramError("chat not found")

        ok = await notifier.send_alert_async(sample_alert())

        self.assertFalse(ok)
        self.assertEqual(notifier.failed_count, 1)

    async def test_send_timeout(self):
        notifier, bot = self._notifier(timeout_seconds=0.01)

        async def slow_send(**kwargs):
            await asyncio.sleep(1)

        bot.send_message.side_effect = slow_send
        self.assertFalse(await notifier.send_message_async("hello"))

    async def test_dry_run_logs_instead_of_sending(self):
        notifier = TelegramNotifier(dry_run=True)
        self.assertIsNone(notifier.bot)

        with self.assertLogs('telegram_notifier', level='INFO') as logs:
            ok = await notifier.send_alert_async(sample_alert())

        self.assertTrue(ok)
        self.assertTrue(any('DRY-RUN' in line for line in logs.output))

    async def test_disabled_without_credentials(self):
        notifier = TelegramNotifier()
        self.assertFalse(notifier.enabled)
        self.assertFalse(await notifier.send_message_async("hello"))

    async def test_start_and_close(self):
        notifier, bot = self._notifier()
        await notifier.start()
        await notifier.start()
        await notifier.close()

        bot.initialize.assert_awaited_once()
        bot.shutdown.assert_awaited_once()


if __name__ == '__main__':
    unittest.main()
