
import time
import unittest

from pumpwatch.base_source import BaseLaunchSource
from pumpwatch.integration import ScanPipeline


def coin(mint, minutes_old, volume=0, liquidity=0, holders=0):
    return {
        'mint': mint,
        'name': f"Coin {mint}",
        'symbol': mint.upper(),
        'created_timestamp': int((time.time() - minutes_old * 60) * 1000),
        'volume_24h': volume,
        'liquidity': liquidity,
        'holder_count': holders,
    }


HOT_COIN = coin('hot', 10, volume=100000, liquidity=50000, holders=150)
STALE_COIN = coin('stale', 3 * 24 * 60, volume=1500)
DEAD_COIN = coin('dead', 5)


class FakeSource(BaseLaunchSource):
    name = "fake"

    def __init__(self, batches=None, exc=None):
        super().__init__({}, session=object())
        self.batches = list(batches or [])
        self.exc = exc

    async def fetch_recent_tokens(self, limit: int = 50):
        if self.exc is not None:
            raise self.exc
        return self.batches.pop(0) if self.batches else []


class FakeNotifier:
    def __init__(self, ok=True, novelty=None):
        self.ok = ok
        self.novelty = novelty
        self.sent = []
        self.seen_at_send = []

    async def send_alert_async(self, alert):
        self.sent.append(alert)
        if self.novelty is not None:
            self.seen_at_send.append(self.novelty.snapshot())
        return self.ok


class TestScanPipeline(unittest.IsolatedAsyncioTestCase):

    async def test_alerts_only_on_hot_coin(self):
        source = FakeSource([[HOT_COIN, STALE_COIN, DEAD_COIN]])
        notifier = FakeNotifier()
        pipeline = ScanPipeline(source, notifier, {})

        report = await pipeline.run_cycle()

        self.assertTrue(report.ok)
        self.assertEqual(report.fetched, 3)
        self.assertEqual(report.new, 3)
        self.assertEqual(report.below_threshold, 1)
        self.assertEqual(report.scored, 2)
        self.assertEqual(report.alerts_sent, 1)
        self.assertEqual([a.signal.token_id for a in notifier.sent], ['hot'])
        self.assertGreaterEqual(notifier.sent[0].score_result.score, 50)
        self.assertEqual(notifier.sent[0].signal.source, 'fake')

    async def test_repeat_batch_is_not_alerted_twice(self):
        source = FakeSource([[HOT_COIN], [HOT_COIN]])
        notifier = FakeNotifier()
        pipeline = ScanPipeline(source, notifier, {})

        await pipeline.run_cycle()
        report = await pipeline.run_cycle()

        self.assertEqual(report.new, 0)
        self.assertEqual(len(notifier.sent), 1)
        self.assertEqual(pipeline.get_stats()['pipeline']['cycles'], 2)

    async def test_empty_fetch(self):
        pipeline = ScanPipeline(FakeSource([[]]), FakeNotifier(), {})
        report = await pipeline.run_cycle()

        self.assertTrue(report.ok)
        self.assertEqual(report.fetched, 0)
        self.assertEqual(report.alerts_sent, 0)

    async def test_source_failure_is_recorded(self):
        pipeline = ScanPipeline(FakeSource(exc=RuntimeError("boom")), FakeNotifier(), {})
        report = await pipeline.run_cycle()

        self.assertFalse(report.ok)
        self.assertIn('boom', report.error)
        self.assertEqual(pipeline.get_stats()['pipeline']['failed_cycles'], 1)

    async def test_failed_delivery_counts(self):
        pipeline = ScanPipeline(FakeSource([[HOT_COIN]]), FakeNotifier(ok=False), {})
        report = await pipeline.run_cycle()

        self.assertEqual(report.alerts_sent, 0)
        self.assertEqual(report.alerts_failed, 1)
        self.assertTrue(pipeline.novelty.is_seen('hot'))

    async def test_novelty_set_updated_before_send(self):
        notifier = FakeNotifier()
        pipeline = ScanPipeline(FakeSource([[HOT_COIN, STALE_COIN]]), notifier, {})
        notifier.novelty = pipeline.novelty

        await pipeline.run_cycle()

        self.assertEqual(notifier.seen_at_send, [['hot', 'stale']])

    async def test_threshold_from_config(self):
        pipeline = ScanPipeline(FakeSource([[HOT_COIN]]), FakeNotifier(), {'alert_score_threshold': 90})
        report = await pipeline.run_cycle()

        self.assertEqual(report.scored, 1)
        self.assertEqual(report.alerts_sent, 0)


if __name__ == '__main__':
    unittest.main()
