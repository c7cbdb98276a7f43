
import unittest

from pumpwatch.filters import AlertFilter
from pumpwatch.normalizer import SignalTuple
from pumpwatch.trend_scorer import ScoreResult


class TestAdmissionGate(unittest.TestCase):

    def setUp(self):
        self.filter = AlertFilter({
            'min_volume_threshold': 1000,
            'min_liquidity_threshold': 5000,
            'min_holder_count': 10,
        })

    def test_holders_alone_pass(self):
        signal = SignalTuple(token_id='h', volume_24h=0, liquidity=0, holder_count=10)
        self.assertTrue(self.filter.meets_thresholds(signal))

    def test_volume_alone_passes(self):
        signal = SignalTuple(token_id='v', volume_24h=1000, liquidity=0, holder_count=0)
        self.assertTrue(self.filter.meets_thresholds(signal))

    def test_liquidity_alone_passes(self):
        signal = SignalTuple(token_id='l', volume_24h=0, liquidity=5000, holder_count=0)
        self.assertTrue(self.filter.meets_thresholds(signal))

    def test_all_below_rejected(self):
        signal = SignalTuple(token_id='dead', volume_24h=999, liquidity=4999, holder_count=9)
        self.assertFalse(self.filter.meets_thresholds(signal))

        stats = self.filter.get_stats()
        self.assertEqual(stats['gate_rejected'], 1)
        self.assertEqual(stats['gate_passed'], 0)


class TestAlertDecision(unittest.TestCase):

    def test_default_threshold(self):
        alert_filter = AlertFilter()
        self.assertTrue(alert_filter.should_alert(ScoreResult(score=50)))
        self.assertTrue(alert_filter.should_alert(ScoreResult(score=100)))
        self.assertFalse(alert_filter.should_alert(ScoreResult(score=49)))

    def test_configured_threshold(self):
        alert_filter = AlertFilter({'alert_score_threshold': 75})
        self.assertFalse(alert_filter.should_alert(ScoreResult(score=74)))
        self.assertTrue(alert_filter.should_alert(ScoreResult(score=75)))
        self.assertEqual(alert_filter.get_stats()['alerts'], 1)
        self.assertEqual(alert_filter.get_stats()['below_alert_threshold'], 1)


if __name__ == '__main__':
    unittest.main()
