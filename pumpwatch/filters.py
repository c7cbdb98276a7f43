"""
ADMISSION GATE & ALERT DECISION

- meets_thresholds: cheap pre-score reject. A token passes if ANY of volume,
  liquidity or holder count reaches its configured minimum.
- should_alert: composite score >= alert threshold.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Dict

from .normalizer import SignalTuple
from .trend_scorer import ScoreResult

logger = logging.getLogger(__name__)


@dataclass
class AlertData:
    """A scored token that cleared the alert threshold."""
    signal: SignalTuple
    score_result: ScoreResult
    timestamp: float = field(default_factory=time.time)


class AlertFilter:
    """Stateless apart from counters."""

    def __init__(self, config: Dict = None):
        self.config = config or {}

        self.min_volume = float(self.config.get('min_volume_threshold', 1000))
        self.min_liquidity = float(self.config.get('min_liquidity_threshold', 5000))
        self.min_holders = int(self.config.get('min_holder_count', 10))
        self.alert_threshold = int(self.config.get('alert_score_threshold', 50))

        # Stats
        self.stats = {
            'gate_passed': 0,
            'gate_rejected': 0,
            'alerts': 0,
            'below_alert_threshold': 0,
        }

    def meets_thresholds(self, signal: SignalTuple) -> bool:
        passed = (
            signal.volume_24h >= self.min_volume
            or signal.liquidity >= self.min_liquidity
            or signal.holder_count >= self.min_holders
        )
        if passed:
            self.stats['gate_passed'] += 1
        else:
            self.stats['gate_rejected'] += 1
            logger.debug(
                f"[GATE] {signal.symbol} below all minimums "
                f"(vol=${signal.volume_24h:,.0f}, liq=${signal.liquidity:,.0f}, holders={signal.holder_count})"
            )
        return passed

    def should_alert(self, result: ScoreResult) -> bool:
        if result.score >= self.alert_threshold:
            self.stats['alerts'] += 1
            return True
        self.stats['below_alert_threshold'] += 1
        return False

    def get_stats(self) -> Dict:
        return dict(self.stats)
