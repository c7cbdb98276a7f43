"""
TREND SCORER

Turns a SignalTuple into a 0-100 trend score.

Four independent sub-scores, each clamped to [0, 100]:
- Volume:    33 * log10(volume / min_volume)     (every 10x adds ~33 pts)
- Liquidity: 33 * log10(liquidity / min_liquidity)
- Holders:   33 * log10(holders / min_holders)
- Age:       piecewise linear, fresh launches score highest

Composite = clamp(sum(sub_score * weight), 0, 100), rounded half-up.
"""

import math
import logging
from dataclasses import dataclass, field, asdict
from typing import Dict

from safe_math import clamp, round_half_up, safe_div
from .normalizer import SignalTuple

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = {
    'volume': 0.4,
    'liquidity': 0.3,
    'holders': 0.2,
    'age': 0.1,
}

LOG_POINTS_PER_DECADE = 33


@dataclass
class ScoreBreakdown:
    """Per-dimension sub-scores, rounded for display only."""
    volume_score: int = 0
    liquidity_score: int = 0
    holder_score: int = 0
    age_score: int = 0


@dataclass
class ScoreResult:
    score: int = 0
    breakdown: ScoreBreakdown = field(default_factory=ScoreBreakdown)

    def to_dict(self) -> Dict:
        return asdict(self)


def log_scale_score(value: float, minimum: float) -> float:
    """
    Logarithmic sub-score of value relative to its configured minimum.

    0 for non-positive values or a non-positive minimum. At or below the
    minimum the max(1, .) guard floors the log term at 0.
    """
    if value is None or value <= 0:
        return 0.0
    ratio = safe_div(value, minimum, default=0.0)
    if ratio <= 0:
        return 0.0
    return clamp(LOG_POINTS_PER_DECADE * math.log10(max(1.0, ratio)))


def age_score(age_seconds: float) -> float:
    """
    Age sub-score, favouring newly created tokens.

    < 1h    : 100 - 20h          (80-100)
    1h - 6h : 80 - 4(h-1)        (60-80)
    6h - 24h: 60 - 2.22(h-6)     (20-60)
    >= 24h  : 20 - 0.5(h-24)     (decays to 0)
    """
    age_hours = age_seconds / 3600

    if age_hours < 1:
        score = 100 - (age_hours * 20)
    elif age_hours < 6:
        score = 80 - ((age_hours - 1) * 4)
    elif age_hours < 24:
        score = 60 - ((age_hours - 6) * 2.22)
    else:
        score = max(0, 20 - ((age_hours - 24) * 0.5))

    return clamp(score)


class TrendScorer:
    """Scores normalized launch signals. Total: never raises on a well-formed tuple."""

    def __init__(self, config: Dict = None):
        self.config = config or {}

        self.min_volume = float(self.config.get('min_volume_threshold', 1000))
        self.min_liquidity = float(self.config.get('min_liquidity_threshold', 5000))
        self.min_holders = float(self.config.get('min_holder_count', 10))

        weights = dict(DEFAULT_WEIGHTS)
        weights.update(self.config.get('weights', {}))
        self.weights = weights

    def volume_score(self, volume: float) -> float:
        return log_scale_score(volume, self.min_volume)

    def liquidity_score(self, liquidity: float) -> float:
        return log_scale_score(liquidity, self.min_liquidity)

    def holder_score(self, holder_count: int) -> float:
        return log_scale_score(holder_count, self.min_holders)

    def age_score(self, age_seconds: float) -> float:
        return age_score(age_seconds)

    def score(self, signal: SignalTuple) -> ScoreResult:
        """
        Calculate the trend score for one token.

        The composite uses unrounded sub-scores; the breakdown is rounded
        separately and is never re-summed.
        """
        volume = self.volume_score(signal.volume_24h)
        liquidity = self.liquidity_score(signal.liquidity)
        holders = self.holder_score(signal.holder_count)
        age = self.age_score(signal.age_seconds)

        weighted = (
            volume * self.weights['volume']
            + liquidity * self.weights['liquidity']
            + holders * self.weights['holders']
            + age * self.weights['age']
        )

        logger.debug(
            f"[SCORER] {signal.symbol}: vol={volume:.1f} liq={liquidity:.1f} "
            f"holders={holders:.1f} age={age:.1f} -> {weighted:.2f}"
        )

        return ScoreResult(
            score=round_half_up(clamp(weighted)),
            breakdown=ScoreBreakdown(
                volume_score=round_half_up(volume),
                liquidity_score=round_half_up(liquidity),
                holder_score=round_half_up(holders),
                age_score=round_half_up(age),
            ),
        )
