"""
SCAN PIPELINE

One polling cycle, start to finish:

  launch feed (pump.fun / Moralis)
          ↓
  SIGNAL NORMALIZER
          ↓
  NOVELTY FILTER        (drops already-seen tokens)
          ↓
  ADMISSION GATE        (cheap reject)
          ↓
  TREND SCORER
          ↓
  ALERT DECISION
          ↓
  TELEGRAM NOTIFIER

Every new token is handled sequentially. The novelty set is finalized before
the first notification goes out.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from config import DEFAULTS, get_scoring_config
from .base_source import BaseLaunchSource
from .deduplicator import NoveltyFilter
from .filters import AlertData, AlertFilter
from .normalizer import SignalNormalizer
from .trend_scorer import TrendScorer

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    started_at: float = 0.0
    duration: float = 0.0
    fetched: int = 0
    normalized: int = 0
    new: int = 0
    below_threshold: int = 0
    scored: int = 0
    alerts_sent: int = 0
    alerts_failed: int = 0
    error: Optional[str] = None
    alerts: List[AlertData] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


class ScanPipeline:
    """
    Wires the launch feed, scoring components and notifier into one cycle.

    Usage:
        pipeline = ScanPipeline(source, notifier, config)
        report = await pipeline.run_cycle()
    """

    def __init__(self, source: BaseLaunchSource, notifier, config: Dict = None):
        """
        Args:
            source: Launch feed returning raw records
            notifier: Object with async send_alert_async(AlertData) -> bool
            config: Flat config dict (see config.load_config)
        """
        self.config = config or {}
        self.source = source
        self.notifier = notifier
        self.fetch_limit = int(self.config.get('fetch_limit', 50))

        scoring = get_scoring_config({**DEFAULTS, **self.config})
        self.normalizer = SignalNormalizer({'sol_price_usd': self.config.get('sol_price_usd', 180.0)})
        self.novelty = NoveltyFilter({'capacity': self.config.get('seen_capacity', 1000)})
        self.scorer = TrendScorer(scoring)
        self.filter = AlertFilter(scoring)

        # Cumulative stats
        self.stats = {
            'cycles': 0,
            'failed_cycles': 0,
            'total_fetched': 0,
            'total_new': 0,
            'total_scored': 0,
            'alerts_sent': 0,
            'alerts_failed': 0,
        }

    async def run_cycle(self) -> CycleReport:
        """Run one cycle. Never raises; failures are recorded on the report."""
        report = CycleReport(started_at=time.time())
        try:
            await self._run(report)
        except Exception as e:
            report.error = f"{type(e).__name__}: {e}"
            logger.exception(f"[PIPELINE] Error during scan: {e}")
        finally:
            report.duration = time.time() - report.started_at
            self._record(report)
        return report

    async def _run(self, report: CycleReport):
        raw_records = await self.source.fetch_recent_tokens(limit=self.fetch_limit)
        report.fetched = len(raw_records)
        if not raw_records:
            logger.info("No coins found in current scan.")
            return

        signals = self.normalizer.normalize_batch(raw_records, source=self.source.name)
        report.normalized = len(signals)

        new_signals, _ = self.novelty.classify(signals)
        report.new = len(new_signals)
        if not new_signals:
            logger.info("No new coins detected.")
            return

        logger.info(f"📊 Found {len(new_signals)} new coin(s)")

        pending = []
        for signal in new_signals:
            if not self.filter.meets_thresholds(signal):
                report.below_threshold += 1
                logger.info(f"⏭️  Skipping {signal.symbol} - below thresholds")
                continue

            result = self.scorer.score(signal)
            report.scored += 1
            logger.info(f"📈 {signal.name} ({signal.symbol}) - Score: {result.score}/100")

            if self.filter.should_alert(result):
                pending.append(AlertData(signal=signal, score_result=result))
            else:
                logger.info("   Score too low, no alert sent.")

        for alert in pending:
            report.alerts.append(alert)
            if await self.notifier.send_alert_async(alert):
                report.alerts_sent += 1
            else:
                report.alerts_failed += 1

    def _record(self, report: CycleReport):
        self.stats['cycles'] += 1
        if not report.ok:
            self.stats['failed_cycles'] += 1
        self.stats['total_fetched'] += report.fetched
        self.stats['total_new'] += report.new
        self.stats['total_scored'] += report.scored
        self.stats['alerts_sent'] += report.alerts_sent
        self.stats['alerts_failed'] += report.alerts_failed

    def get_stats(self) -> Dict:
        return {
            'pipeline': dict(self.stats),
            'normalizer': self.normalizer.get_stats(),
            'novelty': self.novelty.get_stats(),
            'filter': self.filter.get_stats(),
            'source': self.source.get_stats(),
        }
