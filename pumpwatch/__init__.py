"""
PUMPWATCH MODULE

Polls a token-launch feed, drops tokens already seen, scores the rest on a
0-100 trend scale and alerts on the hot ones.

Architecture:
  pump.fun / Moralis feed
          ↓
  SIGNAL NORMALIZER
          ↓
  NOVELTY FILTER
          ↓
  ADMISSION GATE → TREND SCORER → ALERT DECISION
          ↓
  TELEGRAM
"""

from .base_source import BaseLaunchSource
from .pumpfun_api import PumpFunAPI
from .moralis_api import MoralisPumpFunAPI
from .normalizer import SignalNormalizer, SignalTuple
from .deduplicator import NoveltyFilter
from .trend_scorer import TrendScorer, ScoreResult, ScoreBreakdown
from .filters import AlertData, AlertFilter
from .scheduler import PollScheduler, LoopState
from .integration import ScanPipeline, CycleReport

__all__ = [
    'BaseLaunchSource',
    'PumpFunAPI',
    'MoralisPumpFunAPI',
    'SignalNormalizer',
    'SignalTuple',
    'NoveltyFilter',
    'TrendScorer',
    'ScoreResult',
    'ScoreBreakdown',
    'AlertData',
    'AlertFilter',
    'PollScheduler',
    'LoopState',
    'ScanPipeline',
    'CycleReport',
]
