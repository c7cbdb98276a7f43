"""
NOVELTY FILTER

Prevents duplicate alerts across polling cycles.

Keeps a bounded, insertion-ordered record of every token identifier seen since
process start. When the record grows past capacity the oldest identifiers are
evicted first, so memory stays flat no matter how long the monitor runs.
Nothing is persisted: a restart forgets all history.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Tuple

from .normalizer import SignalTuple

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000


class NoveltyFilter:
    """
    Tracks seen token identifiers.

    Only the polling loop touches this object, so it carries no lock.
    """

    def __init__(self, config: Dict = None):
        self.config = config or {}

        self.capacity = int(self.config.get('capacity', DEFAULT_CAPACITY))
        if self.capacity <= 0:
            raise ValueError(f"capacity must be positive, got {self.capacity}")

        # token_id -> None, ordered oldest first
        self._seen: "OrderedDict[str, None]" = OrderedDict()

        # Stats
        self.stats = {
            'total_seen': 0,
            'new': 0,
            'duplicates': 0,
            'evicted': 0,
        }

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, token_id: str) -> bool:
        return token_id in self._seen

    def is_seen(self, token_id: str) -> bool:
        return token_id in self._seen

    def classify(self, batch: Iterable[SignalTuple]) -> Tuple[List[SignalTuple], List[bool]]:
        """
        Split a batch into never-seen tuples and record them as seen.

        A token repeated inside one batch counts as new only the first time.

        Args:
            batch: Normalized tuples in upstream order

        Returns:
            (new tuples in input order, one is-new flag per input tuple)
        """
        new_signals = []
        flags = []

        for signal in batch:
            self.stats['total_seen'] += 1
            if signal.token_id in self._seen:
                self.stats['duplicates'] += 1
                flags.append(False)
                continue

            self._seen[signal.token_id] = None
            self.stats['new'] += 1
            new_signals.append(signal)
            flags.append(True)

        evicted = self._evict_overflow()
        if evicted:
            logger.debug(f"[NOVELTY] Evicted {evicted} oldest identifiers (capacity {self.capacity})")

        return new_signals, flags

    def _evict_overflow(self) -> int:
        """Drop oldest entries until size == capacity."""
        evicted = 0
        while len(self._seen) > self.capacity:
            self._seen.popitem(last=False)
            evicted += 1
        self.stats['evicted'] += evicted
        return evicted

    def clear(self):
        """Forget every identifier."""
        self._seen.clear()

    def snapshot(self) -> List[str]:
        """Identifiers oldest first."""
        return list(self._seen.keys())

    def get_stats(self) -> Dict:
        stats = dict(self.stats)
        stats['size'] = len(self._seen)
        stats['capacity'] = self.capacity
        return stats
