"""
SIGNAL NORMALIZER

Converts raw token records from different launch feeds (pump.fun frontend API,
Moralis pump.fun listings, DexScreener pairs) into one SignalTuple so the
trend scorer receives consistent data regardless of source.

Each logical attribute has an ordered list of extraction strategies. The first
strategy that yields a present, parseable, non-empty value wins. A broken field
degrades to its default, it never drops the rest of the batch.
"""

import time
import math
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from safe_math import safe_float, safe_int

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"
UNKNOWN_SYMBOL = "N/A"

LAMPORTS_PER_SOL = 1_000_000_000

# Epoch values above this are milliseconds (1e12 s is ~33,000 years out)
EPOCH_MS_CUTOFF = 1e12


@dataclass
class SignalTuple:
    """Normalized per-token record consumed by scoring."""
    token_id: str
    name: str = UNKNOWN_NAME
    symbol: str = UNKNOWN_SYMBOL
    created_at: float = 0.0          # epoch seconds
    age_seconds: int = 0             # derived at observation time
    volume_24h: float = 0.0
    liquidity: float = 0.0
    holder_count: int = 0
    market_cap: Optional[float] = None
    price_change_24h: Optional[float] = None
    description: str = ""
    image_uri: str = ""
    source: str = ""

    @property
    def age_hours(self) -> float:
        return self.age_seconds / 3600

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class FieldStrategy:
    """One way of reading an attribute: a dotted path plus optional transform."""
    name: str
    path: str
    transform: Optional[Callable[[Any, Dict], Any]] = None

    def extract(self, raw: Dict, context: Dict) -> Any:
        value = _dig(raw, self.path)
        if value is None:
            return None
        if isinstance(value, str) and not value.strip():
            return None
        if self.transform is not None:
            return self.transform(value, context)
        return value


def _dig(record: Any, path: str) -> Any:
    """Walk a dotted path through nested dicts. Missing keys yield None."""
    current = record
    for part in path.split('.'):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def _lamports_to_usd(value: Any, context: Dict) -> Optional[float]:
    lamports = safe_float(value, default=None)
    if lamports is None:
        return None
    return lamports / LAMPORTS_PER_SOL * context.get('sol_price_usd', 0.0)


def parse_timestamp(value: Any) -> Optional[float]:
    """
    Parse a creation timestamp into epoch seconds.

    Accepts epoch seconds, epoch milliseconds (numeric or numeric string) and
    ISO-8601 date strings ("2024-05-01T12:00:00.000Z"). Naive dates are UTC.
    """
    if value is None or isinstance(value, bool):
        return None

    numeric = safe_float(value, default=None)
    if numeric is not None:
        if numeric <= 0:
            return None
        return numeric / 1000 if numeric > EPOCH_MS_CUTOFF else numeric

    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.timestamp()

    return None


# ============================================================
# PRECEDENCE TABLE
# ============================================================

FIELD_STRATEGIES: Dict[str, Tuple[FieldStrategy, ...]] = {
    'token_id': (
        FieldStrategy('pumpfun_mint', 'mint'),
        FieldStrategy('moralis_token_address', 'tokenAddress'),
        FieldStrategy('address', 'address'),
        FieldStrategy('dexscreener_base_token', 'baseToken.address'),
    ),
    'name': (
        FieldStrategy('name', 'name'),
        FieldStrategy('dexscreener_base_token', 'baseToken.name'),
    ),
    'symbol': (
        FieldStrategy('symbol', 'symbol'),
        FieldStrategy('dexscreener_base_token', 'baseToken.symbol'),
    ),
    'created_at': (
        FieldStrategy('epoch', 'created_timestamp'),
        FieldStrategy('date_string', 'createdAt'),
        FieldStrategy('date_string_snake', 'created_at'),
        FieldStrategy('dexscreener_pair_created', 'pairCreatedAt'),
        FieldStrategy('nested_block_timestamp', 'block.timestamp'),
        FieldStrategy('block_timestamp', 'blockTimestamp'),
    ),
    'volume_24h': (
        FieldStrategy('volume_24h', 'volume_24h'),
        FieldStrategy('volume24h', 'volume24h'),
        FieldStrategy('nested_h24', 'volume.h24'),
        FieldStrategy('moralis_volume', 'volumeUsd24h'),
        # pump.fun listings carry no volume field
        FieldStrategy('pumpfun_market_cap_proxy', 'usd_market_cap'),
    ),
    'liquidity': (
        FieldStrategy('liquidity', 'liquidity'),
        FieldStrategy('nested_usd', 'liquidity.usd'),
        FieldStrategy('liquidity_usd', 'liquidityUsd'),
        FieldStrategy('pumpfun_virtual_reserves', 'virtual_sol_reserves', _lamports_to_usd),
    ),
    'holder_count': (
        FieldStrategy('holder_count', 'holder_count'),
        FieldStrategy('holders', 'holders'),
        FieldStrategy('holder_count_camel', 'holderCount'),
        FieldStrategy('nested_total', 'holders.total'),
    ),
    'market_cap': (
        FieldStrategy('pumpfun_market_cap', 'usd_market_cap'),
        FieldStrategy('market_cap', 'marketCap'),
        FieldStrategy('fdv', 'fullyDilutedValuation'),
        FieldStrategy('dexscreener_fdv', 'fdv'),
    ),
    'price_change_24h': (
        FieldStrategy('price_change_24h', 'price_change_24h'),
        FieldStrategy('price_change_camel', 'priceChange24h'),
        FieldStrategy('nested_h24', 'priceChange.h24'),
    ),
    'description': (
        FieldStrategy('description', 'description'),
    ),
    'image_uri': (
        FieldStrategy('image_uri', 'image_uri'),
        FieldStrategy('image', 'image'),
        FieldStrategy('logo', 'logo'),
        FieldStrategy('dexscreener_info', 'info.imageUrl'),
    ),
}


class SignalNormalizer:
    """
    Normalizes raw launch records into SignalTuple.

    The precedence table can be replaced per instance, which keeps provider
    quirks testable in isolation.
    """

    def __init__(self, config: Dict = None,
                 strategies: Dict[str, Sequence[FieldStrategy]] = None):
        self.config = config or {}
        self.strategies = strategies or FIELD_STRATEGIES
        self.context = {
            'sol_price_usd': safe_float(self.config.get('sol_price_usd', 180.0), default=0.0),
        }
        self.stats = {
            'normalized': 0,
            'skipped_no_id': 0,
            'skipped_invalid': 0,
        }

    def _first(self, attribute: str, raw: Dict, parse: Callable[[Any], Any]) -> Tuple[Any, Optional[str]]:
        """Return (parsed value, strategy name) for the first usable strategy."""
        for strategy in self.strategies.get(attribute, ()):
            try:
                value = strategy.extract(raw, self.context)
            except (TypeError, ValueError, AttributeError) as e:
                logger.debug(f"[NORMALIZER] {attribute}/{strategy.name} failed: {e}")
                continue
            if value is None:
                continue
            parsed = parse(value)
            if parsed is None:
                continue
            return parsed, strategy.name
        return None, None

    def _text(self, attribute: str, raw: Dict, default: str) -> str:
        value, _ = self._first(attribute, raw, lambda v: str(v).strip() or None)
        return value if value is not None else default

    def _number(self, attribute: str, raw: Dict, default: Optional[float] = 0.0) -> Optional[float]:
        value, _ = self._first(attribute, raw, lambda v: safe_float(v, default=None))
        return value if value is not None else default

    def normalize(self, raw: Dict, now: float = None, source: str = "") -> Optional[SignalTuple]:
        """
        Normalize one raw record.

        Args:
            raw: Raw record from an upstream feed
            now: Observation time (epoch seconds), defaults to time.time()
            source: Feed identifier copied onto the tuple

        Returns:
            SignalTuple, or None when the record has no usable identifier
        """
        if not isinstance(raw, dict):
            self.stats['skipped_invalid'] += 1
            logger.debug(f"[NORMALIZER] Skipping non-object record: {type(raw).__name__}")
            return None

        now = time.time() if now is None else now

        token_id = self._text('token_id', raw, "")
        if not token_id:
            self.stats['skipped_no_id'] += 1
            logger.debug("[NORMALIZER] Skipping record without token identifier")
            return None

        created_at, created_via = self._first('created_at', raw, parse_timestamp)
        if created_at is None:
            created_at = now
        # Clock skew / future-dated launches count as brand new
        age_seconds = max(0, int(math.floor(now - created_at)))

        holders = self._number('holder_count', raw, default=0.0)

        signal = SignalTuple(
            token_id=token_id,
            name=self._text('name', raw, UNKNOWN_NAME),
            symbol=self._text('symbol', raw, UNKNOWN_SYMBOL),
            created_at=created_at,
            age_seconds=age_seconds,
            volume_24h=max(0.0, self._number('volume_24h', raw)),
            liquidity=max(0.0, self._number('liquidity', raw)),
            holder_count=max(0, safe_int(holders)),
            market_cap=self._number('market_cap', raw, default=None),
            price_change_24h=self._number('price_change_24h', raw, default=None),
            description=self._text('description', raw, ""),
            image_uri=self._text('image_uri', raw, ""),
            source=source,
        )
        self.stats['normalized'] += 1
        logger.debug(
            f"[NORMALIZER] {signal.symbol} {token_id[:8]}... age={age_seconds}s "
            f"(created via {created_via or 'observation time'})"
        )
        return signal

    def normalize_batch(self, records: Iterable[Dict], now: float = None,
                        source: str = "") -> List[SignalTuple]:
        """Normalize a batch with one shared observation time, skipping unusable records."""
        now = time.time() if now is None else now
        signals = []
        for raw in records or []:
            signal = self.normalize(raw, now=now, source=source)
            if signal is not None:
                signals.append(signal)
        return signals

    def get_stats(self) -> Dict:
        return dict(self.stats)
