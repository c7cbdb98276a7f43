"""
Alert formatting for new-launch notifications.

Builds a structured payload from a scored token and renders it as a
Telegram Markdown message.
"""
from datetime import datetime, timezone
from typing import Dict, Optional

from pumpwatch.filters import AlertData

BOT_FOOTER = "PumpWatch - Pump.fun Monitor"
DEFAULT_DESCRIPTION = "New meme coin detected!"


def format_number(num: Optional[float]) -> str:
    """
    Format large numbers with K, M, B suffixes.

    Examples:
        >>> format_number(1_250_000)
        '1.25M'
        >>> format_number(999)
        '999.00'
    """
    num = num or 0
    if num >= 1_000_000_000:
        return f"{num / 1_000_000_000:.2f}B"
    if num >= 1_000_000:
        return f"{num / 1_000_000:.2f}M"
    if num >= 1_000:
        return f"{num / 1_000:.2f}K"
    return f"{num:.2f}"


def format_age(age_seconds: int) -> str:
    """Human readable age: '2d 3h', '4h 12m', '37m' or '45s'."""
    age_seconds = int(age_seconds)
    minutes = age_seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{age_seconds}s"


def get_score_tier(score: int) -> str:
    if score >= 80:
        return "HOT"
    if score >= 60:
        return "WARM"
    if score >= 40:
        return "MODERATE"
    return "LOW"


def get_score_emoji(score: int) -> str:
    if score >= 80:
        return "🔥🔥🔥"
    if score >= 60:
        return "🔥🔥"
    if score >= 40:
        return "🔥"
    return "📊"


TIER_EMOJI = {
    "HOT": "🟢",
    "WARM": "🟡",
    "MODERATE": "🟠",
    "LOW": "🔴",
}


def escape_markdown(text: str) -> str:
    """Escape Telegram (legacy) Markdown control characters."""
    for ch in ('\\', '_', '*', '`', '['):
        text = text.replace(ch, '\\' + ch)
    return text


def build_alert_payload(alert: AlertData) -> Dict:
    """
    Structured alert payload: token identity, score + breakdown, formatted
    signal magnitudes, contract address and timestamp.
    """
    signal = alert.signal
    result = alert.score_result
    breakdown = result.breakdown

    return {
        'title': f"{signal.name} ({signal.symbol})",
        'description': signal.description or DEFAULT_DESCRIPTION,
        'score': result.score,
        'tier': get_score_tier(result.score),
        'score_emoji': get_score_emoji(result.score),
        'breakdown': {
            'volume': breakdown.volume_score,
            'liquidity': breakdown.liquidity_score,
            'holders': breakdown.holder_score,
            'age': breakdown.age_score,
        },
        'age': format_age(signal.age_seconds),
        'holders': signal.holder_count,
        'volume_24h': f"${format_number(signal.volume_24h)}",
        'liquidity': f"${format_number(signal.liquidity)}",
        'market_cap': f"${format_number(signal.market_cap)}",
        'token_id': signal.token_id,
        'image_uri': signal.image_uri or None,
        'source': signal.source,
        'timestamp': datetime.fromtimestamp(alert.timestamp, tz=timezone.utc).isoformat(),
    }


def format_alert_message(alert: AlertData) -> str:
    """Render the payload as a Telegram Markdown message."""
    p = build_alert_payload(alert)
    b = p['breakdown']
    tier_emoji = TIER_EMOJI.get(p['tier'], "⚪")

    return f"""🚀 *{escape_markdown(p['title'])}*
_{escape_markdown(p['description'])}_

{tier_emoji} *Trend Score:* *{p['score']}/100* {p['score_emoji']}

📊 *Metrics:*
• Age: {p['age']}
• Holders: {p['holders']}
• 24h Volume: {p['volume_24h']}
• Liquidity: {p['liquidity']}
• Market Cap: {p['market_cap']}

🔍 *Score Breakdown:*
Volume: {b['volume']} | Liquidity: {b['liquidity']} | Holders: {b['holders']} | Age: {b['age']}

🔗 *Contract Address:*
`{p['token_id']}`

_{BOT_FOOTER} • {p['timestamp']}_
"""


def format_startup_message(cfg: Dict, dry_run: bool = False) -> str:
    """Startup notice with the effective source, interval and threshold."""
    mode = " (dry run)" if dry_run else ""
    return f"""🚀 *PUMPWATCH STARTED*{mode}

*Source:* {escape_markdown(cfg['upstream_source'])}
*Poll interval:* {cfg['poll_interval']:.0f}s
*Alert threshold:* {cfg['alert_score_threshold']}/100
*Time:* {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}
*Status:* Monitoring active
"""


def format_shutdown_message(stats: Dict) -> str:
    """Shutdown notice with the cumulative pipeline counters."""
    return f"""🛑 *PUMPWATCH STOPPED*

*Cycles:* {stats.get('cycles', 0)} ({stats.get('failed_cycles', 0)} failed)
*New tokens:* {stats.get('total_new', 0)}
*Alerts sent:* {stats.get('alerts_sent', 0)}
*Time:* {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}
"""
