"""
Runtime configuration for the pump.fun launch monitor.

Values come from the environment (a local .env file is loaded on import),
with an optional pumpwatch.yaml overlay for the scoring section. Environment
variables always win over the YAML file.
"""
import os
import logging
import yaml
from pathlib import Path
from typing import Dict, Mapping, Optional
from dotenv import load_dotenv

load_dotenv()
logger = logging.getLogger(__name__)

CONFIG_YAML_PATH = Path(__file__).parent / "pumpwatch.yaml"

DEFAULT_PUMPFUN_API_URL = "https://frontend-api.pump.fun/coins"
DEFAULT_MORALIS_BASE_URL = "https://solana-gateway.moralis.io"

SUPPORTED_SOURCES = ("pumpfun", "moralis")

# Weights should sum to 1.0 (drift beyond this only warns)
WEIGHT_SUM_TOLERANCE = 0.01

DEFAULTS = {
    "upstream_source": "pumpfun",
    "pumpfun_api_url": DEFAULT_PUMPFUN_API_URL,
    "moralis_base_url": DEFAULT_MORALIS_BASE_URL,
    "fetch_limit": 50,
    "request_timeout_seconds": 10.0,
    "poll_interval": 60.0,
    "seen_capacity": 1000,
    "sol_price_usd": 180.0,
    "log_level": "INFO",

    # Alert threshold
    "alert_score_threshold": 50,

    # Thresholds for trend scoring
    "min_volume_threshold": 1000.0,
    "min_liquidity_threshold": 5000.0,
    "min_holder_count": 10,

    # Weights for trend score calculation
    "volume_weight": 0.4,
    "liquidity_weight": 0.3,
    "holder_weight": 0.2,
    "age_weight": 0.1,
}

# config key -> (env var, parser)
ENV_VARS = {
    "telegram_bot_token": ("TELEGRAM_BOT_TOKEN", str),
    "telegram_chat_id": ("TELEGRAM_CHAT_ID", str),
    "upstream_source": ("UPSTREAM_SOURCE", str),
    "pumpfun_api_url": ("PUMPFUN_API_URL", str),
    "moralis_api_key": ("MORALIS_API_KEY", str),
    "moralis_base_url": ("MORALIS_BASE_URL", str),
    "fetch_limit": ("FETCH_LIMIT", int),
    "request_timeout_seconds": ("REQUEST_TIMEOUT_SECONDS", float),
    "poll_interval": ("POLL_INTERVAL", float),
    "seen_capacity": ("SEEN_CAPACITY", int),
    "sol_price_usd": ("SOL_PRICE_USD", float),
    "log_level": ("LOG_LEVEL", str),
    "alert_score_threshold": ("ALERT_SCORE_THRESHOLD", int),
    "min_volume_threshold": ("MIN_VOLUME_THRESHOLD", float),
    "min_liquidity_threshold": ("MIN_LIQUIDITY_THRESHOLD", float),
    "min_holder_count": ("MIN_HOLDER_COUNT", int),
    "volume_weight": ("VOLUME_GROWTH_WEIGHT", float),
    "liquidity_weight": ("LIQUIDITY_WEIGHT", float),
    "holder_weight": ("HOLDER_WEIGHT", float),
    "age_weight": ("AGE_WEIGHT", float),
}

WEIGHT_KEYS = ("volume_weight", "liquidity_weight", "holder_weight", "age_weight")


class ConfigError(Exception):
    """Raised when required configuration is missing or malformed."""


def load_yaml_overrides(path: Optional[Path] = None) -> Dict:
    """Load the optional YAML overlay. A missing file yields an empty dict."""
    path = Path(path) if path else CONFIG_YAML_PATH
    if not path.exists():
        return {}
    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def _parse(key: str, raw, parser):
    if parser is str:
        return str(raw).strip()
    try:
        return parser(raw)
    except (TypeError, ValueError):
        env_name = ENV_VARS[key][0]
        raise ConfigError(f"{env_name} must be a {parser.__name__}, got {raw!r}")


def load_config(env: Optional[Mapping[str, str]] = None,
                yaml_path: Optional[Path] = None) -> Dict:
    """
    Build the effective configuration dict.

    Precedence: environment > YAML overlay > DEFAULTS.

    Args:
        env: Environment mapping (defaults to os.environ)
        yaml_path: Overlay path (defaults to pumpwatch.yaml beside this file)

    Returns:
        Flat configuration dict keyed like DEFAULTS
    """
    env = os.environ if env is None else env
    cfg = dict(DEFAULTS)
    cfg["telegram_bot_token"] = ""
    cfg["telegram_chat_id"] = ""
    cfg["moralis_api_key"] = ""

    for key, value in load_yaml_overrides(yaml_path).items():
        if key not in ENV_VARS:
            logger.warning(f"[CONFIG] Ignoring unknown key in YAML overlay: {key}")
            continue
        cfg[key] = _parse(key, value, ENV_VARS[key][1])

    for key, (env_name, parser) in ENV_VARS.items():
        raw = env.get(env_name)
        if raw is None or str(raw).strip() == "":
            continue
        cfg[key] = _parse(key, raw, parser)

    cfg["upstream_source"] = cfg["upstream_source"].lower()
    return cfg


def weights_sum(cfg: Dict) -> float:
    return sum(float(cfg[k]) for k in WEIGHT_KEYS)


def validate_config(cfg: Dict, require_telegram: bool = True) -> Dict:
    """
    Validate configuration at startup.

    Raises:
        ConfigError: missing credentials, unknown source or out-of-range values

    Returns:
        The same dict, for chaining
    """
    if require_telegram:
        if not cfg.get("telegram_bot_token"):
            raise ConfigError("TELEGRAM_BOT_TOKEN is not set in .env file")
        if not cfg.get("telegram_chat_id"):
            raise ConfigError("TELEGRAM_CHAT_ID is not set in .env file")

    source = cfg.get("upstream_source")
    if source not in SUPPORTED_SOURCES:
        raise ConfigError(
            f"UPSTREAM_SOURCE must be one of {', '.join(SUPPORTED_SOURCES)}, got {source!r}"
        )
    if source == "moralis" and not cfg.get("moralis_api_key"):
        raise ConfigError("MORALIS_API_KEY is not set in .env file (required for UPSTREAM_SOURCE=moralis)")

    if cfg["poll_interval"] <= 0:
        raise ConfigError("POLL_INTERVAL must be positive")
    if cfg["fetch_limit"] <= 0:
        raise ConfigError("FETCH_LIMIT must be positive")
    if cfg["seen_capacity"] <= 0:
        raise ConfigError("SEEN_CAPACITY must be positive")
    if cfg["request_timeout_seconds"] <= 0:
        raise ConfigError("REQUEST_TIMEOUT_SECONDS must be positive")

    total = weights_sum(cfg)
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        logger.warning(f"[CONFIG] Weights sum to {total:.3f}, expected 1.0")

    return cfg


def get_scoring_config(cfg: Dict) -> Dict:
    """Scoring section consumed by TrendScorer and AlertFilter."""
    return {
        "min_volume_threshold": cfg["min_volume_threshold"],
        "min_liquidity_threshold": cfg["min_liquidity_threshold"],
        "min_holder_count": cfg["min_holder_count"],
        "alert_score_threshold": cfg["alert_score_threshold"],
        "weights": {
            "volume": cfg["volume_weight"],
            "liquidity": cfg["liquidity_weight"],
            "holders": cfg["holder_weight"],
            "age": cfg["age_weight"],
        },
    }


def get_source_config(cfg: Dict) -> Dict:
    """Upstream client section consumed by the launch sources."""
    return {
        "pumpfun_api_url": cfg["pumpfun_api_url"],
        "moralis_base_url": cfg["moralis_base_url"],
        "moralis_api_key": cfg.get("moralis_api_key", ""),
        "timeout_seconds": cfg["request_timeout_seconds"],
    }
