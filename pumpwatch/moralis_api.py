"""
MORALIS PUMP.FUN CLIENT

Reads newly created pump.fun tokens through the Moralis Solana gateway.
Requires MORALIS_API_KEY. The response cursor is not consumed: each cycle
only looks at the newest page.
"""

import logging
from typing import Dict, List

from .base_source import BaseLaunchSource

logger = logging.getLogger(__name__)

DEFAULT_MORALIS_BASE_URL = "https://solana-gateway.moralis.io"
NEW_TOKENS_PATH = "/token/mainnet/exchange/pumpfun/new"


class MoralisPumpFunAPI(BaseLaunchSource):
    """Moralis pump.fun new-token listing client."""

    name = "moralis"

    def __init__(self, config: Dict = None, session=None):
        super().__init__(config, session)
        self.base_url = self.config.get('moralis_base_url', DEFAULT_MORALIS_BASE_URL).rstrip('/')
        self.api_key = (self.config.get('moralis_api_key') or '').strip()

        if not self.api_key:
            logger.warning("[MORALIS] MORALIS_API_KEY not set - requests will be rejected")

    async def fetch_recent_tokens(self, limit: int = 50) -> List[Dict]:
        url = f"{self.base_url}{NEW_TOKENS_PATH}"
        headers = {
            "accept": "application/json",
            "X-API-Key": self.api_key,
        }
        data = await self._get_json(url, params={'limit': limit}, headers=headers)

        if data is None:
            return []

        result = data.get('result') if isinstance(data, dict) else None
        if not isinstance(result, list):
            logger.error("[MORALIS] Invalid response: missing 'result' list")
            self.error_count += 1
            return []

        logger.debug(f"[MORALIS] Fetched {len(result)} tokens")
        return result
