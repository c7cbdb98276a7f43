"""
PUMP.FUN API CLIENT

Reads the public pump.fun frontend listing of the latest coin launches.
No API key required. One request per polling cycle.
"""

import logging
from typing import Dict, List

from .base_source import BaseLaunchSource

logger = logging.getLogger(__name__)

DEFAULT_PUMPFUN_API_URL = "https://frontend-api.pump.fun/coins"


class PumpFunAPI(BaseLaunchSource):
    """pump.fun frontend API client."""

    name = "pumpfun"

    def __init__(self, config: Dict = None, session=None):
        super().__init__(config, session)
        self.base_url = self.config.get('pumpfun_api_url', DEFAULT_PUMPFUN_API_URL)

    async def fetch_recent_tokens(self, limit: int = 50) -> List[Dict]:
        params = {
            'limit': limit,
            'offset': 0,
            'sort': 'created_timestamp',
            'order': 'DESC',
        }
        data = await self._get_json(self.base_url, params=params)

        if data is None:
            return []
        if not isinstance(data, list):
            logger.error(f"[PUMPFUN] Invalid response: expected a list, got {type(data).__name__}")
            self.error_count += 1
            return []

        logger.debug(f"[PUMPFUN] Fetched {len(data)} coins")
        return data
