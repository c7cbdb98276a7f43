"""
BASE SOURCE - Abstract base class for token-launch feeds

Defines the interface every upstream feed implements and the shared aiohttp
request path. Feeds return raw records; the normalizer absorbs shape
differences.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10


class BaseLaunchSource(ABC):
    """
    Abstract base class for launch feeds.

    Transport failures never propagate: requests return None and
    fetch_recent_tokens returns an empty list.
    """

    name = "base"

    def __init__(self, config: Dict = None, session: Optional[aiohttp.ClientSession] = None):
        """
        Args:
            config: Source config (URLs, API keys, timeout)
            session: Optional shared session; one is created lazily otherwise
        """
        self.config = config or {}
        self.timeout_seconds = float(self.config.get('timeout_seconds', DEFAULT_TIMEOUT_SECONDS))
        self.session = session
        self._owns_session = session is None

        self.last_request_time = None
        self.request_count = 0
        self.error_count = 0

    @abstractmethod
    async def fetch_recent_tokens(self, limit: int = 50) -> List[Dict]:
        """
        Fetch the most recently launched tokens, newest first.

        Args:
            limit: Maximum number of records to request

        Returns:
            List of raw token records ([] on any failure)
        """

    async def _ensure_session(self):
        """Ensure aiohttp session exists."""
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True

    async def close(self):
        """Close the aiohttp session if this source created it."""
        if self.session is not None and self._owns_session:
            await self.session.close()
        self.session = None

    def _update_request_stats(self):
        self.last_request_time = datetime.now()
        self.request_count += 1

    async def _get_json(self, url: str, params: Dict = None, headers: Dict = None) -> Optional[Any]:
        """
        GET a JSON document.

        Returns:
            Decoded JSON, or None on HTTP error, timeout or undecodable body
        """
        await self._ensure_session()
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        tag = self.name.upper()

        try:
            async with self.session.get(url, params=params, headers=headers, timeout=timeout) as response:
                self._update_request_stats()

                if response.status == 200:
                    return await response.json(content_type=None)
                if response.status == 429:
                    logger.warning(f"[{tag}] Rate limited (HTTP 429), skipping this cycle")
                else:
                    logger.warning(f"[{tag}] HTTP {response.status}: {url}")
                self.error_count += 1
                return None

        except asyncio.TimeoutError:
            self.error_count += 1
            logger.warning(f"[{tag}] Timeout after {self.timeout_seconds:.0f}s: {url}")
            return None
        except aiohttp.ClientError as e:
            self.error_count += 1
            logger.error(f"[{tag}] Request error: {e}")
            return None
        except ValueError as e:
            # json decode errors subclass ValueError
            self.error_count += 1
            logger.error(f"[{tag}] Malformed response body: {e}")
            return None

    def get_stats(self) -> Dict:
        return {
            'request_count': self.request_count,
            'error_count': self.error_count,
            'last_request': self.last_request_time.isoformat() if self.last_request_time else None,
            'source': self.name,
        }
