"""
DataForSEO API Service
Fetches Google SERP results including AI Overview (AIO) content
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

STATUS_OK = 20000


class DataForSEOError(Exception):
    """The provider rejected a request or returned no result"""


@dataclass
class FetchOutcome:
    keyword: str
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class DataForSEOService:
    """
    Service to interact with the DataForSEO SERP API for Google results
    including asynchronously loaded AI Overviews
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        timeout: float = 120.0,
        depth: int = 10,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.depth = depth

    async def fetch_keyword(
        self,
        keyword: str,
        location_code: str,
        language_code: str,
        client: Optional[httpx.AsyncClient] = None,
    ) -> Dict[str, Any]:
        """
        Fetch the live advanced SERP for one keyword.

        Args:
            keyword: Search query
            location_code: DataForSEO location code (e.g. "2840" for US)
            language_code: Language code (e.g. "en")
            client: Shared client for batch calls

        Returns:
            The first task result ({keyword, items, ...})

        Raises:
            DataForSEOError: On HTTP or provider-level failure
        """
        payload = [{
            "keyword": keyword,
            "location_code": int(location_code),
            "language_code": language_code,
            "depth": self.depth,
            "group_organic_results": True,
            "load_async_ai_overview": True,
        }]
        headers = {
            "Authorization": self.api_key,
            "Content-Type": "application/json",
        }

        if client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as own_client:
                response = await own_client.post(self.api_url, headers=headers, json=payload)
        else:
            response = await client.post(self.api_url, headers=headers, json=payload)

        if response.status_code != 200:
            raise DataForSEOError(f"DataForSEO API error: {response.status_code} {response.reason_phrase}")

        data = response.json()
        if not isinstance(data, dict):
            raise DataForSEOError(f"Unexpected DataForSEO response: {type(data).__name__}")
        if data.get("status_code") != STATUS_OK:
            raise DataForSEOError(f"DataForSEO error: {data.get('status_message')}")

        try:
            result = data["tasks"][0]["result"][0]
        except (KeyError, IndexError, TypeError):
            result = None

        if not result or not isinstance(result, dict):
            raise DataForSEOError("No result returned from DataForSEO")

        return result

    async def fetch_keywords_batch(
        self,
        keywords: List[str],
        location_code: str,
        language_code: str,
        batch_size: int = 50,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> List[FetchOutcome]:
        """
        Fetch many keywords, at most `batch_size` requests in flight.

        A failing keyword is reported in its FetchOutcome and does not stop
        the rest of the batch.
        """
        outcomes: List[FetchOutcome] = []
        completed = 0

        async def fetch_one(keyword: str, client: httpx.AsyncClient) -> FetchOutcome:
            try:
                result = await self.fetch_keyword(keyword, location_code, language_code, client=client)
                return FetchOutcome(keyword=keyword, result=result)
            except (DataForSEOError, httpx.HTTPError, ValueError) as e:
                logger.warning(f"Fetch failed for keyword '{keyword}': {e}")
                return FetchOutcome(keyword=keyword, error=str(e) or type(e).__name__)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for start in range(0, len(keywords), batch_size):
                batch = keywords[start:start + batch_size]
                outcomes.extend(await asyncio.gather(*(fetch_one(kw, client) for kw in batch)))

                completed += len(batch)
                logger.info(f"Fetched {completed}/{len(keywords)} keywords")
                if on_progress:
                    on_progress(completed, len(keywords))

        return outcomes
