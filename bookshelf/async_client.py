"""Async HTTP client for non-blocking searches."""
import asyncio
import httpx
from typing import Optional, Dict, Any
import logging

from bookshelf.client import build_search_url

logger = logging.getLogger(__name__)


class AsyncGoogleBooksClient:
    """Async client for book searches."""
    
    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: int = 10,
        max_concurrent: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.
        
        Args:
            api_key: Optional API key
            timeout: Request timeout
            max_concurrent: Maximum concurrent requests
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.timeout = timeout
        self.semaphore = asyncio.Semaphore(max_concurrent)
        
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)
    
    async def search(
        self,
        term: str,
        max_results: int = 10,
        start_index: int = 0
    ) -> Optional[Dict[str, Any]]:
        """
        Search for books asynchronously.
        
        Args:
            term: Escaped search term
            max_results: Max results
            start_index: Pagination offset
            
        Returns:
            API response or None
        """
        url = build_search_url(term, max_results, start_index, self.api_key)
        
        async with self.semaphore:
            try:
                logger.info(f"Async request: {term} (index={start_index})")
                response = await self.client.get(url)
                
                if response.status_code == 200:
                    return response.json()
                else:
                    logger.warning(f"Status {response.status_code} for term: {term}")
                    return None
            
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Async request failed: {e}")
                return None
    
    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
    
    async def __aenter__(self):
        """Async context manager entry."""
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
