"""HTTP client for Google Books API with resilience patterns."""
import time
import random
import requests
from typing import Optional, Dict, Any
from urllib.parse import urlencode
import logging

logger = logging.getLogger(__name__)

BASE_URL = "https://www.googleapis.com/books/v1/volumes"


def build_search_url(
    term: str,
    max_results: int = 10,
    start_index: int = 0,
    api_key: Optional[str] = None
) -> str:
    """
    Build a volumes search URL.
    
    The term is already escaped and goes into ``q`` verbatim so the
    ``+subject:`` separator survives.
    """
    params = {
        "maxResults": min(max_results, 40),  # API limit
        "startIndex": start_index
    }
    
    if api_key:
        params["key"] = api_key
    
    return f"{BASE_URL}?q={term}&{urlencode(params)}"


class GoogleBooksClient:
    """Client for Google Books API with timeouts, retries, and backoff."""
    
    BASE_URL = BASE_URL
    
    def __init__(
        self, 
        api_key: Optional[str] = None,
        timeout: int = 10,
        max_retries: int = 3,
        base_backoff: float = 1.0
    ):
        """
        Initialize Google Books API client.
        
        Args:
            api_key: Optional API key (increases rate limits)
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            base_backoff: Base delay for exponential backoff
        """
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_backoff = base_backoff
        
        # Create session for connection pooling
        self.session = requests.Session()
    
    def search(
        self, 
        term: str, 
        max_results: int = 10,
        start_index: int = 0
    ) -> Optional[Dict[str, Any]]:
        """
        Search for books.
        
        Args:
            term: Escaped search term (see bookshelf.query.build_query_term)
            max_results: Maximum results to return (1-40)
            start_index: Pagination offset
            
        Returns:
            API response JSON or None if all retries failed
        """
        url = build_search_url(term, max_results, start_index, self.api_key)
        return self._make_request_with_retry(url)
    
    def get_volume(self, volume_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a single volume by ID.
        
        Returns:
            Volume JSON (same shape as a search item) or None
        """
        url = f"{self.BASE_URL}/{volume_id}"
        if self.api_key:
            url += f"?{urlencode({'key': self.api_key})}"
        return self._make_request_with_retry(url)
    
    def _make_request_with_retry(self, url: str) -> Optional[Dict[str, Any]]:
        """
        Make HTTP request with retry logic.
        
        Args:
            url: Request URL including query string
            
        Returns:
            Response JSON or None if all retries exhausted
        """
        for attempt in range(self.max_retries):
            try:
                logger.info(f"Request attempt {attempt + 1}/{self.max_retries}: {url}")
                
                response = self.session.get(url, timeout=self.timeout)
                
                # Handle different status codes
                if response.status_code == 200:
                    logger.info(f"Success: {response.status_code}")
                    return response.json()
                
                elif response.status_code == 429:
                    # Rate limited - must retry with backoff
                    logger.warning(f"Rate limited (429) on attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue
                
                elif response.status_code >= 500:
                    # Server error - retryable
                    logger.warning(f"Server error ({response.status_code}) on attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue
                
                elif response.status_code >= 400:
                    # Client error - don't retry
                    logger.error(f"Client error ({response.status_code}): {response.text}")
                    return None
                
            except requests.exceptions.Timeout:
                logger.warning(f"Timeout on attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue
            
            except requests.exceptions.ConnectionError as e:
                logger.warning(f"Connection error on attempt {attempt + 1}: {e}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue
            
            except ValueError as e:
                # Body was not JSON
                logger.error(f"Invalid JSON response: {e}")
                return None

            except requests.exceptions.RequestException as e:
                # Any other transport failure
                logger.error(f"Request failed: {e}")
                return None
        
        logger.error(f"All {self.max_retries} attempts failed")
        return None
    
    def _backoff(self, attempt: int):
        """
        Sleep with exponential backoff and jitter.
        
        Args:
            attempt: Current attempt number (0-indexed)
        """
        delay = self.base_backoff * (2 ** attempt)
        jitter = random.uniform(0, delay)
        total_delay = delay + jitter
        
        logger.info(f"Backing off for {total_delay:.2f} seconds")
        time.sleep(total_delay)
    
    def close(self):
        """Close the session."""
        self.session.close()
    
    def __enter__(self):
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
