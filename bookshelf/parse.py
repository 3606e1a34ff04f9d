"""Parse and normalize Google Books API responses."""
import logging
from typing import Dict, Any, List, Optional
from bookshelf.models import SearchRecord, LibraryRecord, Category

logger = logging.getLogger(__name__)


def _strings(values) -> List[str]:
    """Keep the string entries of a list field; anything else yields []."""
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, str)]


def parse_book(item: Dict[str, Any]) -> Optional[SearchRecord]:
    """
    Parse a single book item from Google Books API.
    
    Args:
        item: Single item from Google Books API response
        
    Returns:
        SearchRecord or None if parsing fails
    """
    try:
        volume_info = item.get("volumeInfo") or {}
        
        book_id = item.get("id", "")
        if not book_id or not isinstance(book_id, str):
            return None
        
        title = volume_info.get("title")
        image_links = volume_info.get("imageLinks") or {}
        thumbnail = image_links.get("thumbnail")
        
        return SearchRecord(
            id=book_id,
            title=title if isinstance(title, str) else "Unknown Title",
            authors=_strings(volume_info.get("authors")),
            thumbnail=thumbnail if isinstance(thumbnail, str) else None,
            categories=_strings(volume_info.get("categories")),
        )
    except (AttributeError, TypeError) as e:
        # Skip the item, keep the rest of the page
        logger.warning(f"Failed to parse book: {e}")
        return None


def parse_books_response(response_json: Dict[str, Any]) -> List[SearchRecord]:
    """
    Parse full Google Books API response.
    
    Args:
        response_json: Complete API response JSON
        
    Returns:
        List of SearchRecord objects (empty if no items found)
        
    Raises:
        ValueError: if the response is not a JSON object with an items list
    """
    if not isinstance(response_json, dict):
        raise ValueError(f"Unexpected response type: {type(response_json).__name__}")
    
    items = response_json.get("items") or []
    if not isinstance(items, list):
        raise ValueError("Response 'items' is not a list")
    
    books = []
    for item in items:
        book = parse_book(item)
        if book:
            books.append(book)
    
    return books


def deduplicate_books(books: List[SearchRecord]) -> List[SearchRecord]:
    """
    Remove duplicate books by ID.
    
    Args:
        books: List of SearchRecord objects
        
    Returns:
        Deduplicated list of books
    """
    seen_ids = set()
    unique_books = []
    
    for book in books:
        if book.id not in seen_ids:
            seen_ids.add(book.id)
            unique_books.append(book)
    
    return unique_books


def to_library_record(book: SearchRecord, category: Category = Category.TO_READ) -> LibraryRecord:
    """Convert a search result into its saved form."""
    return LibraryRecord(
        id=book.id,
        title=book.title,
        authors=book.authors_str,
        cover_url=book.cover_url,
        genre=book.genre,
        category=category,
    )
