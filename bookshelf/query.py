"""Build search terms for the Google Books API."""
from typing import Optional
from urllib.parse import quote

# Options offered by the genre selector
GENRES = [
    "Fiction",
    "Fantasy",
    "Science Fiction",
    "Mystery",
    "Thriller",
    "Romance",
    "Horror",
    "Biography & Autobiography",
    "History",
    "Science",
    "Computers",
    "Self-Help",
    "Poetry",
    "Juvenile Fiction",
]

# Characters encodeURIComponent leaves alone
_UNRESERVED = "-_.!~*'()"


def encode_component(value: str) -> str:
    """Percent-encode a single query component."""
    return quote(value, safe=_UNRESERVED)


def validate_genre(genre: Optional[str]) -> str:
    """
    Normalize a genre selection.
    
    Returns:
        The genre, or "" when none is selected
        
    Raises:
        ValueError: if the genre is not one of GENRES
    """
    if not genre:
        return ""
    if genre not in GENRES:
        raise ValueError(f"Unknown genre: {genre!r}")
    return genre


def build_query_term(query: Optional[str], genre: Optional[str] = None) -> Optional[str]:
    """
    Build the escaped ``q`` parameter for a search.
    
    Args:
        query: Free-text query (whitespace is trimmed)
        genre: Optional genre constraint
        
    Returns:
        ``query``, ``query+subject:genre`` or ``subject:genre``, escaped;
        None when both inputs are empty
    """
    query = (query or "").strip()
    genre = validate_genre(genre)
    
    if query:
        term = encode_component(query)
        if genre:
            term += f"+subject:{encode_component(genre)}"
        return term
    if genre:
        return f"subject:{encode_component(genre)}"
    return None
