"""Data models for search results and library entries."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any

PLACEHOLDER_COVER = "https://via.placeholder.com/128x192?text=No+Cover"
UNKNOWN_AUTHOR = "Unknown Author"


class Category(Enum):
    """Reading status of a library book."""
    TO_READ = "toRead"
    READING = "reading"
    COMPLETED = "completed"
    
    @property
    def label(self) -> str:
        return _LABELS[self]
    
    @classmethod
    def parse(cls, value) -> "Category":
        """
        Parse a category from its stored value, name or hyphenated alias.
        
        Raises:
            ValueError: if the value names none of the three categories
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for category in cls:
            if text in (category.value, category.name.lower(), category.name.lower().replace("_", "-")):
                return category
        raise ValueError(f"Unknown category: {value!r}")


_LABELS = {
    Category.TO_READ: "To Read",
    Category.READING: "Reading",
    Category.COMPLETED: "Completed",
}


@dataclass
class SearchRecord:
    """A transient book returned by the search service."""
    id: str
    title: str
    authors: List[str] = field(default_factory=list)
    thumbnail: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    in_library: bool = False
    
    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return ", ".join(self.authors) if self.authors else UNKNOWN_AUTHOR
    
    @property
    def cover_url(self) -> str:
        return self.thumbnail or PLACEHOLDER_COVER
    
    @property
    def genre(self) -> str:
        """Format categories as comma-separated string."""
        return ", ".join(self.categories)


@dataclass
class LibraryRecord:
    """A saved book with its reading category."""
    id: str
    title: str
    authors: str
    cover_url: str
    genre: str = ""
    category: Category = Category.TO_READ
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "authors": self.authors,
            "coverUrl": self.cover_url,
            "genre": self.genre,
            "category": self.category.value,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LibraryRecord":
        """Build a record from its stored form."""
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            authors=data.get("authors", UNKNOWN_AUTHOR),
            cover_url=data.get("coverUrl", PLACEHOLDER_COVER),
            genre=data.get("genre") or "",
            category=Category.parse(data["category"]),
        )
