"""Panels and cards: the rendering surface for the catalog."""
from dataclasses import dataclass, field
from typing import Optional, List

from bookshelf.models import Category, LibraryRecord, SearchRecord

SEARCH_ERROR_MESSAGE = "Error searching books. Please try again."


@dataclass
class BookCard:
    """One rendered book with the actions it offers."""
    id: str
    title: str
    authors: str
    cover_url: str
    genre: str
    category: Optional[Category] = None
    saved: bool = False
    
    @property
    def is_library_card(self) -> bool:
        return self.category is not None
    
    @property
    def actions(self) -> List[str]:
        if self.is_library_card:
            return ["move", "remove"]
        return [] if self.saved else ["save"]
    
    @property
    def save_label(self) -> Optional[str]:
        if self.is_library_card:
            return None
        return "Already Saved" if self.saved else "Save to Library"
    
    @property
    def category_options(self) -> List[Category]:
        return list(Category) if self.is_library_card else []
    
    @classmethod
    def for_library(cls, record: LibraryRecord) -> "BookCard":
        return cls(
            id=record.id,
            title=record.title,
            authors=record.authors,
            cover_url=record.cover_url,
            genre=record.genre,
            category=record.category,
        )
    
    @classmethod
    def for_search(cls, record: SearchRecord) -> "BookCard":
        return cls(
            id=record.id,
            title=record.title,
            authors=record.authors_str,
            cover_url=record.cover_url,
            genre=record.genre,
            saved=record.in_library,
        )


@dataclass
class Panel:
    """A region that holds either cards or a single message."""
    name: str
    cards: List[BookCard] = field(default_factory=list)
    message: Optional[str] = None
    
    def clear(self):
        self.cards = []
        self.message = None
    
    def append(self, card: BookCard):
        self.cards.append(card)
    
    def show_message(self, message: str):
        """Replace the panel contents with a message."""
        self.clear()
        self.message = message
    
    @property
    def ids(self) -> List[str]:
        return [card.id for card in self.cards]
    
    def __len__(self):
        return len(self.cards)
