"""Library state and the panels rendered from it."""
import logging
from typing import Optional, List, Dict, Any, Union

from bookshelf.commands import Command, Search, Save, Remove, Move, FilterByGenre
from bookshelf.models import Category, LibraryRecord, SearchRecord
from bookshelf.parse import parse_books_response, deduplicate_books, to_library_record
from bookshelf.query import build_query_term
from bookshelf.render import BookCard, Panel, SEARCH_ERROR_MESSAGE
from bookshelf.storage import KeyValueStore, load_library, save_library

logger = logging.getLogger(__name__)


class LibraryController:
    """
    Owns the saved library and the last search results.

    Every mutation is written through to the store and re-renders the
    category panels. Search results live in memory only.
    """

    def __init__(
        self,
        store: KeyValueStore,
        client=None,
        async_client=None,
        max_results: int = 10
    ):
        """
        Load the library and render it.

        Args:
            store: Key-value store holding the library
            client: GoogleBooksClient used by search()
            async_client: AsyncGoogleBooksClient used by search_async()
            max_results: Results requested per search
        """
        self.store = store
        self.client = client
        self.async_client = async_client
        self.max_results = max_results

        self.library: List[LibraryRecord] = load_library(store)
        self.search_results: List[SearchRecord] = []

        self.results_panel = Panel("searchResults")
        self.category_panels: Dict[Category, Panel] = {
            category: Panel(category.value) for category in Category
        }
        self._search_generation = 0

        self.render_library()

    # Queries

    def is_member(self, book_id: str) -> bool:
        return any(book.id == book_id for book in self.library)

    def get_book(self, book_id: str) -> Optional[LibraryRecord]:
        for book in self.library:
            if book.id == book_id:
                return book
        return None

    def books_in(self, category: Union[Category, str]) -> List[LibraryRecord]:
        category = Category.parse(category)
        return [book for book in self.library if book.category == category]

    def stats(self) -> Dict[str, Any]:
        """Count saved books per category."""
        counts = {category.value: 0 for category in Category}
        for book in self.library:
            counts[book.category.value] += 1
        return {"total_books": len(self.library), "by_category": counts}

    # Search

    def search(self, query: str, genre: str = "") -> bool:
        """
        Run a search and render its results.

        Returns:
            True if results were rendered, False for a no-op or a failure

        Raises:
            ValueError: if genre is not a known genre
        """
        term = build_query_term(query, genre)
        if term is None:
            return False
        if self.client is None:
            raise RuntimeError("No search client configured")

        self._search_generation += 1
        response = self.client.search(term, max_results=self.max_results)
        return self._apply_search_response(term, response)

    async def search_async(self, query: str, genre: str = "") -> bool:
        """
        Async variant of search().

        Only the most recently issued search may render; a response that
        arrives after a newer search was started is dropped.
        """
        term = build_query_term(query, genre)
        if term is None:
            return False
        if self.async_client is None:
            raise RuntimeError("No async search client configured")

        self._search_generation += 1
        generation = self._search_generation

        response = await self.async_client.search(term, max_results=self.max_results)

        if generation != self._search_generation:
            logger.info(f"Discarding stale results for: {term}")
            return False

        return self._apply_search_response(term, response)

    def _apply_search_response(self, term: str, response) -> bool:
        if response is None:
            return self._search_failed(term, "no response from search service")

        # Nothing is committed until the whole page has parsed and rendered
        try:
            results = deduplicate_books(parse_books_response(response))
            cards = self._search_cards(results)
        except (ValueError, TypeError) as e:
            return self._search_failed(term, e)

        self.search_results = results
        logger.info(f"Found {len(results)} books for: {term}")
        self._show_search_cards(cards)
        return True

    def _search_failed(self, term: str, reason) -> bool:
        logger.error(f"Error searching books ({term}): {reason}")
        self.results_panel.show_message(SEARCH_ERROR_MESSAGE)
        return False

    # Mutations

    def save(self, record: SearchRecord) -> bool:
        """
        Save a search result to the to-read shelf.

        Returns:
            False if the book is already in the library
        """
        if self.is_member(record.id):
            logger.warning(f"Book {record.id} is already in the library")
            return False

        self.library.append(to_library_record(record))
        self._persist()
        logger.info(f"Saved '{record.title}' ({record.id})")

        self.render_library()
        self.render_search_results()
        return True

    def remove(self, book_id: str) -> bool:
        """Remove a book from the library; False if it isn't there."""
        for index, book in enumerate(self.library):
            if book.id == book_id:
                del self.library[index]
                break
        else:
            return False

        self._persist()
        logger.info(f"Removed {book_id}")
        self.render_library()
        return True

    def move(self, book_id: str, category: Union[Category, str]) -> bool:
        """
        Change the category of a saved book.

        Raises:
            ValueError: for an unknown category
        """
        category = Category.parse(category)
        book = self.get_book(book_id)
        if book is None:
            return False

        book.category = category
        self._persist()
        logger.info(f"Moved {book_id} to {category.value}")
        self.render_library()
        return True

    def _persist(self):
        save_library(self.store, self.library)

    # Rendering

    def filter_by_genre(self, genre: str = ""):
        """Render only books whose genre string contains ``genre``."""
        self.render_library(genre)

    def render_library(self, genre: str = ""):
        for panel in self.category_panels.values():
            panel.clear()

        for book in self.library:
            if genre and genre not in book.genre:
                continue
            self.category_panels[book.category].append(BookCard.for_library(book))

    def render_search_results(self):
        self._show_search_cards(self._search_cards(self.search_results))

    def _search_cards(self, records: List[SearchRecord]) -> List[BookCard]:
        cards = []
        for record in records:
            record.in_library = self.is_member(record.id)
            cards.append(BookCard.for_search(record))
        return cards

    def _show_search_cards(self, cards: List[BookCard]):
        self.results_panel.clear()
        for card in cards:
            self.results_panel.append(card)

    # Dispatch

    def dispatch(self, command: Command):
        """Route a command value to the matching operation."""
        if isinstance(command, Search):
            return self.search(command.query, command.genre)
        elif isinstance(command, Save):
            return self.save(command.record)
        elif isinstance(command, Remove):
            return self.remove(command.book_id)
        elif isinstance(command, Move):
            return self.move(command.book_id, command.category)
        elif isinstance(command, FilterByGenre):
            return self.filter_by_genre(command.genre)

        raise TypeError(f"Unknown command: {command!r}")
