#!/usr/bin/env python3
"""Bookshelf CLI - search Google Books and keep a reading list."""
import argparse
import asyncio
import csv
import json
import shlex
import sys
from typing import Iterable, List, Optional
from tabulate import tabulate
from bookshelf.client import GoogleBooksClient
from bookshelf.async_client import AsyncGoogleBooksClient
from bookshelf.config import Config
from bookshelf.controller import LibraryController
from bookshelf.models import Category
from bookshelf.parse import parse_book
from bookshelf.query import GENRES
from bookshelf.render import Panel
from bookshelf.storage import open_store
import logging

logger = logging.getLogger(__name__)


def make_client(config: Config) -> GoogleBooksClient:
    """Create the synchronous API client."""
    return GoogleBooksClient(
        api_key=config.GOOGLE_BOOKS_API_KEY,
        timeout=config.DEFAULT_TIMEOUT,
        max_retries=config.DEFAULT_MAX_RETRIES
    )


def _truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def display_results(panel: Panel, format_type: str = "table"):
    """Display the search results panel."""
    if panel.message:
        print(panel.message)
        return

    if format_type == "table":
        headers = ["#", "ID", "Title", "Authors", "Genre", "Status"]
        rows = [
            [
                i,
                card.id,
                _truncate(card.title, 50),
                _truncate(card.authors, 30),
                _truncate(card.genre, 30),
                card.save_label
            ]
            for i, card in enumerate(panel.cards, 1)
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        cards = [
            {
                "id": card.id,
                "title": card.title,
                "authors": card.authors,
                "coverUrl": card.cover_url,
                "genre": card.genre,
                "saved": card.saved
            }
            for card in panel.cards
        ]
        print(json.dumps(cards, indent=2))

    elif format_type == "compact":
        for i, card in enumerate(panel.cards, 1):
            print(f"{i}. {card.title} - {card.authors} [{card.save_label}]")


def display_library(controller: LibraryController, format_type: str = "table"):
    """Display the three category panels."""
    if format_type == "json":
        data = {
            category.value: [
                {"id": card.id, "title": card.title, "authors": card.authors, "genre": card.genre}
                for card in panel.cards
            ]
            for category, panel in controller.category_panels.items()
        }
        print(json.dumps(data, indent=2))
        return

    for category, panel in controller.category_panels.items():
        print(f"\n{category.label} ({len(panel)})")
        if format_type == "compact":
            for card in panel.cards:
                print(f"  {card.id}: {card.title} - {card.authors}")
        elif panel.cards:
            rows = [
                [card.id, _truncate(card.title, 50), _truncate(card.authors, 30), _truncate(card.genre, 30)]
                for card in panel.cards
            ]
            print(tabulate(rows, headers=["ID", "Title", "Authors", "Genre"], tablefmt="grid"))


def search_books_sync(args, config: Config):
    """Search for books using sync client."""
    with open_store(config) as store, make_client(config) as client:
        controller = LibraryController(store, client=client, max_results=args.limit)

        logger.info(f"Searching for: {args.query!r} (genre: {args.genre or 'any'})")
        if not controller.search(args.query, args.genre) and not controller.results_panel.message:
            logger.warning("Nothing to search for: give a query or --genre")
            return
        display_results(controller.results_panel, args.format)


async def search_books_async(args, config: Config):
    """Search for books using async client."""
    with open_store(config) as store:
        async with AsyncGoogleBooksClient(
            api_key=config.GOOGLE_BOOKS_API_KEY,
            timeout=config.DEFAULT_TIMEOUT
        ) as client:
            controller = LibraryController(store, async_client=client, max_results=args.limit)

            logger.info(f"Searching for: {args.query!r} (genre: {args.genre or 'any'})")
            if not await controller.search_async(args.query, args.genre) and not controller.results_panel.message:
                logger.warning("Nothing to search for: give a query or --genre")
                return
            display_results(controller.results_panel, args.format)


def save_book(args, config: Config):
    """Fetch a volume by ID and save it to the to-read shelf."""
    with open_store(config) as store, make_client(config) as client:
        controller = LibraryController(store, client=client)

        item = client.get_volume(args.id)
        record = parse_book(item) if item else None
        if record is None:
            logger.error(f"Could not fetch volume {args.id}")
            return

        if controller.save(record):
            print(f"Saved '{record.title}' to {Category.TO_READ.label}")
        else:
            print(f"'{record.title}' is already in your library")


def remove_book(args, config: Config):
    """Remove a book from the library."""
    with open_store(config) as store:
        controller = LibraryController(store)
        if controller.remove(args.id):
            print(f"Removed {args.id}")
        else:
            print(f"No book with ID {args.id} in your library")


def move_book(args, config: Config):
    """Move a book to another category."""
    with open_store(config) as store:
        controller = LibraryController(store)
        if controller.move(args.id, args.category):
            print(f"Moved {args.id} to {Category.parse(args.category).label}")
        else:
            print(f"No book with ID {args.id} in your library")


def list_library(args, config: Config):
    """Show the library, optionally filtered by genre."""
    with open_store(config) as store:
        controller = LibraryController(store)
        controller.filter_by_genre(args.genre or "")
        display_library(controller, args.format)


def show_stats(args, config: Config):
    """Show library statistics."""
    with open_store(config) as store:
        stats = LibraryController(store).stats()
        store_stats = store.get_stats()

        print("\n" + "=" * 50)
        print("LIBRARY STATISTICS")
        print("=" * 50)
        print(f"Total books saved: {stats['total_books']}")
        for category in Category:
            print(f"{category.label}: {stats['by_category'][category.value]}")
        print(f"Storage backend: {config.STORAGE_BACKEND}")
        print(f"Stored keys: {store_stats['stored_keys']}")
        if "path" in store_stats:
            print(f"Library file: {store_stats['path']}")
        print("=" * 50 + "\n")


def export_data(args, config: Config):
    """Export the library."""
    with open_store(config) as store:
        books = LibraryController(store).library

        if args.format == "json":
            data = [book.to_dict() for book in books]

            if args.output:
                with open(args.output, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2)
                logger.info(f"Exported {len(books)} books to {args.output}")
            else:
                print(json.dumps(data, indent=2))

        elif args.format == "csv":
            output_file = args.output or "library_export.csv"
            with open(output_file, 'w', newline='', encoding='utf-8') as f:
                writer = csv.writer(f)
                writer.writerow(["ID", "Title", "Authors", "Genre", "Category", "Cover"])

                for book in books:
                    writer.writerow([
                        book.id,
                        book.title,
                        book.authors,
                        book.genre,
                        book.category.value,
                        book.cover_url
                    ])

            logger.info(f"Exported {len(books)} books to {output_file}")


SHELL_HELP = """Commands:
  search <query>          search Google Books (uses the selected genre)
  genre [<genre>]         select a genre (filters the library, constrains searches)
  save <n>                save result number n
  remove <id>             remove a saved book
  move <id> <category>    move a book (toRead, reading, completed)
  results | library       show the panels again
  help | quit"""


def run_shell(controller: LibraryController, lines: Iterable[str], format_type: str = "compact"):
    """
    Drive a controller from command lines, one session of state.

    Args:
        controller: Controller holding the session state
        lines: Input lines (stdin in interactive use)
        format_type: Output format for panels
    """
    genre = ""

    for line in lines:
        try:
            words: List[str] = shlex.split(line)
        except ValueError as e:
            print(f"Parse error: {e}")
            continue
        if not words:
            continue

        command, rest = words[0].lower(), words[1:]

        try:
            if command in ("quit", "exit"):
                break
            elif command == "help":
                print(SHELL_HELP)
            elif command == "search":
                query = " ".join(rest)
                if not query.strip() and not genre:
                    print("Enter a query or select a genre first")
                    continue
                controller.search(query, genre)
                display_results(controller.results_panel, format_type)
            elif command == "genre":
                genre = " ".join(rest)
                if genre and genre not in GENRES:
                    print(f"Unknown genre. Choose from: {', '.join(GENRES)}")
                    genre = ""
                    continue
                controller.filter_by_genre(genre)
                display_library(controller, format_type)
            elif command == "save":
                index = int(rest[0]) - 1
                if not 0 <= index < len(controller.search_results):
                    print("No such result")
                    continue
                controller.save(controller.search_results[index])
                display_library(controller, format_type)
            elif command == "remove":
                if not controller.remove(rest[0]):
                    print(f"No book with ID {rest[0]} in your library")
                display_library(controller, format_type)
            elif command == "move":
                if not controller.move(rest[0], rest[1]):
                    print(f"No book with ID {rest[0]} in your library")
                display_library(controller, format_type)
            elif command == "results":
                display_results(controller.results_panel, format_type)
            elif command == "library":
                display_library(controller, format_type)
            else:
                print(f"Unknown command: {command} (try 'help')")
        except (IndexError, ValueError) as e:
            print(f"Invalid arguments for {command}: {e}")


def interactive_shell(args, config: Config):
    """Start an interactive session."""
    with open_store(config) as store, make_client(config) as client:
        controller = LibraryController(store, client=client, max_results=args.limit)
        print(SHELL_HELP)
        display_library(controller, "compact")

        def prompt():
            while True:
                try:
                    yield input("bookshelf> ")
                except EOFError:
                    return

        run_shell(controller, prompt())


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Bookshelf - search Google Books and organize a reading list",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search, optionally constrained to a genre
  %(prog)s search "dune" --genre Fiction

  # Save a result and start reading it
  %(prog)s save B1hSG45JCX4C
  %(prog)s move B1hSG45JCX4C reading

  # Show the library filtered by genre
  %(prog)s list --genre Fantasy

  # Interactive session
  %(prog)s shell
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search for books")
    search_parser.add_argument("query", nargs="?", default="", help="Search query")
    search_parser.add_argument("--genre", choices=GENRES, default="", help="Restrict to a genre")
    search_parser.add_argument("--limit", type=int, default=Config.DEFAULT_MAX_RESULTS, help="Max results")
    search_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    search_parser.add_argument("--async", dest="use_async", action="store_true", help="Use async client")

    # Library commands
    save_parser = subparsers.add_parser("save", help="Save a book by volume ID")
    save_parser.add_argument("id", help="Google Books volume ID")

    remove_parser = subparsers.add_parser("remove", help="Remove a saved book")
    remove_parser.add_argument("id", help="Volume ID")

    move_parser = subparsers.add_parser("move", help="Move a saved book to another category")
    move_parser.add_argument("id", help="Volume ID")
    move_parser.add_argument("category", choices=[c.value for c in Category], help="Target category")

    list_parser = subparsers.add_parser("list", help="Show the library")
    list_parser.add_argument("--genre", default="", help="Only books whose genre contains this text")
    list_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    # Stats command
    subparsers.add_parser("stats", help="Show library statistics")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export the library")
    export_parser.add_argument("--format", choices=["json", "csv"], default="json", help="Export format")
    export_parser.add_argument("--output", help="Output file (default: stdout for JSON)")

    # Shell command
    shell_parser = subparsers.add_parser("shell", help="Interactive session")
    shell_parser.add_argument("--limit", type=int, default=Config.DEFAULT_MAX_RESULTS, help="Max results per search")

    return parser


COMMANDS = {
    "save": save_book,
    "remove": remove_book,
    "move": move_book,
    "list": list_library,
    "stats": show_stats,
    "export": export_data,
    "shell": interactive_shell,
}


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()

    try:
        if args.command == "search":
            if args.use_async:
                asyncio.run(search_books_async(args, config))
            else:
                search_books_sync(args, config)
        else:
            COMMANDS[args.command](args, config)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
