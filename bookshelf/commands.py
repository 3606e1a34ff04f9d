"""Command values consumed by LibraryController.dispatch."""
from dataclasses import dataclass
from typing import Union

from bookshelf.models import Category, SearchRecord


@dataclass(frozen=True)
class Search:
    query: str = ""
    genre: str = ""


@dataclass(frozen=True)
class Save:
    record: SearchRecord


@dataclass(frozen=True)
class Remove:
    book_id: str


@dataclass(frozen=True)
class Move:
    book_id: str
    category: Union[Category, str]


@dataclass(frozen=True)
class FilterByGenre:
    genre: str = ""


Command = Union[Search, Save, Remove, Move, FilterByGenre]
