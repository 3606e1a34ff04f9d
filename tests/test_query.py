"""Tests for search term construction."""
import pytest

from bookshelf.query import build_query_term, encode_component, validate_genre


def test_query_with_genre():
    """Query and genre combine with a subject constraint."""
    assert build_query_term("dune", "Fiction") == "dune+subject:Fiction"


def test_query_only():
    assert build_query_term("  dune  ") == "dune"


def test_genre_only():
    assert build_query_term("", "Science Fiction") == "subject:Science%20Fiction"


def test_empty_query_and_genre():
    """Nothing to search for yields None."""
    assert build_query_term("", "") is None
    assert build_query_term("   ", None) is None


def test_query_is_escaped():
    """Components are escaped like encodeURIComponent."""
    assert build_query_term("war & peace") == "war%20%26%20peace"
    assert build_query_term("c++", "Computers") == "c%2B%2B+subject:Computers"


def test_encode_component_keeps_unreserved():
    assert encode_component("it's-ok_(really)!~*.") == "it's-ok_(really)!~*."


def test_unknown_genre_rejected():
    with pytest.raises(ValueError):
        build_query_term("dune", "Cooking Shows")


def test_validate_genre_empty():
    assert validate_genre(None) == ""
    assert validate_genre("Poetry") == "Poetry"
