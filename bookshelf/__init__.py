"""Personal book catalog backed by the Google Books API."""

__version__ = "0.1.0"
