"""Bookstore catalog: one book data set served over REST and GraphQL."""

__version__ = "1.0.0"
