class BookstoreError(Exception):
    """Base class for every failure the catalog reports to its callers."""


class BookNotFound(BookstoreError):
    def __init__(self, book_id: int):
        super().__init__("Book not found")
        self.book_id = book_id


class MappingError(BookstoreError):
    """A joined row did not have the shape the mapper expects."""


class RepositoryError(BookstoreError):
    """The relational store failed while serving a request."""


class WriteError(RepositoryError):
    """A transactional write failed and was rolled back."""


class ResourceExhausted(RepositoryError):
    """No pooled connection became available within the pool timeout."""
