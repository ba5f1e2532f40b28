"""Translation between flat joined rows and nested book values.

Reads come back from the store as one row per book with the category, author
and detail columns flattened alongside the book's own columns. Writes go the
other way: a payload is split into the column values of each table it touches.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Optional

from pydantic import ValidationError

from .errors import MappingError
from .models import Author, Book, BookDetail, Category, CreateBook, UpdateBook

BOOK_COLUMNS = ("title", "category_id", "author_id")
DETAIL_COLUMNS = ("price", "comment")


def row_to_book(row: Optional[Mapping[str, Any]]) -> Optional[Book]:
    if row is None:
        return None
    if row.get("id") is None:
        raise MappingError("row has no book id")
    try:
        return _build_book(row)
    except ValidationError as exc:
        raise MappingError(f"malformed row for book {row['id']}: {exc}") from exc


def _build_book(row: Mapping[str, Any]) -> Book:
    category = None
    if row.get("joined_category_id") is not None:
        category = Category(id=row["joined_category_id"], name=row.get("category_name"))

    author = None
    if row.get("joined_author_id") is not None:
        author = Author(
            id=row["joined_author_id"],
            name=row.get("author_name"),
            birthday=row.get("birthday"),
            address=row.get("address"),
        )

    details = None
    if row.get("detail_id") is not None:
        details = BookDetail(
            id=row["detail_id"],
            book_id=row["id"],
            price=row.get("price"),
            comment=row.get("comment"),
        )

    return Book(
        id=row["id"],
        title=row.get("title"),
        category_id=row.get("category_id"),
        author_id=row.get("author_id"),
        reg_date=row.get("reg_date"),
        del_flg=bool(row.get("del_flg")),
        category=category,
        author=author,
        details=details,
    )


def rows_to_books(rows: Iterable[Mapping[str, Any]]) -> list[Book]:
    return [row_to_book(row) for row in rows]


def new_book_columns(payload: CreateBook) -> dict[str, Any]:
    return {column: getattr(payload, column) for column in BOOK_COLUMNS}


def new_detail_columns(payload: CreateBook, book_id: int) -> dict[str, Any]:
    columns = {column: getattr(payload, column) for column in DETAIL_COLUMNS}
    columns["book_id"] = book_id
    return columns


def _provided(changes: UpdateBook, columns: tuple[str, ...]) -> dict[str, Any]:
    # Falsy values ("" and 0 included) mean "leave the column alone".
    return {column: getattr(changes, column) for column in columns if getattr(changes, column)}


def changed_book_columns(changes: UpdateBook) -> dict[str, Any]:
    return _provided(changes, BOOK_COLUMNS)


def changed_detail_columns(changes: UpdateBook) -> dict[str, Any]:
    return _provided(changes, DETAIL_COLUMNS)
