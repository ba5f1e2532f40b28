import logging
from typing import Any, Optional

from sqlalchemy import Select, false, select, update
from sqlalchemy.orm import Session

from .db import Database
from .entities import AuthorRecord, BookDetailRecord, BookRecord, CategoryRecord
from .mapper import (
    changed_book_columns,
    changed_detail_columns,
    new_book_columns,
    new_detail_columns,
    row_to_book,
    rows_to_books,
)
from .models import Author, Book, Category, CreateBook, UpdateBook

logger = logging.getLogger(__name__)

Row = dict[str, Any]


def _joined_books() -> Select:
    return (
        select(
            BookRecord.id,
            BookRecord.title,
            BookRecord.category_id,
            BookRecord.author_id,
            BookRecord.reg_date,
            BookRecord.del_flg,
            CategoryRecord.id.label("joined_category_id"),
            CategoryRecord.name.label("category_name"),
            AuthorRecord.id.label("joined_author_id"),
            AuthorRecord.name.label("author_name"),
            AuthorRecord.birthday,
            AuthorRecord.address,
            BookDetailRecord.id.label("detail_id"),
            BookDetailRecord.price,
            BookDetailRecord.comment,
        )
        .select_from(BookRecord)
        .outerjoin(CategoryRecord, BookRecord.category_id == CategoryRecord.id)
        .outerjoin(AuthorRecord, BookRecord.author_id == AuthorRecord.id)
        .outerjoin(BookDetailRecord, BookRecord.id == BookDetailRecord.book_id)
    )


class BookRepository:
    """Reads and writes the book catalog.

    The ``*_row`` methods return flat joined rows as plain dicts; the other
    methods run the same queries and map the rows to nested ``Book`` values.
    """

    def __init__(self, database: Database):
        self.database = database

    @staticmethod
    def _select_row(session: Session, book_id: int, include_deleted: bool = False) -> Optional[Row]:
        stmt = _joined_books().where(BookRecord.id == book_id)
        if not include_deleted:
            stmt = stmt.where(BookRecord.del_flg == false())
        row = session.execute(stmt).mappings().first()
        return dict(row) if row is not None else None

    def list_book_rows(self) -> list[Row]:
        stmt = _joined_books().where(BookRecord.del_flg == false()).order_by(BookRecord.id)
        with self.database.reader() as session:
            return [dict(row) for row in session.execute(stmt).mappings().all()]

    def get_book_row(self, book_id: int, include_deleted: bool = False) -> Optional[Row]:
        with self.database.reader() as session:
            return self._select_row(session, book_id, include_deleted=include_deleted)

    def create_book_row(self, payload: CreateBook) -> Row:
        with self.database.transaction() as session:
            record = BookRecord(**new_book_columns(payload))
            session.add(record)
            session.flush()
            session.add(BookDetailRecord(**new_detail_columns(payload, record.id)))
            session.flush()
            row = self._select_row(session, record.id, include_deleted=True)
        logger.info("book.created", extra={"book_id": row["id"]})
        return row

    def update_book_row(self, book_id: int, changes: UpdateBook) -> Optional[Row]:
        with self.database.transaction() as session:
            if self._select_row(session, book_id) is None:
                return None

            book_columns = changed_book_columns(changes)
            if book_columns:
                session.execute(
                    update(BookRecord)
                    .where(BookRecord.id == book_id)
                    .values(**book_columns)
                    .execution_options(synchronize_session=False)
                )
            detail_columns = changed_detail_columns(changes)
            if detail_columns:
                session.execute(
                    update(BookDetailRecord)
                    .where(BookDetailRecord.book_id == book_id)
                    .values(**detail_columns)
                    .execution_options(synchronize_session=False)
                )
            row = self._select_row(session, book_id)
        logger.info(
            "book.updated",
            extra={"book_id": book_id, "columns": sorted({**book_columns, **detail_columns})},
        )
        return row

    def delete_book(self, book_id: int) -> bool:
        with self.database.transaction() as session:
            result = session.execute(
                update(BookRecord)
                .where(BookRecord.id == book_id, BookRecord.del_flg == false())
                .values(del_flg=True)
                .execution_options(synchronize_session=False)
            )
            deleted = result.rowcount > 0
        if deleted:
            logger.info("book.deleted", extra={"book_id": book_id})
        return deleted

    def list_books(self) -> list[Book]:
        return rows_to_books(self.list_book_rows())

    def get_book(self, book_id: int, include_deleted: bool = False) -> Optional[Book]:
        return row_to_book(self.get_book_row(book_id, include_deleted=include_deleted))

    def create_book(self, payload: CreateBook) -> Book:
        return row_to_book(self.create_book_row(payload))

    def update_book(self, book_id: int, changes: UpdateBook) -> Optional[Book]:
        return row_to_book(self.update_book_row(book_id, changes))

    def list_categories(self) -> list[Category]:
        with self.database.reader() as session:
            records = session.execute(select(CategoryRecord).order_by(CategoryRecord.id)).scalars().all()
            return [Category.model_validate(record) for record in records]

    def list_authors(self) -> list[Author]:
        with self.database.reader() as session:
            records = session.execute(select(AuthorRecord).order_by(AuthorRecord.id)).scalars().all()
            return [Author.model_validate(record) for record in records]
