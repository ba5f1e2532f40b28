from typing import Optional

import strawberry
from fastapi import Depends
from starlette.concurrency import run_in_threadpool
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from . import models
from .deps import get_repository
from .repository import BookRepository


@strawberry.type
class Category:
    id: strawberry.ID
    name: str

    @classmethod
    def from_model(cls, category: Optional[models.Category]) -> Optional["Category"]:
        if category is None:
            return None
        return cls(id=strawberry.ID(str(category.id)), name=category.name)


@strawberry.type
class Author:
    id: strawberry.ID
    name: str
    birthday: Optional[str]
    address: Optional[str]

    @classmethod
    def from_model(cls, author: Optional[models.Author]) -> Optional["Author"]:
        if author is None:
            return None
        return cls(
            id=strawberry.ID(str(author.id)),
            name=author.name,
            birthday=author.birthday,
            address=author.address,
        )


@strawberry.type
class BookDetail:
    id: strawberry.ID
    price: float
    comment: Optional[str]


@strawberry.type
class Book:
    id: strawberry.ID
    title: str
    category_id: Optional[int]
    author_id: Optional[int]
    category: Optional[Category]
    author: Optional[Author]
    reg_date: Optional[str]
    del_flg: Optional[bool]
    details: Optional[BookDetail]

    @classmethod
    def from_model(cls, book: Optional[models.Book]) -> Optional["Book"]:
        if book is None:
            return None
        details = None
        if book.details is not None:
            details = BookDetail(
                id=strawberry.ID(str(book.details.id)),
                price=float(book.details.price),
                comment=book.details.comment,
            )
        return cls(
            id=strawberry.ID(str(book.id)),
            title=book.title,
            category_id=book.category_id,
            author_id=book.author_id,
            category=Category.from_model(book.category),
            author=Author.from_model(book.author),
            reg_date=book.reg_date.isoformat() if book.reg_date else None,
            del_flg=book.del_flg,
            details=details,
        )


def _repository(info: Info) -> BookRepository:
    return info.context["repository"]


# Resolvers are async so the blocking repository calls run in the threadpool,
# as FastAPI does for the sync REST routes, instead of on the event loop.
@strawberry.type
class Query:
    @strawberry.field
    async def books(self, info: Info) -> Optional[list[Optional[Book]]]:
        books = await run_in_threadpool(_repository(info).list_books)
        return [Book.from_model(book) for book in books]

    @strawberry.field
    async def book(self, info: Info, id: strawberry.ID) -> Optional[Book]:
        return Book.from_model(await run_in_threadpool(_repository(info).get_book, int(id)))

    @strawberry.field
    async def authors(self, info: Info) -> Optional[list[Optional[Author]]]:
        authors = await run_in_threadpool(_repository(info).list_authors)
        return [Author.from_model(author) for author in authors]

    @strawberry.field
    async def categories(self, info: Info) -> Optional[list[Optional[Category]]]:
        categories = await run_in_threadpool(_repository(info).list_categories)
        return [Category.from_model(category) for category in categories]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create_book(
        self,
        info: Info,
        title: str,
        category_id: int,
        author_id: int,
        price: float,
        comment: Optional[str] = None,
    ) -> Optional[Book]:
        payload = models.CreateBook(
            title=title, category_id=category_id, author_id=author_id, price=price, comment=comment
        )
        return Book.from_model(await run_in_threadpool(_repository(info).create_book, payload))

    @strawberry.mutation
    async def update_book(
        self,
        info: Info,
        id: strawberry.ID,
        title: Optional[str] = None,
        category_id: Optional[int] = None,
        author_id: Optional[int] = None,
        price: Optional[float] = None,
        comment: Optional[str] = None,
    ) -> Optional[Book]:
        changes = models.UpdateBook(
            title=title, category_id=category_id, author_id=author_id, price=price, comment=comment
        )
        return Book.from_model(await run_in_threadpool(_repository(info).update_book, int(id), changes))

    @strawberry.mutation
    async def delete_book(self, info: Info, id: strawberry.ID) -> Optional[bool]:
        return await run_in_threadpool(_repository(info).delete_book, int(id))


schema = strawberry.Schema(query=Query, mutation=Mutation)


async def get_context(repository: BookRepository = Depends(get_repository)) -> dict:
    return {"repository": repository}


def create_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context)
