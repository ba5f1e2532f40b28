from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DomainModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Category(DomainModel):
    id: int
    name: str


class Author(DomainModel):
    id: int
    name: str
    birthday: Optional[str] = None
    address: Optional[str] = None


class BookDetail(DomainModel):
    id: int
    book_id: int
    price: Decimal
    comment: Optional[str] = None


class Book(DomainModel):
    id: int
    title: str
    category_id: Optional[int] = None
    author_id: Optional[int] = None
    reg_date: Optional[datetime] = None
    del_flg: bool = False
    category: Optional[Category] = None
    author: Optional[Author] = None
    details: Optional[BookDetail] = None


class CreateBook(DomainModel):
    title: str
    category_id: int
    author_id: int
    price: Decimal
    comment: Optional[str] = None


class UpdateBook(DomainModel):
    title: Optional[str] = None
    category_id: Optional[int] = None
    author_id: Optional[int] = None
    price: Optional[Decimal] = None
    comment: Optional[str] = None


class BookRow(BaseModel):
    """One joined row as the store returns it, keyed by column label."""

    id: int
    title: str
    category_id: Optional[int] = None
    author_id: Optional[int] = None
    reg_date: Optional[datetime] = None
    del_flg: bool = False
    joined_category_id: Optional[int] = None
    category_name: Optional[str] = None
    joined_author_id: Optional[int] = None
    author_name: Optional[str] = None
    birthday: Optional[str] = None
    address: Optional[str] = None
    detail_id: Optional[int] = None
    price: Optional[float] = None
    comment: Optional[str] = None


class Reference(BaseModel):
    id: int
    name: str
