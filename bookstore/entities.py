from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, false, func
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class CategoryRecord(Base):
    __tablename__ = "Categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class AuthorRecord(Base):
    __tablename__ = "Authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    birthday: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


class BookRecord(Base):
    __tablename__ = "Books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    # No FK constraints: writes accept ids that match no category or author.
    category_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    author_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    reg_date: Mapped[Optional[datetime]] = mapped_column(DateTime, server_default=func.now())
    del_flg: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false(), nullable=False)


class BookDetailRecord(Base):
    __tablename__ = "BookDetails"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[int] = mapped_column(Integer, ForeignKey("Books.id"), unique=True, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
