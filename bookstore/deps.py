from fastapi import Request

from .db import Database
from .repository import BookRepository


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_repository(request: Request) -> BookRepository:
    return BookRepository(get_database(request))
