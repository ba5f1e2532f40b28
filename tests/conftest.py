import httpx
import pytest

from bookstore.app import create_app
from bookstore.config import Settings
from bookstore.db import Database
from bookstore.entities import AuthorRecord, CategoryRecord
from bookstore.repository import BookRepository


@pytest.fixture()
def database(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'books.db'}", pool_size=5, max_overflow=5, pool_timeout=5)
    database.create_all()
    with database.transaction() as session:
        session.add_all(
            [
                CategoryRecord(id=1, name="Science Fiction"),
                CategoryRecord(id=2, name="Mystery"),
                AuthorRecord(id=1, name="Frank Herbert", birthday="1920-10-08", address="Tacoma"),
                AuthorRecord(id=2, name="Agatha Christie"),
            ]
        )
    yield database
    database.drop_all()
    database.dispose()


@pytest.fixture()
def repository(database):
    return BookRepository(database)


@pytest.fixture()
def app(database):
    return create_app(database=database, settings=Settings(database_url=database.url, create_schema=False))


@pytest.fixture()
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
