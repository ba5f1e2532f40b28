from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import Settings
from .errors import RepositoryError, ResourceExhausted, WriteError

Base = declarative_base()


class Database:
    """Connection pool plus session factory for one relational store.

    Handed explicitly to the repository so every test can run against its own
    store instead of a process-wide engine.
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 0,
        pool_timeout: float = 30.0,
        echo: bool = False,
    ):
        self.url = url
        self.engine: Engine = create_engine(
            url,
            future=True,
            echo=echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
        )
        self.session_factory = sessionmaker(
            bind=self.engine, autoflush=False, autocommit=False, expire_on_commit=False
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
        )

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def reader(self) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
        except exc.TimeoutError as error:
            raise ResourceExhausted(str(error)) from error
        except exc.SQLAlchemyError as error:
            raise RepositoryError(str(error)) from error
        finally:
            session.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        # One session holds one pooled connection from first statement to close.
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except exc.TimeoutError as error:
            session.rollback()
            raise ResourceExhausted(str(error)) from error
        except exc.SQLAlchemyError as error:
            session.rollback()
            raise WriteError(str(error)) from error
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
