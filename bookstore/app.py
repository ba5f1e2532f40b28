import logging
import uuid
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .db import Database
from .deps import get_repository
from .errors import BookNotFound, BookstoreError
from .graphql_api import create_graphql_router
from .models import BookRow, CreateBook, Reference, UpdateBook
from .otel import configure_otel
from .repository import BookRepository

request_logger = logging.getLogger("bookstore.requests")

router = APIRouter(prefix="/api", tags=["books"])


@router.get("/health", tags=["health"])
def health() -> dict:
    return {"status": "ok"}


@router.get("/books", response_model=List[BookRow])
def list_books(repository: BookRepository = Depends(get_repository)) -> List[dict]:
    return repository.list_book_rows()


@router.get("/books/{book_id}", response_model=BookRow)
def get_book(book_id: int, repository: BookRepository = Depends(get_repository)) -> dict:
    row = repository.get_book_row(book_id)
    if row is None:
        raise BookNotFound(book_id)
    return row


@router.post("/books", response_model=BookRow, status_code=status.HTTP_201_CREATED)
def create_book(payload: CreateBook, repository: BookRepository = Depends(get_repository)) -> dict:
    return repository.create_book_row(payload)


@router.put("/books/{book_id}", response_model=BookRow)
def update_book(
    book_id: int, changes: UpdateBook, repository: BookRepository = Depends(get_repository)
) -> dict:
    row = repository.update_book_row(book_id, changes)
    if row is None:
        raise BookNotFound(book_id)
    return row


@router.delete("/books/{book_id}")
def delete_book(book_id: int, repository: BookRepository = Depends(get_repository)) -> dict:
    if not repository.delete_book(book_id):
        raise BookNotFound(book_id)
    return {"success": True}


@router.get("/categories", response_model=List[Reference], tags=["reference"])
def list_categories(repository: BookRepository = Depends(get_repository)) -> List[Reference]:
    return [Reference(id=category.id, name=category.name) for category in repository.list_categories()]


@router.get("/authors", response_model=List[Reference], tags=["reference"])
def list_authors(repository: BookRepository = Depends(get_repository)) -> List[Reference]:
    return [Reference(id=author.id, name=author.name) for author in repository.list_authors()]


async def book_not_found_handler(request: Request, exc: BookNotFound) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})


async def bookstore_error_handler(request: Request, exc: BookstoreError) -> JSONResponse:
    request_logger.error("request.failed", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(exc)})


def create_app(database: Optional[Database] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.getLogger("bookstore").setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "database", None) is None
        if owned:
            app.state.database = Database.from_settings(settings)
            if settings.create_schema:
                app.state.database.create_all()
            if telemetry is not None:
                telemetry.instrument_engine(app.state.database.engine)
        yield
        if owned:
            app.state.database.dispose()
        if telemetry is not None:
            telemetry.shutdown()

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Bookstore catalog served over REST and GraphQL.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    telemetry = configure_otel(app) if settings.otel_enabled else None
    app.state.telemetry = telemetry
    if database is not None:
        app.state.database = database
        if telemetry is not None:
            telemetry.instrument_engine(database.engine)

    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type"],
        )

    app.add_exception_handler(BookNotFound, book_not_found_handler)
    app.add_exception_handler(BookstoreError, bookstore_error_handler)

    app.include_router(router)
    app.include_router(create_graphql_router(), prefix="/graphql")

    @app.middleware("http")
    async def request_logging_middleware(request, call_next):
        request_logger.info("request.start", extra={"path": request.url.path, "method": request.method})
        response = await call_next(request)
        request_logger.info(
            "request.end",
            extra={"path": request.url.path, "method": request.method, "status": response.status_code},
        )
        return response

    @app.middleware("http")
    async def request_id_middleware(request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    return app


app = create_app()
