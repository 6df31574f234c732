"""Book records: schemas, owner-scoped service and routes."""

from .routes import router as books_router
from .schemas import BookCreateRequest, BookResponse, BookStatus, BookUpdateRequest, Genre
from .service import BookService

__all__ = [
    "books_router",
    "BookCreateRequest",
    "BookUpdateRequest",
    "BookResponse",
    "BookStatus",
    "Genre",
    "BookService",
]
