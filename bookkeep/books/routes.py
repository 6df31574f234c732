from typing import List

from fastapi import APIRouter, Depends, Request, status

from bookkeep.auth.dependencies import get_current_user_id, require_identity
from bookkeep.auth.schemas import MessageResponse
from bookkeep.errors import InternalFailure
from bookkeep.storage import BookStore

from .schemas import BookCreateRequest, BookResponse, BookUpdateRequest
from .service import BookService

# Every route here is owner-scoped, so the bearer check sits on the router.
router = APIRouter(prefix="/books", tags=["books"], dependencies=[Depends(require_identity)])


def get_book_service(request: Request) -> BookService:
    store: BookStore = getattr(request.app.state, "book_store", None)
    if store is None:
        raise InternalFailure("Storage not initialized")
    return BookService(store)


@router.get("", response_model=List[BookResponse])
async def get_books(
    user_id: str = Depends(get_current_user_id),
    service: BookService = Depends(get_book_service),
) -> List[BookResponse]:
    """Get all books for the current user, newest first."""
    return await service.list_books(user_id)


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    request_body: BookCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: BookService = Depends(get_book_service),
) -> BookResponse:
    """Create a new book owned by the current user."""
    return await service.create_book(user_id, request_body)


@router.patch("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: str,
    request_body: BookUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: BookService = Depends(get_book_service),
) -> BookResponse:
    """Update fields of a book the current user owns. 404 if not found or not theirs."""
    return await service.update_book(user_id, book_id, request_body)


@router.delete("/{book_id}", response_model=MessageResponse)
async def delete_book(
    book_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BookService = Depends(get_book_service),
) -> MessageResponse:
    """Delete a book the current user owns. 404 if not found or not theirs."""
    await service.delete_book(user_id, book_id)
    return MessageResponse(message="Book deleted")
