"""Owner-scoped book operations.

The owner always comes from the verified identity passed in by the route,
never from the request body. Reads and writes on one record match on
(id AND owner) inside a single store call, so a record owned by someone else
is indistinguishable from one that does not exist.
"""

from datetime import datetime, timezone
from typing import List

from loguru import logger

from bookkeep.errors import InternalFailure, NotFoundOrForbidden
from bookkeep.storage import BookStore, StoreError

from .schemas import BookCreateRequest, BookResponse, BookUpdateRequest


class BookService:
    """CRUD over one user's book collection."""

    def __init__(self, store: BookStore):
        self.store = store

    async def list_books(self, owner_id: str) -> List[BookResponse]:
        """All books owned by ``owner_id``, newest first."""
        try:
            records = await self.store.list_by_owner(owner_id)
        except StoreError:
            raise InternalFailure("Failed to retrieve books") from None

        logger.info(f"Retrieved {len(records)} books for user {owner_id}")
        return [BookResponse.model_validate(r) for r in records]

    async def create_book(self, owner_id: str, request: BookCreateRequest) -> BookResponse:
        """Stamp owner and creation time, persist, return the stored record."""
        record = request.model_dump(by_alias=True)
        record["owner"] = owner_id
        record["dateAdded"] = datetime.now(timezone.utc)

        try:
            stored = await self.store.insert(record)
        except StoreError:
            raise InternalFailure("Failed to create book") from None

        logger.info(f"Created book {stored['id']} for user {owner_id}")
        return BookResponse.model_validate(stored)

    async def update_book(self, owner_id: str, book_id: str, request: BookUpdateRequest) -> BookResponse:
        """
        Apply a partial update to a book the caller owns.

        Raises:
            NotFoundOrForbidden: If no book matches (id, owner)
        """
        try:
            updated = await self.store.update_owned(book_id, owner_id, request.changes())
        except StoreError:
            raise InternalFailure("Failed to update book") from None

        if updated is None:
            raise NotFoundOrForbidden()

        logger.info(f"Updated book {book_id} for user {owner_id}")
        return BookResponse.model_validate(updated)

    async def delete_book(self, owner_id: str, book_id: str) -> None:
        """
        Delete a book the caller owns.

        Raises:
            NotFoundOrForbidden: If no book matches (id, owner)
        """
        try:
            deleted = await self.store.delete_owned(book_id, owner_id)
        except StoreError:
            raise InternalFailure("Failed to delete book") from None

        if deleted is None:
            raise NotFoundOrForbidden()

        logger.info(f"Deleted book {book_id} for user {owner_id}")
