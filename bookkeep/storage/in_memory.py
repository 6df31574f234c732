"""In-Memory stores

For development and tests. Data is lost when the process restarts.
Set ``STORAGE_BACKEND=supabase`` in production.

The coroutines never await, so each one runs to completion on the event
loop without interleaving; that is what makes the (id, owner) match and the
write a single atomic step here.
"""
import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .base import BookStore, DuplicateKeyError, UserStore


def _new_id() -> str:
    return uuid.uuid4().hex


class InMemoryUserStore(UserStore):
    """Dict-backed credential store keyed by user id"""

    def __init__(self):
        self._users: Dict[str, Dict[str, Any]] = {}
        self._by_email: Dict[str, str] = {}

    async def create_user(self, username: str, email: str, password_hash: str) -> Dict[str, Any]:
        if email in self._by_email:
            raise DuplicateKeyError("email already registered")
        user = {
            "id": _new_id(),
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "created_at": datetime.now(timezone.utc),
        }
        self._users[user["id"]] = user
        self._by_email[email] = user["id"]
        return dict(user)

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        user_id = self._by_email.get(email)
        return dict(self._users[user_id]) if user_id else None

    def count(self) -> int:
        """Number of registered users"""
        return len(self._users)


class InMemoryBookStore(BookStore):
    """Dict-backed book store keyed by book id"""

    def __init__(self):
        self._books: Dict[str, Dict[str, Any]] = {}

    def _match(self, book_id: str, owner_id: str) -> Optional[Dict[str, Any]]:
        book = self._books.get(book_id)
        if book is None or book["owner"] != owner_id:
            return None
        return book

    async def list_by_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        owned = [copy.deepcopy(b) for b in self._books.values() if b["owner"] == owner_id]
        owned.sort(key=lambda b: b["dateAdded"], reverse=True)
        return owned

    async def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        stored = copy.deepcopy(record)
        stored["id"] = _new_id()
        self._books[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def update_owned(
        self, book_id: str, owner_id: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        book = self._match(book_id, owner_id)
        if book is None:
            return None
        book.update(copy.deepcopy(changes))
        return copy.deepcopy(book)

    async def delete_owned(self, book_id: str, owner_id: str) -> Optional[Dict[str, Any]]:
        if self._match(book_id, owner_id) is None:
            return None
        return self._books.pop(book_id)

    def count(self) -> int:
        """Number of stored books across all owners"""
        return len(self._books)
