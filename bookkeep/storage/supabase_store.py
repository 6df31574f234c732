"""Supabase-backed stores

Table schema (users):
    id: uuid, pk, default gen_random_uuid()
    username: text
    email: text, unique
    password_hash: text
    created_at: timestamptz, default now()

Table schema (books):
    id: uuid, pk, default gen_random_uuid()
    owner: uuid, fk users.id
    title, author, genre, status, cover_url, review: text
    total_pages, current_page, rating: int
    date_added, date_finished: timestamptz

Book records travel through the app with camelCase keys; the mapping to
column names happens only in this module.
"""
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import anyio
from loguru import logger
from supabase import Client, create_client

from .base import BookStore, DuplicateKeyError, StoreError, UserStore

# app field -> column
BOOK_COLUMNS: Dict[str, str] = {
    "id": "id",
    "owner": "owner",
    "title": "title",
    "author": "author",
    "totalPages": "total_pages",
    "currentPage": "current_page",
    "genre": "genre",
    "status": "status",
    "rating": "rating",
    "coverUrl": "cover_url",
    "review": "review",
    "dateAdded": "date_added",
    "dateFinished": "date_finished",
}
_BOOK_FIELDS = {column: field for field, column in BOOK_COLUMNS.items()}

UNIQUE_VIOLATION = "23505"


def _to_row(record: Dict[str, Any]) -> Dict[str, Any]:
    row = {}
    for field, value in record.items():
        if isinstance(value, datetime):
            value = value.isoformat()
        row[BOOK_COLUMNS[field]] = value
    return row


def _from_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {_BOOK_FIELDS[column]: value for column, value in row.items() if column in _BOOK_FIELDS}


def _is_uuid(value: str) -> bool:
    # Postgres rejects a malformed uuid filter outright; treat it as "no match".
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


class _SupabaseStore:
    """Shared plumbing: run blocking client calls off the event loop."""

    def __init__(self, client: Client):
        self.client = client

    async def _run(self, operation: str, call: Callable[[], Any]) -> Any:
        try:
            return await anyio.to_thread.run_sync(call)
        except Exception as e:
            if UNIQUE_VIOLATION in str(e):
                raise DuplicateKeyError(operation) from e
            logger.error(f"Supabase {operation} failed: {type(e).__name__}: {e}")
            raise StoreError(operation) from e


class SupabaseUserStore(_SupabaseStore, UserStore):
    """Credential store on the ``users`` table"""

    table = "users"

    async def create_user(self, username: str, email: str, password_hash: str) -> Dict[str, Any]:
        def _insert():
            return self.client.table(self.table).insert({
                "username": username,
                "email": email,
                "password_hash": password_hash,
            }).execute()

        result = await self._run("create_user", _insert)
        if not result.data:
            raise StoreError("create_user returned no row")
        return result.data[0]

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        def _select():
            return self.client.table(self.table).select("*").eq("email", email).limit(1).execute()

        result = await self._run("get_user_by_email", _select)
        return result.data[0] if result.data else None


class SupabaseBookStore(_SupabaseStore, BookStore):
    """Book store on the ``books`` table"""

    table = "books"

    async def list_by_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        def _select():
            return (
                self.client.table(self.table)
                .select("*")
                .eq("owner", owner_id)
                .order("date_added", desc=True)
                .execute()
            )

        result = await self._run("list_by_owner", _select)
        return [_from_row(row) for row in result.data or []]

    async def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        row = _to_row({k: v for k, v in record.items() if k != "id"})

        def _insert():
            return self.client.table(self.table).insert(row).execute()

        result = await self._run("insert", _insert)
        if not result.data:
            raise StoreError("insert returned no row")
        return _from_row(result.data[0])

    async def update_owned(
        self, book_id: str, owner_id: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        if not _is_uuid(book_id):
            return None
        row = _to_row(changes)

        def _update():
            query = self.client.table(self.table)
            # an empty patch is a read under the same predicate
            query = query.update(row) if row else query.select("*")
            return (
                query
                .eq("id", book_id)
                .eq("owner", owner_id)
                .execute()
            )

        result = await self._run("update_owned", _update)
        return _from_row(result.data[0]) if result.data else None

    async def delete_owned(self, book_id: str, owner_id: str) -> Optional[Dict[str, Any]]:
        if not _is_uuid(book_id):
            return None

        def _delete():
            return (
                self.client.table(self.table)
                .delete()
                .eq("id", book_id)
                .eq("owner", owner_id)
                .execute()
            )

        result = await self._run("delete_owned", _delete)
        return _from_row(result.data[0]) if result.data else None


def create_supabase_stores(url: str, key: str) -> tuple[SupabaseUserStore, SupabaseBookStore]:
    """Build both stores over one shared client."""
    client = create_client(url, key)
    return SupabaseUserStore(client), SupabaseBookStore(client)
