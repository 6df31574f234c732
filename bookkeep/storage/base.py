"""Store interfaces

Users and books are kept in a document store. Implement these interfaces to
swap the backend (in-memory for development, Supabase for deployment).

Every record returned by a store is a plain dict whose identifier lives under
the ``id`` key, whatever the backend calls it natively.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class StoreError(Exception):
    """The backing store failed or is unreachable."""


class DuplicateKeyError(StoreError):
    """A unique field (e.g. email) is already taken."""


class UserStore(ABC):
    """Credential store"""

    @abstractmethod
    async def create_user(self, username: str, email: str, password_hash: str) -> Dict[str, Any]:
        """Persist a new user.

        Raises:
            DuplicateKeyError: If the email is already registered
        """
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        pass


class BookStore(ABC):
    """Book record store

    Reads and writes on a single record always match on (id AND owner) in
    one store call; a record is never fetched by id first and checked later.
    """

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        """Books owned by ``owner_id``, newest ``dateAdded`` first."""
        pass

    @abstractmethod
    async def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new record and return it with a server-assigned ``id``."""
        pass

    @abstractmethod
    async def update_owned(
        self, book_id: str, owner_id: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Apply ``changes`` to the record matching (id, owner).

        Returns:
            The updated record, or None when nothing matched
        """
        pass

    @abstractmethod
    async def delete_owned(self, book_id: str, owner_id: str) -> Optional[Dict[str, Any]]:
        """Remove the record matching (id, owner).

        Returns:
            The removed record, or None when nothing matched
        """
        pass
