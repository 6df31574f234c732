"""Client-side session and collection state

``BookContext`` is passed explicitly to whatever renders the dashboard,
library or analytics views. Views read its attributes and register a
callback with :meth:`BookContext.subscribe`; every change to the session or
the collection calls each callback with the context.

Consistency model:
    - Changing identity (login, logout, set_token) refetches the whole list.
    - ``update_book`` applies changes locally before the server answers. If
      the request fails the list is refetched; until that succeeds local
      state may differ from the server.
"""
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from .api import APIError, AuthenticationRequired, BookkeepAPI

Listener = Callable[["BookContext"], None]

DEFAULT_YEARLY_GOAL = 24


class PageCountError(ValueError):
    """``currentPage`` would exceed ``totalPages``."""


def check_page_counts(book: Dict[str, Any]) -> None:
    total = book.get("totalPages")
    current = book.get("currentPage") or 0
    if total is not None and current > total:
        raise PageCountError(f"Current page ({current}) cannot exceed total pages ({total})")


class BookContext:
    """Authenticated session plus the user's fetched book collection."""

    def __init__(self, api: BookkeepAPI, yearly_goal: int = DEFAULT_YEARLY_GOAL):
        self.api = api
        self.user: Optional[Dict[str, Any]] = None
        self.books: List[Dict[str, Any]] = []
        self.is_loading = False
        self.needs_login = True
        self.last_error: Optional[str] = None
        self._yearly_goal = yearly_goal
        self._listeners: List[Listener] = []

    # ---------------------------------------------------------- observers

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------ session

    @property
    def token(self) -> Optional[str]:
        return self.api.token

    @property
    def is_authenticated(self) -> bool:
        return self.api.token is not None

    def login(self, email: str, password: str) -> bool:
        """Log in and load the collection. Returns False and sets ``last_error`` on failure."""
        try:
            data = self.api.login(email, password)
        except APIError as e:
            self.last_error = e.message
            self._notify()
            return False
        self.user = data.get("user")
        self.needs_login = False
        self.last_error = None
        self.refresh()
        return True

    def logout(self) -> None:
        self.set_token(None)

    def set_token(self, token: Optional[str], user: Optional[Dict[str, Any]] = None) -> None:
        """Switch identity, e.g. a token restored from disk. Refetches the collection."""
        self.api.token = token
        self.user = user if token else None
        self.needs_login = token is None
        self.refresh()

    # --------------------------------------------------------- collection

    def refresh(self) -> None:
        """Replace local books with the server's list."""
        if not self.is_authenticated:
            self.books = []
            self.is_loading = False
            self._notify()
            return

        self.is_loading = True
        self._notify()
        try:
            data = self.api.list_books()
            self.books = data if isinstance(data, list) else []
            self.last_error = None
        except AuthenticationRequired:
            self._session_expired()
        except APIError as e:
            logger.error(f"Error fetching books: {e.message}")
            self.last_error = e.message
        finally:
            self.is_loading = False
            self._notify()

    def _session_expired(self) -> None:
        self.api.token = None
        self.user = None
        self.books = []
        self.needs_login = True
        self.last_error = "Session expired, please log in again"

    def get_book(self, book_id: str) -> Optional[Dict[str, Any]]:
        return next((b for b in self.books if b.get("id") == book_id), None)

    def add_book(self, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Create a book and put it first in the list."""
        check_page_counts(fields)
        try:
            book = self.api.create_book(fields)
        except AuthenticationRequired:
            self._session_expired()
            self._notify()
            return None
        except APIError as e:
            logger.error(f"Error adding book: {e.message}")
            self.last_error = e.message
            self._notify()
            return None
        self.books = [book] + self.books
        self.last_error = None
        self._notify()
        return book

    def update_book(self, book_id: str, changes: Dict[str, Any]) -> bool:
        """Optimistically update a book, then tell the server.

        Marking a book finished without a ``dateFinished`` stamps it now.
        """
        current = self.get_book(book_id)
        changes = dict(changes)
        if changes.get("status") == "finished" and not changes.get("dateFinished"):
            if not (current and current.get("dateFinished")):
                changes["dateFinished"] = datetime.now(timezone.utc).isoformat()
        if current is not None:
            check_page_counts({**current, **changes})

        self.books = [{**b, **changes} if b.get("id") == book_id else b for b in self.books]
        self._notify()

        try:
            self.api.update_book(book_id, changes)
        except AuthenticationRequired:
            self._session_expired()
            self._notify()
            return False
        except APIError as e:
            logger.error(f"Error updating book {book_id}: {e.message}")
            self.refresh()
            self.last_error = e.message
            self._notify()
            return False
        return True

    def delete_book(self, book_id: str) -> bool:
        try:
            self.api.delete_book(book_id)
        except AuthenticationRequired:
            self._session_expired()
            self._notify()
            return False
        except APIError as e:
            logger.error(f"Error deleting book {book_id}: {e.message}")
            self.last_error = e.message
            self._notify()
            return False
        self.books = [b for b in self.books if b.get("id") != book_id]
        self._notify()
        return True

    # --------------------------------------------------------------- goal

    @property
    def yearly_goal(self) -> int:
        return self._yearly_goal

    @yearly_goal.setter
    def yearly_goal(self, goal: int) -> None:
        if goal < 1:
            raise ValueError("Yearly goal must be at least 1")
        self._yearly_goal = goal
        self._notify()
