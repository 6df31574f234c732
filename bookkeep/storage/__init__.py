"""Persistence for users and book records."""

from .base import BookStore, DuplicateKeyError, StoreError, UserStore
from .in_memory import InMemoryBookStore, InMemoryUserStore

__all__ = [
    "UserStore",
    "BookStore",
    "StoreError",
    "DuplicateKeyError",
    "InMemoryUserStore",
    "InMemoryBookStore",
]
