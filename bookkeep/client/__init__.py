"""Client state layer: API client, session/collection context, derived stats."""

from .api import APIError, AuthenticationRequired, BookkeepAPI, ResourceError
from .state import BookContext, PageCountError

__all__ = [
    "BookkeepAPI",
    "APIError",
    "AuthenticationRequired",
    "ResourceError",
    "BookContext",
    "PageCountError",
]
