from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bookkeep.errors import InternalFailure, Unauthenticated
from bookkeep.storage import UserStore

from .jwt_handler import InvalidToken, JWTHandler
from .service import AuthService

# auto_error=False so a missing header goes through our uniform 401
bearer_scheme = HTTPBearer(auto_error=False)


def get_jwt_handler(request: Request) -> JWTHandler:
    handler = getattr(request.app.state, "jwt_handler", None)
    if handler is None:
        raise InternalFailure("Authentication service unavailable")
    return handler


def get_user_store(request: Request) -> UserStore:
    store = getattr(request.app.state, "user_store", None)
    if store is None:
        raise InternalFailure("Storage not initialized")
    return store


def get_auth_service(
    store: UserStore = Depends(get_user_store),
    jwt_handler: JWTHandler = Depends(get_jwt_handler),
) -> AuthService:
    return AuthService(store, jwt_handler)


def require_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_handler: JWTHandler = Depends(get_jwt_handler),
) -> str:
    """
    Gate for owner-scoped routes.

    Reads ``Authorization: Bearer <token>``, verifies it and stores the
    identity on ``request.state.user_id``. Every failure (no header, wrong
    scheme, bad token) is the same 401.
    """
    if credentials is None or not credentials.credentials.strip():
        raise Unauthenticated()

    try:
        user_id = jwt_handler.verify(credentials.credentials.strip())
    except InvalidToken:
        raise Unauthenticated() from None

    request.state.user_id = user_id
    return user_id


def get_current_user_id(user_id: str = Depends(require_identity)) -> str:
    """Identity resolved by :func:`require_identity`; cached per request."""
    return user_id
