"""Bearer gate middleware

Runs before routing, so a request to a protected path without a valid token
gets the uniform 401 even when its body would not parse. The route-level
``require_identity`` dependency still resolves the identity for handlers.
"""
from typing import Iterable, List

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from bookkeep.errors import InternalFailure, Unauthenticated, create_error_response

from .jwt_handler import InvalidToken


class BearerGateMiddleware(BaseHTTPMiddleware):
    """Reject unauthenticated requests under ``protected_prefixes``."""

    def __init__(self, app: ASGIApp, protected_prefixes: Iterable[str]):
        super().__init__(app)
        self.protected_prefixes: List[str] = [p.rstrip("/") for p in protected_prefixes]

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # CORS preflight carries no credentials
        if request.method == "OPTIONS" or not self._is_protected(request.url.path):
            return await call_next(request)

        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            return create_error_response(Unauthenticated())

        jwt_handler = getattr(request.app.state, "jwt_handler", None)
        if jwt_handler is None:
            logger.error("Token handler not initialized")
            return create_error_response(InternalFailure("Authentication service unavailable"))

        try:
            request.state.user_id = jwt_handler.verify(token)
        except InvalidToken:
            return create_error_response(Unauthenticated())

        return await call_next(request)

    def _is_protected(self, path: str) -> bool:
        return any(path == p or path.startswith(p + "/") for p in self.protected_prefixes)
