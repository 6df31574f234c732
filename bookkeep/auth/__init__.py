"""Authentication module for bookkeep."""

from .dependencies import (
    get_auth_service,
    get_current_user_id,
    get_jwt_handler,
    get_user_store,
    require_identity,
)
from .jwt_handler import InvalidToken, JWTHandler
from .password import hash_password, verify_password
from .routes import router as auth_router
from .schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    UserSummary,
)
from .service import AuthService

__all__ = [
    # Router
    "auth_router",
    # Schemas
    "RegisterRequest",
    "LoginRequest",
    "LoginResponse",
    "UserSummary",
    "MessageResponse",
    # Core
    "JWTHandler",
    "InvalidToken",
    "hash_password",
    "verify_password",
    "AuthService",
    # Dependencies
    "get_jwt_handler",
    "get_user_store",
    "get_auth_service",
    "require_identity",
    "get_current_user_id",
]
