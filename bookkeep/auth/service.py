"""Authentication service - registration and login."""

from typing import Optional

import anyio
from loguru import logger

from bookkeep.errors import Conflict, InternalFailure, InvalidCredentials
from bookkeep.storage import DuplicateKeyError, StoreError, UserStore

from .jwt_handler import JWTHandler
from .password import hash_password, verify_password
from .schemas import LoginRequest, LoginResponse, RegisterRequest, UserSummary


def public_user(user: dict) -> UserSummary:
    return UserSummary(id=str(user["id"]), username=user["username"], email=user["email"])


class AuthService:
    """Service class for authentication operations."""

    def __init__(self, store: UserStore, jwt_handler: Optional[JWTHandler] = None):
        """
        Initialize the auth service.

        Args:
            store: UserStore instance for credential persistence
            jwt_handler: JWTHandler instance (optional, creates default if not provided)
        """
        self.store = store
        self.jwt = jwt_handler or JWTHandler()

    async def register(self, request: RegisterRequest) -> UserSummary:
        """
        Register a new user.

        Args:
            request: Registration request with username, email and password

        Returns:
            Summary of the created user

        Raises:
            Conflict: If the email is already registered
            InternalFailure: If the store fails
        """
        try:
            if await self.store.get_user_by_email(request.email):
                raise Conflict()

            # bcrypt is CPU-bound; keep it off the event loop
            password_hash = await anyio.to_thread.run_sync(hash_password, request.password)
            user = await self.store.create_user(
                username=request.username,
                email=request.email,
                password_hash=password_hash,
            )
        except DuplicateKeyError:
            # lost a race with a concurrent registration of the same email
            raise Conflict() from None
        except StoreError:
            raise InternalFailure() from None

        logger.info(f"User registered: user_id={user['id']}")
        return public_user(user)

    async def login(self, request: LoginRequest) -> LoginResponse:
        """
        Authenticate a user with email and password.

        Args:
            request: Login request with email and password

        Returns:
            LoginResponse with a session token and the user summary

        Raises:
            InvalidCredentials: If the email is unknown or the password is wrong
        """
        try:
            user = await self.store.get_user_by_email(request.email)
        except StoreError:
            raise InternalFailure() from None

        valid = user is not None and await anyio.to_thread.run_sync(
            verify_password, request.password, user.get("password_hash") or ""
        )
        if not valid:
            logger.info("Login rejected: invalid credentials")
            raise InvalidCredentials()

        logger.info(f"User logged in: user_id={user['id']}")
        return LoginResponse(
            token=self.jwt.issue(str(user["id"])),
            expires_in=self.jwt.expires_in,
            user=public_user(user),
        )
