"""Session token issuing and verification."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from loguru import logger

from bookkeep.config import config


class InvalidToken(Exception):
    """Token rejected. The message never says why."""

    def __init__(self):
        super().__init__("Invalid token")


class JWTHandler:
    """Issues and verifies signed, short-lived identity tokens.

    There is no revocation list: a token stays valid until it expires.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None,
    ):
        self.secret_key = secret_key or config.JWT_SECRET_KEY
        self.algorithm = algorithm or config.JWT_ALGORITHM
        self.access_token_expire_minutes = access_token_expire_minutes or config.JWT_ACCESS_TOKEN_EXPIRE_MINUTES

        if not self.secret_key:
            logger.warning("JWT_SECRET_KEY not configured - authentication will not work")

    def issue(self, user_id: str) -> str:
        """
        Create a signed token for a user.

        Args:
            user_id: The user's unique identifier

        Returns:
            Encoded JWT
        """
        if not self.secret_key:
            raise RuntimeError("JWT_SECRET_KEY is not configured")
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "exp": now + timedelta(minutes=self.access_token_expire_minutes),
            "iat": now,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """
        Verify a token and return the identity it carries.

        Args:
            token: The JWT to verify

        Returns:
            The user id from the ``sub`` claim

        Raises:
            InvalidToken: If the token is expired, tampered with, malformed
                or has no subject. The cause is only logged.
        """
        if not token or not self.secret_key:
            raise InvalidToken()
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Token has expired")
            raise InvalidToken() from None
        except jwt.InvalidTokenError as e:
            logger.info(f"Invalid token: {type(e).__name__}")
            raise InvalidToken() from None

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            logger.info("Token has no usable subject")
            raise InvalidToken()
        return subject

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return self.access_token_expire_minutes * 60
