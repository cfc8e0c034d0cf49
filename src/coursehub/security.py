"""Password hashing and access tokens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from coursehub.config import Settings


class TokenError(Exception):
    """Raised when an access token is missing, malformed or expired."""


@dataclass(frozen=True)
class TokenClaims:
    """Claims carried by an access token."""

    user_id: str
    role: str
    expires_at: datetime


class PasswordHasher:
    """Salted password hashing backed by a passlib CryptContext."""

    def __init__(self, schemes: list[str] | None = None) -> None:
        self._context = CryptContext(schemes=schemes or ["pbkdf2_sha256"], deprecated="auto")

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            # Unrecognised hash format
            return False


class TokenService:
    """Issues and decodes signed bearer tokens."""

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.secret_key
        self._algorithm = settings.token_algorithm
        self._expires = timedelta(minutes=settings.access_token_expire_minutes)

    def create_access_token(
        self, user_id: str, role: str, expires_delta: timedelta | None = None
    ) -> str:
        """Create a token whose subject is the user ID.

        Args:
            user_id: The authenticated user's ID.
            role: The user's role at login time.
            expires_delta: Lifetime override. Defaults to the configured lifetime.

        Returns:
            Encoded JWT string.
        """
        expire = datetime.now(UTC) + (expires_delta or self._expires)
        payload = {"sub": user_id, "role": role, "exp": expire}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> TokenClaims:
        """Decode and verify a token.

        Raises:
            TokenError: If the signature is invalid, the token expired, or
                the subject is missing.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            raise TokenError("Could not validate credentials") from e

        user_id = payload.get("sub")
        if not user_id:
            raise TokenError("Token has no subject")

        return TokenClaims(
            user_id=user_id,
            role=payload.get("role", ""),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )
