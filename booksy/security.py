"""
Password hashing and bearer token signing.

Tokens are HS256 JWTs whose payload carries the user id (``sub``) and role.
A token service cannot be built without a signing secret, so nothing is
ever signed with an empty key.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from booksy.exceptions import AuthError, ConfigurationError

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = 7


class PasswordHasher:
    """Salted bcrypt hashing."""

    def __init__(self, rounds: int = 12):
        self.context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self.context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        return self.context.verify(password, password_hash)

    def dummy_verify(self) -> None:
        """Spend the time of a real verification when there is no user."""
        self.context.dummy_verify()


@dataclass
class TokenClaims:
    """Verified identity claims."""

    user_id: str
    role: Optional[str]
    expires_at: datetime


class TokenService:
    """Issues and verifies bearer tokens."""

    def __init__(
        self,
        secret: Optional[str],
        expire_days: int = ACCESS_TOKEN_EXPIRE_DAYS,
        algorithm: str = ALGORITHM,
    ):
        if not secret or not secret.strip():
            raise ConfigurationError("JWT secret is not configured")

        self._secret = secret
        self.expire_delta = timedelta(days=expire_days)
        self.algorithm = algorithm

    def issue(self, user_id: str, role: str, now: Optional[datetime] = None) -> str:
        """Sign a token for ``user_id`` expiring ``expire_days`` from ``now``."""
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": user_id,
            "role": role,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expire_delta).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry.

        Raises:
            AuthError: expired, malformed, wrongly signed, or missing ``sub``.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JWTError:
            raise AuthError("Invalid token") from None

        user_id = payload.get("sub")
        expires = payload.get("exp")
        if not user_id or expires is None:
            raise AuthError("Invalid token")

        return TokenClaims(
            user_id=user_id,
            role=payload.get("role"),
            expires_at=datetime.fromtimestamp(expires, tz=timezone.utc),
        )
