"""
Credential Service

Registration and login. Both return a freshly signed bearer token.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError

from booksy.exceptions import AuthError, ConflictError, ValidationError
from booksy.security import PasswordHasher, TokenService
from booksy.storage.models import UserRole
from booksy.storage.user_repository import StoredUser, UserRepository

INVALID_CREDENTIALS = "Invalid credentials"

_CONFLICT_MESSAGES = {
    "email": "Email already in use.",
    "username": "Username already taken.",
}


class CredentialService:
    """
    Account registration and authentication.

    Usage:
        service = CredentialService(users, PasswordHasher(), TokenService(secret))
        user, token = service.register("reader", "reader@example.com", "s3cret")
        token, user = service.login("reader@example.com", "s3cret")
    """

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
    ):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens

    def register(
        self,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> tuple[StoredUser, str]:
        """
        Create a USER account and sign a token for it.

        Raises:
            ValidationError: a field is blank.
            ConflictError: email or username already registered.
        """
        username = (username or "").strip()
        email = (email or "").strip()

        if not username or not email or not password or not password.strip():
            raise ValidationError("Username, email, and password are required.")

        # Fast path only; the unique constraints decide under a race.
        taken = self.users.find_conflict(email, username)
        if taken:
            raise ConflictError(_CONFLICT_MESSAGES[taken])

        password_hash = self.hasher.hash(password)

        try:
            user = self.users.create(
                email=email,
                username=username,
                password_hash=password_hash,
                role=UserRole.USER,
            )
        except IntegrityError:
            logger.warning(f"Registration lost a uniqueness race for {email}")
            raise ConflictError("Email or username already in use.") from None

        logger.info(f"Registered user {user.id} ({user.username})")
        return user, self.tokens.issue(user.id, user.role)

    def login(self, email: Optional[str], password: Optional[str]) -> tuple[str, StoredUser]:
        """
        Authenticate by email and password.

        Unknown email, inactive account and wrong password all raise the
        same error.

        Raises:
            ValidationError: a field is blank.
            AuthError: invalid credentials.
        """
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Email and password are required.")

        credentials = self.users.get_credentials(email)
        if credentials is None:
            self.hasher.dummy_verify()
            logger.info("Login failed: unknown or inactive account")
            raise AuthError(INVALID_CREDENTIALS)

        if not self.hasher.verify(password, credentials.password_hash):
            logger.info(f"Login failed: bad password for user {credentials.user.id}")
            raise AuthError(INVALID_CREDENTIALS)

        user = credentials.user
        return self.tokens.issue(user.id, user.role), user
