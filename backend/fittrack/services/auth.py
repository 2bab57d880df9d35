"""Account registration and credential checks.

This is an in-memory stand-in for the session/auth subsystem. The CSRF and
rate-limit layers never consult it; they only sit in front of its routes.
"""

import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

logger = logging.getLogger(__name__)

# Argon2 password hasher with recommended parameters
# Memory: 64 MiB, Time: 3 iterations, Parallelism: 4
ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)


class AuthError(Exception):
    """Base authentication error."""

    pass


class InvalidCredentialsError(AuthError):
    """Invalid username or password."""

    pass


class AccountExistsError(AuthError):
    """Username is already taken."""

    pass


@dataclass
class User:
    id: int
    username: str
    password_hash: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    is_onboarded: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


class AuthService:
    """Thread-safe in-memory user registry."""

    def __init__(self, password_hasher: PasswordHasher = ph) -> None:
        self._hasher = password_hasher
        self._users: dict[str, User] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def register(
        self,
        username: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
    ) -> User:
        key = username.lower()
        password_hash = self._hasher.hash(password)

        with self._lock:
            if key in self._users:
                raise AccountExistsError(f"Username '{username}' is already taken")
            user = User(
                id=next(self._ids),
                username=username,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                email=email,
            )
            self._users[key] = user

        logger.info(f"Registered user {user.id}")
        return user

    def authenticate(self, username: str, password: str) -> User:
        with self._lock:
            user = self._users.get(username.lower())

        if user is None:
            # Hash anyway so unknown usernames take as long as wrong passwords
            self._hasher.hash(password)
            raise InvalidCredentialsError("Invalid username or password")

        try:
            self._hasher.verify(user.password_hash, password)
        except (VerifyMismatchError, InvalidHashError) as e:
            raise InvalidCredentialsError("Invalid username or password") from e

        return user
