"""In-memory CSRF token store.

Tokens are issued by GET /api/csrf-token and echoed back by the client in
the X-XSRF-TOKEN header (double-submit pattern). The store is process-local:
a token issued by one worker is unknown to every other worker.
"""

import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from fittrack.core.logging import get_logger

logger = get_logger("csrf_tokens")

# 32 random bytes = 256 bits of entropy
TOKEN_BYTES = 32
DEFAULT_TOKEN_TTL_SECONDS = 24 * 60 * 60


class TokenStatus(str, Enum):
    """Outcome of validating a submitted token."""

    VALID = "valid"
    MISSING = "missing"
    INVALID = "invalid"
    EXPIRED = "expired"
    USED = "used"


REJECTION_MESSAGES: dict[TokenStatus, str] = {
    TokenStatus.MISSING: "CSRF token missing",
    TokenStatus.INVALID: "Invalid CSRF token",
    TokenStatus.EXPIRED: "CSRF token expired",
    TokenStatus.USED: "CSRF token already used",
}


@dataclass
class CsrfTokenRecord:
    token: str
    created_at: float
    used: bool = False


class CsrfTokenStore:
    """Thread-safe token store with TTL expiry.

    Tokens are reusable until they expire unless ``one_time_use`` is set,
    in which case the first accepted request consumes the token.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        one_time_use: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.one_time_use = one_time_use
        self._clock = clock
        self._tokens: dict[str, CsrfTokenRecord] = {}
        # Tokens removed by the most recent sweep. A request that loses the
        # race against the sweep is reported as expired rather than invalid.
        self._swept: set[str] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    def _is_expired(self, record: CsrfTokenRecord, now: float) -> bool:
        return now - record.created_at > self.ttl_seconds

    def issue_token(self) -> str:
        """Generate, record and return a new token."""
        token = secrets.token_hex(TOKEN_BYTES)
        with self._lock:
            self._tokens[token] = CsrfTokenRecord(token=token, created_at=self._clock())
        return token

    def lookup(self, token: str) -> CsrfTokenRecord | None:
        """Return the stored record for a token, if any (expired or not)."""
        with self._lock:
            return self._tokens.get(token)

    def validate(self, token: str | None) -> TokenStatus:
        """Check a submitted token.

        Expired tokens are purged as a side effect. With one-time use
        enabled, a valid token is marked used and rejected afterwards.
        """
        if not token:
            return TokenStatus.MISSING

        with self._lock:
            record = self._tokens.get(token)
            if record is None:
                if token in self._swept:
                    return TokenStatus.EXPIRED
                return TokenStatus.INVALID

            if self._is_expired(record, self._clock()):
                del self._tokens[token]
                return TokenStatus.EXPIRED

            if self.one_time_use:
                if record.used:
                    return TokenStatus.USED
                record.used = True

            return TokenStatus.VALID

    def revoke(self, token: str) -> bool:
        """Remove a token. Returns True if it was present."""
        with self._lock:
            return self._tokens.pop(token, None) is not None

    def cleanup_expired(self) -> int:
        """Remove every token older than the TTL.

        Returns:
            Number of tokens removed
        """
        with self._lock:
            now = self._clock()
            expired = [t for t, record in self._tokens.items() if self._is_expired(record, now)]
            for token in expired:
                del self._tokens[token]
            self._swept = set(expired)

        if expired:
            logger.info(f"Removed {len(expired)} expired CSRF tokens")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()
            self._swept.clear()
