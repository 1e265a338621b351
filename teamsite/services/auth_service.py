"""Bearer tokens for the mutation API.

A single admin secret unlocks mutation. A successful login mints an opaque
token with a fixed lifetime; the registry keeps only an HMAC of each token,
keyed to its issue/expiry times, for the lifetime of the process.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from teamsite.core.errors import (
    AuthError,
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
)

logger = logging.getLogger(__name__)

TOKEN_TTL = timedelta(hours=24)


class TokenFailure(str, Enum):
    MISSING = "MissingToken"
    INVALID = "InvalidToken"
    EXPIRED = "ExpiredToken"


_FAILURE_ERRORS: dict[TokenFailure, type[AuthError]] = {
    TokenFailure.MISSING: MissingTokenError,
    TokenFailure.INVALID: InvalidTokenError,
    TokenFailure.EXPIRED: ExpiredTokenError,
}


@dataclass(frozen=True)
class IssuedToken:
    token: str
    issued_at: datetime
    expires_at: datetime

    @property
    def expires_in_ms(self) -> int:
        return int((self.expires_at - self.issued_at).total_seconds() * 1000)


@dataclass(frozen=True)
class TokenCheck:
    valid: bool
    reason: Optional[TokenFailure] = None

    def raise_for_failure(self) -> None:
        if self.reason is not None:
            raise _FAILURE_ERRORS[self.reason]()


@dataclass(frozen=True)
class _TokenRecord:
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenAuthority:
    """Issues, verifies and revokes bearer tokens.

    The registry is shared by every request; all access goes through
    ``self._lock`` so a verify can never observe a half-evicted entry.
    """

    def __init__(
        self,
        secret: str,
        signing_key: str,
        *,
        ttl: timedelta = TOKEN_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret = secret
        self._signing_key = signing_key.encode("utf-8")
        self.ttl = ttl
        self._clock = clock
        self._tokens: dict[str, _TokenRecord] = {}
        self._lock = threading.Lock()

    def _hash_token(self, token: str) -> str:
        return hmac.new(self._signing_key, token.encode("utf-8"), hashlib.sha256).hexdigest()

    def authenticate(self, secret: Optional[str]) -> IssuedToken:
        """Mint a token if ``secret`` matches the configured admin secret."""
        if not secret or not hmac.compare_digest(
            secret.encode("utf-8"), self._secret.encode("utf-8")
        ):
            logger.warning("Rejected admin login with invalid credentials")
            raise InvalidCredentialsError()

        now = self._clock()
        raw_token = secrets.token_urlsafe(32)
        record = _TokenRecord(issued_at=now, expires_at=now + self.ttl)
        with self._lock:
            self._tokens[self._hash_token(raw_token)] = record

        logger.info("Issued admin token")
        return IssuedToken(token=raw_token, issued_at=record.issued_at, expires_at=record.expires_at)

    def verify(self, token: Optional[str]) -> TokenCheck:
        """Check a presented token; expired tokens are evicted on sight."""
        if not token:
            return TokenCheck(valid=False, reason=TokenFailure.MISSING)

        key = self._hash_token(token)
        with self._lock:
            record = self._tokens.get(key)
            if record is None:
                return TokenCheck(valid=False, reason=TokenFailure.INVALID)
            if self._clock() > record.expires_at:
                del self._tokens[key]
                return TokenCheck(valid=False, reason=TokenFailure.EXPIRED)
        return TokenCheck(valid=True)

    def revoke(self, token: str) -> bool:
        """Forget a token (logout). Idempotent; returns True if it was active."""
        with self._lock:
            return self._tokens.pop(self._hash_token(token), None) is not None

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, record in self._tokens.items() if now > record.expires_at]
            for key in expired:
                del self._tokens[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


def parse_bearer(header: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not header or not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None
