"""
In-memory session registry.

Maps opaque tokens to the phone number that authenticated and the time it
did so. Sessions live for a fixed window from login (no sliding renewal).
Expiry is pull-based: an expired entry is evicted the next time its token
is checked, or when ``purge_expired`` is called explicitly. Nothing runs in
the background, so tokens that are never presented again stay in memory
until the process restarts.
"""
import secrets
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from core.exceptions import ExpiredSessionError, InvalidSessionError
from core.logger import mask_phone, setup_logger
from core.schema import SessionEntry

logger = setup_logger(__name__)

DEFAULT_TTL = timedelta(hours=24)
DEFAULT_TOKEN_BYTES = 32

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionRegistry:
    """Thread-safe token -> SessionEntry map with a fixed time-to-live."""

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        clock: Clock = utc_now,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
    ):
        self.ttl = ttl
        self.clock = clock
        self.token_bytes = token_bytes
        self._sessions: Dict[str, SessionEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def new_token(self) -> str:
        return secrets.token_urlsafe(self.token_bytes)

    def create_session(self, phone_number: str) -> str:
        """
        Mint a token for an authenticated phone number.

        Tokens are not checked against existing ones; a collision would
        overwrite the earlier entry.

        Args:
            phone_number: Normalized phone number

        Returns:
            The new session token
        """
        token = self.new_token()
        self.store(SessionEntry(
            token=token,
            phone_number=phone_number,
            authenticated_at=self.clock(),
        ))
        logger.info(f"Session created for {mask_phone(phone_number)}")
        return token

    def store(self, entry: SessionEntry) -> None:
        """Insert or overwrite an entry as is."""
        with self._lock:
            self._sessions[entry.token] = entry

    def is_expired(self, entry: SessionEntry, now: Optional[datetime] = None) -> bool:
        now = now or self.clock()
        return now - entry.authenticated_at > self.ttl

    def validate_session(self, token: str) -> SessionEntry:
        """
        Look up a live session.

        Args:
            token: Session token presented by the client

        Returns:
            The stored entry, unchanged

        Raises:
            InvalidSessionError: If no session exists for the token
            ExpiredSessionError: If the session is older than the TTL (it is evicted)
        """
        with self._lock:
            entry = self._sessions.get(token)
            if entry is None:
                raise InvalidSessionError("Sesión inválida")

            if self.is_expired(entry):
                # pop tolerates a concurrent eviction of the same token
                self._sessions.pop(token, None)
                logger.info(f"Session expired for {mask_phone(entry.phone_number)}")
                raise ExpiredSessionError(
                    "Sesión expirada",
                    details={"authenticated_at": entry.authenticated_at.isoformat()}
                )

            return entry

    def purge_expired(self) -> int:
        """
        Evict every expired session.

        Returns:
            Number of sessions removed
        """
        now = self.clock()
        with self._lock:
            expired = [
                token for token, entry in self._sessions.items()
                if self.is_expired(entry, now)
            ]
            for token in expired:
                del self._sessions[token]

        if expired:
            logger.info(f"Purged {len(expired)} expired session(s)")
        return len(expired)
