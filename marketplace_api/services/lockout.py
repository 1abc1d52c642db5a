"""
Per-email login lockout.

LoginAttemptTracker keeps one entry per email that has failed a login. An entry
is created on the first failure with a counter of 1 and the lock check only
runs for entries that already existed, so with the default threshold of 5 the
fifth consecutive failure locks the email. A locked email is rejected before
its credentials are checked until the unlock timer fires, which resets the
counter and clears the lock. A successful login resets the counter only.

State lives in process memory: it is not shared between workers and is lost
on restart.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional, TypeVar

from marketplace_api.core.errors import (
    TOO_MANY_ATTEMPTS_MESSAGE,
    WRONG_CREDENTIALS_MESSAGE,
    ApiError,
    ErrorType,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_FAILED_ATTEMPTS = 5
DEFAULT_LOCKOUT_SECONDS = 30 * 60


@dataclass
class LockoutEntry:
    """Consecutive failed logins and lock status of one email."""
    email: str
    failed_attempts: int = 0
    locked: bool = False
    unlock_handle: Optional[asyncio.TimerHandle] = field(default=None, repr=False, compare=False)


class LoginAttemptTracker:
    """
    Tracks failed logins per email and locks an email out for a fixed delay.

    Entries are never removed; the unlock timer only resets them.
    """

    def __init__(
        self,
        max_failed_attempts: int = DEFAULT_MAX_FAILED_ATTEMPTS,
        lockout_seconds: float = DEFAULT_LOCKOUT_SECONDS,
    ) -> None:
        if max_failed_attempts < 1:
            raise ValueError("max_failed_attempts must be at least 1")
        if lockout_seconds <= 0:
            raise ValueError("lockout_seconds must be positive")
        self.max_failed_attempts = max_failed_attempts
        self.lockout_seconds = lockout_seconds
        self._entries: Dict[str, LockoutEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, email: object) -> bool:
        return email in self._entries

    # PUBLIC_INTERFACE
    def get(self, email: str) -> Optional[LockoutEntry]:
        """Return the entry for an email, or None if it never failed a login."""
        return self._entries.get(email)

    # PUBLIC_INTERFACE
    def is_locked(self, email: str) -> bool:
        entry = self._entries.get(email)
        return entry is not None and entry.locked

    # PUBLIC_INTERFACE
    def ensure_not_locked(self, email: str) -> None:
        """Raise the lockout error if the email is currently locked."""
        if self.is_locked(email):
            logger.warning("Rejected login for locked out email %s", email)
            raise ApiError(ErrorType.FORBIDDEN, TOO_MANY_ATTEMPTS_MESSAGE)

    # PUBLIC_INTERFACE
    def record_failure(self, email: str) -> bool:
        """
        Count a failed login. Returns True when the email is locked after this failure.
        A failure on an already locked entry is not counted.

        Must be called from within a running event loop when it may lock,
        since the unlock is scheduled on that loop.
        """
        entry = self._entries.get(email)
        if entry is None:
            self._entries[email] = LockoutEntry(email=email, failed_attempts=1)
            return False

        if entry.locked:
            # Attempts that passed the lock check before another request locked the email.
            return True

        entry.failed_attempts += 1
        if entry.failed_attempts >= self.max_failed_attempts:
            self._lock(entry)
            return True
        return False

    # PUBLIC_INTERFACE
    def record_success(self, email: str) -> None:
        """Reset the failure counter. The locked flag is left to the unlock timer."""
        entry = self._entries.get(email)
        if entry is not None:
            entry.failed_attempts = 0

    # PUBLIC_INTERFACE
    def unlock(self, email: str) -> None:
        """Clear the lock and counter of an email; called by the unlock timer."""
        entry = self._entries.get(email)
        if entry is None:
            return
        if entry.unlock_handle is not None:
            entry.unlock_handle.cancel()
            entry.unlock_handle = None
        entry.failed_attempts = 0
        entry.locked = False
        logger.info("%s is no longer locked out", email)

    # PUBLIC_INTERFACE
    async def attempt(self, email: str, check: Callable[[], Awaitable[Optional[T]]]) -> T:
        """
        Run one login attempt for `email` through the lockout rules.

        `check` verifies the credentials and returns the login result, or None
        when they are wrong. Raises ApiError FORBIDDEN when the email is locked
        or this failure locks it, and INVALID_CREDENTIALS on other failures.
        """
        self.ensure_not_locked(email)

        result = await check()
        if result is None:
            if self.record_failure(email):
                raise ApiError(ErrorType.FORBIDDEN, TOO_MANY_ATTEMPTS_MESSAGE)
            raise ApiError(ErrorType.INVALID_CREDENTIALS, WRONG_CREDENTIALS_MESSAGE)

        self.record_success(email)
        return result

    # PUBLIC_INTERFACE
    def close(self) -> None:
        """Cancel pending unlock timers. Locked entries stay locked."""
        for entry in self._entries.values():
            if entry.unlock_handle is not None:
                entry.unlock_handle.cancel()
                entry.unlock_handle = None

    def _lock(self, entry: LockoutEntry) -> None:
        if entry.locked:
            return
        entry.locked = True
        loop = asyncio.get_running_loop()
        entry.unlock_handle = loop.call_later(self.lockout_seconds, self.unlock, entry.email)
        logger.warning(
            "Locked out %s after %d failed login attempts for %.0f seconds",
            entry.email,
            entry.failed_attempts,
            self.lockout_seconds,
        )
