"""
Session state for the API client.

``AuthSessionManager`` owns the access/refresh token pair and the refresh
state machine (IDLE / REFRESHING). It is created once per process and
handed to every client that should share the session.

Only one refresh runs at a time. Requests that need a new token while a
refresh is in flight wait in a FIFO queue and are woken with the refresh
result: the new session, or one AuthExpiredError shared by all of them.

The manager is meant for a single event loop. The REFRESHING flag is set
before the first ``await`` and cleared in ``finally``, so no other task
can observe a half-started refresh.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .exceptions import AuthExpiredError

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = 'Session expired. Please log in again.'


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str


class TokenStore:
    """In-memory token storage. Both tokens are always replaced together."""

    def __init__(self, session: Optional[AuthSession] = None):
        self._session = session

    def get(self) -> Optional[AuthSession]:
        return self._session

    def set(self, session: AuthSession) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = None


class AuthSessionManager:
    """
    Single-flight token refresh shared by every request of a process.

    Args:
        store: Token storage (default: a fresh in-memory TokenStore)
        on_session_expired: Called with the reason when the session is torn
            down because it could not be recovered. Use it to send the user
            back to the login screen.
    """

    def __init__(
        self,
        store: Optional[TokenStore] = None,
        *,
        on_session_expired: Optional[Callable[[str], None]] = None,
    ):
        self.store = store or TokenStore()
        self.on_session_expired = on_session_expired
        self._refreshing = False
        self._waiters = deque()

    @property
    def session(self) -> Optional[AuthSession]:
        return self.store.get()

    @property
    def access_token(self) -> Optional[str]:
        session = self.store.get()
        return session.access_token if session else None

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    def start(self, session: AuthSession) -> None:
        """Store the tokens of a fresh login."""
        self.store.set(session)

    def end(self) -> None:
        """Forget the session after a deliberate logout."""
        self.store.clear()

    def expire(self, reason: str = SESSION_EXPIRED_MESSAGE) -> None:
        """Tear the session down and signal that the user must log in again."""
        had_session = self.store.get() is not None
        self.store.clear()
        logger.info("Session torn down: %s", reason)
        if had_session and self.on_session_expired is not None:
            self.on_session_expired(reason)

    async def refresh(
        self,
        refresh_call: Callable[[str], Awaitable[AuthSession]],
    ) -> AuthSession:
        """
        Get a new token pair, joining the refresh already in flight if any.

        Args:
            refresh_call: Coroutine function exchanging a refresh token for
                a new AuthSession. Only the first caller's function runs.

        Returns:
            The new AuthSession

        Raises:
            AuthExpiredError: No session to refresh, or the refresh failed.
                On failure the session is torn down and every waiting
                request gets the same error.
        """
        if self._refreshing:
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            return await waiter

        current = self.store.get()
        if current is None:
            raise AuthExpiredError(SESSION_EXPIRED_MESSAGE, status=401)

        self._refreshing = True
        try:
            logger.info("Refreshing access token")
            try:
                session = await refresh_call(current.refresh_token)
            except Exception as e:
                logger.warning("Token refresh failed: %s", e)
                error = AuthExpiredError(SESSION_EXPIRED_MESSAGE, status=401)
                self._wake(error=error)
                self.expire(str(e) or SESSION_EXPIRED_MESSAGE)
                raise error from e

            self.store.set(session)
            logger.info("Access token refreshed, replaying %d queued request(s)", len(self._waiters))
            self._wake(session=session)
            return session
        finally:
            self._refreshing = False
            if self._waiters:
                # Refresh was cancelled before it settled
                self._wake(error=AuthExpiredError(SESSION_EXPIRED_MESSAGE, status=401))

    def _wake(self, *, session: Optional[AuthSession] = None, error: Optional[Exception] = None) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if waiter.done():
                continue
            if error is not None:
                waiter.set_exception(error)
            else:
                waiter.set_result(session)
