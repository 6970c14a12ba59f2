"""
Authenticated HTTP client for the KMJ billing API.

Every request carries ``Authorization: Bearer <access token>``. When the
server answers 401 the client decides, from the response message, whether
the access token merely expired (refresh once and retry) or the failure is
final (surface it, and tear the session down when it is gone for good).

    sessions = AuthSessionManager(on_session_expired=show_login)
    async with AuthenticatedClient(session_manager=sessions) as client:
        await client.login('1/74', 'secret')
        bills = await client.get('/bills/', params={'limit': 5})
"""

import logging
from typing import Optional

import httpx

from . import config
from .exceptions import (
    ApiClientError,
    ApiConnectionError,
    ApiRequestError,
    AuthExpiredError,
    AuthInvalidError,
    AuthorizationDeniedError,
)
from .session import AuthSession, AuthSessionManager, SESSION_EXPIRED_MESSAGE

logger = logging.getLogger(__name__)

# Lower-cased fragments of 401 messages
SESSION_EXPIRED_MARKERS = ('session expired', 'session has expired', 'session is expired')
TOKEN_MARKERS = ('token', 'jwt', 'not authenticated', 'authentication credentials')
TOKEN_ERROR_CODES = ('token_not_valid', 'not_authenticated')

# How a 401 is handled
EXPIRED = 'expired'
REFRESHABLE = 'refreshable'
INVALID = 'invalid'


def classify_unauthorized(message: str, code: Optional[str] = None) -> str:
    """
    Decide what a 401 means.

    Returns:
        EXPIRED when the server says the session itself is over,
        REFRESHABLE when the access token is missing, invalid or expired,
        INVALID for anything else (wrong credentials and the like).
    """
    text = (message or '').lower()
    if any(marker in text for marker in SESSION_EXPIRED_MARKERS):
        return EXPIRED
    if code in TOKEN_ERROR_CODES or any(marker in text for marker in TOKEN_MARKERS):
        return REFRESHABLE
    return INVALID


def _body(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _message(response: httpx.Response, body: dict) -> str:
    return str(body.get('message') or body.get('detail') or response.reason_phrase or 'An error occurred')


class AuthenticatedClient:
    """
    Async JSON client with transparent, single-flight token refresh.

    Args:
        base_url: API root, e.g. ``https://kmj.example.org/api``
        session_manager: Shared session state (one per process)
        timeout: Request timeout in seconds
        refresh_path: Path of the token refresh endpoint
        transport: Optional httpx transport (tests use MockTransport)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session_manager: Optional[AuthSessionManager] = None,
        timeout: Optional[float] = None,
        refresh_path: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or config.API_BASE_URL).rstrip('/')
        self.sessions = session_manager or AuthSessionManager()
        self.refresh_path = refresh_path or config.REFRESH_PATH
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else config.API_TIMEOUT,
            transport=transport,
            headers={'Accept': 'application/json'},
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # =========================================================================
    # Session
    # =========================================================================

    async def login(self, member_id: str, password: str) -> dict:
        """
        Log in and start a session.

        Returns:
            The user profile from the login response

        Raises:
            AuthInvalidError: Wrong Mahal ID or password
            AuthorizationDeniedError: Account deactivated
        """
        data = await self.request(
            'POST',
            config.LOGIN_PATH,
            json={'memberId': member_id, 'password': password},
            authenticate=False,
        )
        self.sessions.start(AuthSession(data['token'], data['refreshToken']))
        logger.info("Logged in as %s", member_id)
        return data.get('user', {})

    async def logout(self) -> None:
        """Tell the server, then forget the tokens even if the call failed."""
        session = self.sessions.session
        try:
            if session is not None:
                response = await self._send(
                    'POST', config.LOGOUT_PATH, json=None, params=None, token=session.access_token
                )
                self._unwrap(response)
        except ApiClientError as e:
            logger.info("Logout request failed, clearing session anyway: %s", e)
        finally:
            self.sessions.end()

    async def _refresh_tokens(self, refresh_token: str) -> AuthSession:
        data = await self.request(
            'POST',
            self.refresh_path,
            json={'refreshToken': refresh_token},
            authenticate=False,
        )
        try:
            return AuthSession(data['token'], data['refreshToken'])
        except (KeyError, TypeError):
            raise ApiRequestError("Malformed token refresh response", status=200)

    # =========================================================================
    # Requests
    # =========================================================================

    async def get(self, path: str, **kwargs):
        return await self.request('GET', path, **kwargs)

    async def post(self, path: str, **kwargs):
        return await self.request('POST', path, **kwargs)

    async def patch(self, path: str, **kwargs):
        return await self.request('PATCH', path, **kwargs)

    async def delete(self, path: str, **kwargs):
        return await self.request('DELETE', path, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json=None,
        params: Optional[dict] = None,
        authenticate: bool = True,
    ):
        """
        Send a request and return the decoded JSON body.

        An authenticated request that gets a token-related 401 is retried at
        most once, after a refresh (or with a token another request already
        refreshed).

        Args:
            method: HTTP method
            path: Path below the API root
            json: JSON body
            params: Query parameters
            authenticate: Attach the bearer token and handle 401s

        Raises:
            AuthExpiredError: Session gone; torn down and signalled
            AuthInvalidError: 401 that is not about the token
            AuthorizationDeniedError: 403
            ApiRequestError: Other 4xx/5xx
            ApiConnectionError: Network failure or timeout
        """
        retried = False

        while True:
            token = self.sessions.access_token if authenticate else None
            response = await self._send(method, path, json=json, params=params, token=token)

            if response.status_code != 401 or not authenticate:
                return self._unwrap(response)

            body = _body(response)
            message = _message(response, body)
            kind = classify_unauthorized(message, body.get('code'))

            if kind == INVALID:
                raise AuthInvalidError(message, status=401, errors=body.get('errors'))

            if kind == EXPIRED or retried or self.sessions.session is None:
                self.sessions.expire(message)
                raise AuthExpiredError(message or SESSION_EXPIRED_MESSAGE, status=401)

            retried = True
            if token is not None and self.sessions.access_token != token:
                # Another request refreshed while this one was in flight
                continue

            await self.sessions.refresh(self._refresh_tokens)

    async def _send(self, method, path, *, json, params, token) -> httpx.Response:
        headers = {'Authorization': f'Bearer {token}'} if token else None
        try:
            return await self._http.request(method, path, json=json, params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise ApiConnectionError(f"Request to {path} timed out") from e
        except httpx.TransportError as e:
            raise ApiConnectionError(f"Could not reach the server: {e}") from e

    def _unwrap(self, response: httpx.Response):
        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise ApiRequestError(
                    "Malformed response from the server", status=response.status_code
                ) from e

        body = _body(response)
        message = _message(response, body)
        errors = body.get('errors')
        status = response.status_code

        if status == 401:
            raise AuthInvalidError(message, status=status, errors=errors)
        if status == 403:
            raise AuthorizationDeniedError(message, status=status, errors=errors)
        raise ApiRequestError(message, status=status, errors=errors)
