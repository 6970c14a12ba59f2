import asyncio
import json
import httpx
import pytest
from apps.client import AuthenticatedClient, AuthSession, AuthSessionManager

BASE_URL = 'http://testserver/api'

TOKEN_INVALID = {
    'message': 'Given token not valid for any token type',
    'code': 'token_not_valid',
}


class FakeServer:
    """
    In-process stand-in for the billing API.

    Only ``valid_token`` is accepted as a bearer token. A successful refresh
    rotates both tokens. Handlers yield to the event loop so concurrent
    requests interleave the way they do over a real network.
    """

    def __init__(self):
        self.valid_token = None
        self.refresh_token = 'refresh-0'
        self.generation = 0
        self.refresh_ok = True
        self.refresh_body = None
        self.accept_refreshed_tokens = True
        self.refresh_delay = 0.01
        self.refresh_calls = 0
        self.requests = []
        self.routes = {}

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        await asyncio.sleep(0)

        if path == '/api/auth/refresh-token':
            return await self._refresh(request)

        if path in self.routes:
            return self.routes[path](request)

        if request.headers.get('Authorization') != f'Bearer {self.valid_token}':
            return httpx.Response(401, json=TOKEN_INVALID)
        return httpx.Response(200, json={'path': path, 'token': self.valid_token})

    async def _refresh(self, request):
        self.refresh_calls += 1
        await asyncio.sleep(self.refresh_delay)

        body = json.loads(request.content)
        if not self.refresh_ok or body.get('refreshToken') != self.refresh_token:
            return httpx.Response(401, json={'message': 'Invalid or expired refresh token'})
        if self.refresh_body is not None:
            return httpx.Response(200, text=self.refresh_body)

        self.generation += 1
        token = f'access-{self.generation}'
        self.refresh_token = f'refresh-{self.generation}'
        if self.accept_refreshed_tokens:
            self.valid_token = token
        return httpx.Response(200, json={'token': token, 'refreshToken': self.refresh_token})


@pytest.fixture
def server():
    """Server whose current access token has expired."""
    return FakeServer()


@pytest.fixture
def expired_sessions():
    """Collects the reasons passed to on_session_expired."""
    return []


@pytest.fixture
def sessions(expired_sessions):
    """Session manager holding an expired access token."""
    manager = AuthSessionManager(on_session_expired=expired_sessions.append)
    manager.start(AuthSession('access-0', 'refresh-0'))
    return manager


@pytest.fixture
def make_client(server, sessions):
    """Build clients that share the session manager and talk to the fake server."""
    def _make():
        return AuthenticatedClient(
            BASE_URL,
            session_manager=sessions,
            transport=httpx.MockTransport(server),
        )
    return _make
