import asyncio
import pytest
from apps.client import (
    AuthExpiredError,
    AuthInvalidError,
    AuthSession,
    AuthSessionManager,
    TokenStore,
)


def test_token_store_swaps_both_tokens():
    store = TokenStore()
    assert store.get() is None

    store.set(AuthSession('a1', 'r1'))
    store.set(AuthSession('a2', 'r2'))

    assert store.get() == AuthSession('a2', 'r2')
    store.clear()
    assert store.get() is None


def test_expire_signals_only_when_a_session_existed():
    reasons = []
    manager = AuthSessionManager(on_session_expired=reasons.append)

    manager.expire('no session yet')
    assert reasons == []

    manager.start(AuthSession('a', 'r'))
    manager.expire('Session expired')
    assert reasons == ['Session expired']
    assert manager.session is None


def test_end_does_not_signal():
    reasons = []
    manager = AuthSessionManager(on_session_expired=reasons.append)
    manager.start(AuthSession('a', 'r'))

    manager.end()

    assert manager.session is None
    assert reasons == []


def test_refresh_without_session():
    manager = AuthSessionManager()

    async def never_called(refresh_token):
        raise AssertionError('refresh must not run')

    with pytest.raises(AuthExpiredError):
        asyncio.run(manager.refresh(never_called))


def test_concurrent_refreshes_share_one_call():
    manager = AuthSessionManager()
    manager.start(AuthSession('a0', 'r0'))
    calls = []

    async def refresh_call(refresh_token):
        calls.append(refresh_token)
        assert manager.is_refreshing
        await asyncio.sleep(0.01)
        return AuthSession('a1', 'r1')

    async def scenario():
        return await asyncio.gather(*(manager.refresh(refresh_call) for _ in range(5)))

    results = asyncio.run(scenario())

    assert calls == ['r0']
    assert results == [AuthSession('a1', 'r1')] * 5
    assert manager.session == AuthSession('a1', 'r1')
    assert not manager.is_refreshing


def test_failed_refresh_rejects_waiters_with_same_error():
    reasons = []
    manager = AuthSessionManager(on_session_expired=reasons.append)
    manager.start(AuthSession('a0', 'r0'))

    async def refresh_call(refresh_token):
        await asyncio.sleep(0.01)
        raise AuthInvalidError('Invalid or expired refresh token', status=401)

    async def scenario():
        return await asyncio.gather(
            *(manager.refresh(refresh_call) for _ in range(3)),
            return_exceptions=True,
        )

    results = asyncio.run(scenario())

    assert all(isinstance(r, AuthExpiredError) for r in results)
    assert len({id(r) for r in results}) == 1
    assert manager.session is None
    assert reasons == ['Invalid or expired refresh token']
    assert not manager.is_refreshing


def test_unexpected_refresh_error_still_wakes_waiters():
    reasons = []
    manager = AuthSessionManager(on_session_expired=reasons.append)
    manager.start(AuthSession('a0', 'r0'))

    async def refresh_call(refresh_token):
        await asyncio.sleep(0.01)
        raise ValueError('Expecting value: line 1 column 1 (char 0)')

    async def scenario():
        return await asyncio.wait_for(
            asyncio.gather(
                *(manager.refresh(refresh_call) for _ in range(3)),
                return_exceptions=True,
            ),
            timeout=1,
        )

    results = asyncio.run(scenario())

    assert all(isinstance(r, AuthExpiredError) for r in results)
    assert len({id(r) for r in results}) == 1
    assert manager.session is None
    assert len(reasons) == 1
    assert not manager.is_refreshing
