"""Tests for AuthService."""

import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from bookkeep.auth.schemas import LoginRequest, RegisterRequest
from bookkeep.auth.service import AuthService
from bookkeep.errors import Conflict, InternalFailure, InvalidCredentials
from bookkeep.storage import DuplicateKeyError, StoreError, UserStore


@pytest.fixture
def service(user_store, jwt_handler):
    return AuthService(user_store, jwt_handler)


def _register(username="alice", email="a@x.com", password="pw1"):
    return RegisterRequest(username=username, email=email, password=password)


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_creates_user(self, service, user_store):
        summary = await service.register(_register())

        assert summary.username == "alice"
        assert summary.email == "a@x.com"
        assert summary.id
        stored = await user_store.get_user_by_email("a@x.com")
        assert stored["password_hash"] != "pw1"

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, service, user_store):
        await service.register(_register())

        with pytest.raises(Conflict):
            await service.register(_register(username="alice2", password="other"))
        assert user_store.count() == 1

    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, service, user_store):
        await service.register(_register(email="Alice@X.com"))

        with pytest.raises(Conflict):
            await service.register(_register(email="alice@x.com"))
        assert user_store.count() == 1

    @pytest.mark.asyncio
    async def test_store_duplicate_race_maps_to_conflict(self, jwt_handler):
        store = AsyncMock(spec=UserStore)
        store.get_user_by_email.return_value = None
        store.create_user.side_effect = DuplicateKeyError("create_user")

        with pytest.raises(Conflict):
            await AuthService(store, jwt_handler).register(_register())

    @pytest.mark.asyncio
    async def test_store_failure_is_internal(self, jwt_handler):
        store = AsyncMock(spec=UserStore)
        store.get_user_by_email.side_effect = StoreError("down")

        with pytest.raises(InternalFailure):
            await AuthService(store, jwt_handler).register(_register())


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_returns_token_and_summary(self, service, jwt_handler):
        created = await service.register(_register())

        result = await service.login(LoginRequest(email="a@x.com", password="pw1"))

        assert jwt_handler.verify(result.token) == created.id
        assert result.user.username == "alice"
        assert result.expires_in == jwt_handler.expires_in

    @pytest.mark.asyncio
    async def test_wrong_password(self, service):
        await service.register(_register())

        with pytest.raises(InvalidCredentials):
            await service.login(LoginRequest(email="a@x.com", password="nope"))

    @pytest.mark.asyncio
    async def test_unknown_email_looks_like_wrong_password(self, service):
        await service.register(_register())

        with pytest.raises(InvalidCredentials) as unknown:
            await service.login(LoginRequest(email="z@x.com", password="pw1"))
        with pytest.raises(InvalidCredentials) as wrong:
            await service.login(LoginRequest(email="a@x.com", password="bad"))

        assert unknown.value.message == wrong.value.message


async def _longest_stall(coro, tick: float = 0.01) -> float:
    """Run ``coro`` next to a ticker; return the longest gap between ticks."""
    gaps = []
    done = asyncio.Event()

    async def ticker():
        last = time.perf_counter()
        while not done.is_set():
            await asyncio.sleep(tick)
            now = time.perf_counter()
            gaps.append(now - last)
            last = now

    task = asyncio.create_task(ticker())
    try:
        await coro
    finally:
        done.set()
        await task
    return max(gaps, default=0.0)


def _slow(result):
    def call(*args):
        time.sleep(0.3)
        return result

    return call


class TestHashingOffEventLoop:
    """Password hashing must not stall other requests."""

    @pytest.mark.asyncio
    async def test_register_does_not_block_loop(self, service, monkeypatch):
        monkeypatch.setattr("bookkeep.auth.service.hash_password", _slow("hashed"))

        assert await _longest_stall(service.register(_register())) < 0.1

    @pytest.mark.asyncio
    async def test_login_does_not_block_loop(self, service, monkeypatch):
        await service.register(_register())
        monkeypatch.setattr("bookkeep.auth.service.verify_password", _slow(True))

        assert await _longest_stall(service.login(LoginRequest(email="a@x.com", password="pw1"))) < 0.1
