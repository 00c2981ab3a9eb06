"""Lift helpers: up / down / call."""

from __future__ import annotations

import asyncio
import json

import pytest
from kungfu import Error, Ok

from fect import CarrierError, Fail, Lazy, lift as L, ok, tagged_error, try_
from fect.lift import up

pytestmark = pytest.mark.unit

NotFound = tagged_error("NotFound", ("resource", str))
ParseFailed = tagged_error("ParseFailed", ("reason", str))
FetchFailed = tagged_error("FetchFailed", ("cause", object))


# ============================================================================
# up
# ============================================================================


def test_pure_and_fail() -> None:
    assert try_(L.up.pure(1)) == 1

    failed = up.fail(NotFound.of(resource="user"))
    assert failed.effects.errors == {"NotFound"}
    with pytest.raises(CarrierError):
        try_(failed)


def test_from_result() -> None:
    assert try_(L.from_result(Ok(3))) == 3
    failed = L.from_result(Error(NotFound.of(resource="repo")))
    assert failed.effects.errors == {"NotFound"}


def test_optional() -> None:
    calls = []

    def missing() -> object:
        calls.append(1)
        return NotFound.of(resource="user")

    assert try_(L.optional("alice", error=missing)) == "alice"
    assert calls == []

    absent = L.optional(None, error=missing)
    assert absent.effects.errors == {"NotFound"}
    assert calls == [1]


def test_catching() -> None:
    parsed = L.catching(lambda: json.loads('{"a": 1}'), on_error=lambda e: ParseFailed.of(reason=str(e)))
    assert try_(parsed) == {"a": 1}

    broken = L.catching(lambda: json.loads("{"), on_error=lambda e: ParseFailed.of(reason=type(e).__name__))
    assert broken.effects.errors == {"ParseFailed"}
    with pytest.raises(CarrierError) as info:
        try_(broken)
    assert info.value.error == ParseFailed.of(reason="JSONDecodeError")


@pytest.mark.asyncio
async def test_catching_async_is_lazy() -> None:
    calls = []

    async def fetch() -> str:
        calls.append(1)
        raise ConnectionError("refused")

    carrier = L.catching_async(fetch, on_error=FetchFailed)
    assert calls == []
    assert carrier.is_pending
    assert carrier.effects.errors == {"FetchFailed"}

    result = await L.to_result(carrier)
    assert isinstance(result, Error)
    assert calls == [1]


@pytest.mark.asyncio
async def test_from_awaitable() -> None:
    carrier = L.from_awaitable(asyncio.sleep(0, result="slept"))
    assert carrier.is_pending
    assert await L.unsafe(carrier) == "slept"


# ============================================================================
# down
# ============================================================================


@pytest.mark.asyncio
async def test_to_result() -> None:
    assert (await L.to_result(ok(1))).unwrap() == 1
    assert (await L.to_result("plain")).unwrap() == "plain"


@pytest.mark.asyncio
async def test_unsafe_raises() -> None:
    with pytest.raises(CarrierError):
        await L.down.unsafe(up.fail(NotFound.of(resource="x")))


@pytest.mark.asyncio
async def test_or_else() -> None:
    assert await L.or_else(ok(1), default=0) == 1
    assert await L.or_else(up.fail(NotFound.of(resource="x")), default=0) == 0


# ============================================================================
# call / lifted
# ============================================================================


def test_call_at_call_site() -> None:
    assert try_(L.call(lambda a, b: a * b, ok(6), 7)) == 42


def test_lifted_bare_decorator() -> None:
    @L.lifted
    def add(a: int, b: int) -> int:
        return a + b

    assert try_(add(ok(1), 2)) == 3
    assert isinstance(add(1, Lazy(lambda: 2)), Lazy)


@pytest.mark.asyncio
async def test_lifted_with_options() -> None:
    @L.lifted(errors=(NotFound,), map_thrown=FetchFailed)
    async def fetch_user(user_id: int) -> str | Fail[NotFound]:
        if user_id < 0:
            raise ValueError("negative id")
        if user_id == 0:
            return NotFound.err(resource="user")
        return f"user-{user_id}"

    carrier = fetch_user(ok(1))
    assert {"NotFound", "FetchFailed", "PromiseRejected"} <= carrier.effects.errors
    assert await try_(carrier) == "user-1"

    result = await L.to_result(fetch_user(-1))
    assert isinstance(result, Error)
