"""match / partial / try_: discharging carriers and plain values."""

from __future__ import annotations

import asyncio

import pytest

from fect import (
    CarrierError,
    Fail,
    MissingHandlerError,
    UnhandledMatchError,
    err,
    lazy,
    lifted,
    ok,
    partial,
    tagged_error,
    try_,
    wrap,
)
from fect import match

pytestmark = pytest.mark.unit

A = tagged_error("A")
B = tagged_error("B")
Empty = tagged_error("Empty")
Some = tagged_error("Some", ("value", int))


@lifted
async def greet(name: str) -> str | Fail[Empty]:
    await asyncio.sleep(0)
    if not name:
        return Empty.err()
    return f"hello {name}"


def failing_with(error: object):
    return wrap(lambda: Fail(error), errors=("A", "B"))()


# ============================================================================
# Carriers
# ============================================================================


def test_sync_ok_dispatch() -> None:
    result = match(wrap(lambda a, b: a + b)(ok(1), 2)).with_(ok=lambda v: v, err=lambda e: -1)
    assert result == 3


def test_ok_only_is_enough_without_declared_errors() -> None:
    assert match(ok(5)).with_(ok=lambda v: v * 2) == 10


def test_handlers_from_mapping_and_keywords() -> None:
    result = match(err(A.of())).with_({"ok": lambda v: v, "err": lambda e: "mapped"}, err=lambda e: "keyword")
    assert result == "keyword"


def test_error_mapping_by_tag() -> None:
    result = match(failing_with(B.of())).with_(
        ok=lambda v: v,
        err={"A": lambda e: "a", "B": lambda e: "b"},
    )
    assert result == "b"


def test_missing_ok_handler() -> None:
    with pytest.raises(MissingHandlerError) as info:
        match(ok(1)).with_(err=lambda e: e)
    assert info.value.branch == "ok"


def test_missing_err_handler_with_declared_errors() -> None:
    with pytest.raises(MissingHandlerError) as info:
        match(err(A.of())).with_(ok=lambda v: v)
    assert info.value.branch == "err"


def test_missing_tag_in_mapping_is_fatal_at_dispatch() -> None:
    with pytest.raises(MissingHandlerError, match="Missing error handler"):
        match(failing_with(A.of())).with_(ok=lambda v: v, err={"B": lambda e: e})


def test_defect_mapped_by_function_is_declared() -> None:
    lookup = wrap(lambda: {}["missing"], map_thrown=lambda exc: f"lookup:{exc}")
    result = lookup()

    assert result.effects.errors == {"str"}
    with pytest.raises(MissingHandlerError) as info:
        match(result).with_(ok=lambda v: v)
    assert info.value.branch == "err"
    assert match(result).with_(ok=lambda v: v, err={"str": lambda e: e}) == "lookup:'missing'"


def test_exhaustive_checks_before_dispatch() -> None:
    with pytest.raises(MissingHandlerError) as info:
        match(ok(1).with_effects(err(A.of()).effects)).exhaustive(ok=lambda v: v, err={"B": lambda e: e})
    assert "A" in str(info.value)

    assert match(ok(1)).exhaustive(ok=lambda v: v) == 1


def test_lazy_carrier_is_forced_first() -> None:
    assert match(lazy(lambda: ok(4))).with_(ok=lambda v: v + 1) == 5


@pytest.mark.asyncio
async def test_pending_carrier_returns_coroutine() -> None:
    pending = match(greet("ann")).with_(ok=str.upper, err=lambda e: "?")
    assert asyncio.iscoroutine(pending)
    assert await pending == "HELLO ANN"


@pytest.mark.asyncio
async def test_async_tagged_error_branch() -> None:
    result = await match(greet("")).exhaustive(
        ok=lambda v: v,
        err={
            "Empty": lambda e: "anonymous",
            "PromiseRejected": lambda e: "rejected",
            "UnknownException": lambda e: "crashed",
        },
    )
    assert result == "anonymous"


# ============================================================================
# Plain values
# ============================================================================


def test_tagged_value_handler_receives_value_field() -> None:
    assert match(Some.of(value=3)).with_(Some=lambda v: v * 2) == 6
    assert match(A.of()).with_(A=lambda e: e) == A.of()


def test_literal_keys() -> None:
    handlers = {5: lambda v: "five", "five": lambda v: "word", None: lambda v: "none", "_": lambda v: "other"}
    assert match(5).with_(handlers) == "five"
    assert match("five").with_(handlers) == "word"
    assert match(None).with_(handlers) == "none"
    assert match(6).with_(handlers) == "other"


def test_literal_requires_same_type() -> None:
    assert match(True).with_({1: lambda v: "one", "bool": lambda v: "bool"}) == "bool"
    assert match(1.0).with_({1: lambda v: "int one", "_": lambda v: "fallback"}) == "fallback"


def test_type_name_walks_mro() -> None:
    class Base:
        pass

    class Child(Base):
        pass

    assert match(Child()).with_(Base=lambda v: "base") == "base"
    assert match(Child()).with_(Base=lambda v: "base", Child=lambda v: "child") == "child"
    assert match([1]).with_(list=len) == 1


def test_unhandled_value() -> None:
    with pytest.raises(UnhandledMatchError) as info:
        match(42).with_(str=lambda v: v)
    assert info.value.value == 42


def test_lazy_plain_value_is_forced() -> None:
    assert match(lazy(lambda: "x")).with_(str=lambda v: v * 2) == "xx"


# ============================================================================
# partial
# ============================================================================


def test_partial_recovers_and_narrows() -> None:
    narrowed = partial(failing_with(A.of())).with_(err={"A": lambda e: 0})
    assert narrowed.effects.errors == {"B"}
    assert try_(narrowed) == 0


def test_partial_keeps_other_errors() -> None:
    narrowed = partial(failing_with(B.of())).with_(err={"A": lambda e: 0})
    assert narrowed.effects.errors == {"B"}
    assert match(narrowed).with_(ok=lambda v: v, err=lambda e: e) == B.of()


def test_partial_on_plain_value() -> None:
    narrowed = partial(3).with_(err={"A": lambda e: 0})
    assert try_(narrowed) == 3


def test_partial_requires_mapping() -> None:
    with pytest.raises(MissingHandlerError):
        partial(ok(1)).with_()
    with pytest.raises(TypeError):
        partial(ok(1)).with_(err=lambda e: e)


@pytest.mark.asyncio
async def test_partial_on_pending_carrier() -> None:
    narrowed = partial(greet("")).with_(err={"Empty": lambda e: "nobody"})
    assert narrowed.is_pending
    assert narrowed.effects.is_async
    assert "Empty" not in narrowed.effects.errors
    assert await try_(narrowed) == "nobody"


# ============================================================================
# try_
# ============================================================================


def test_try_returns_values() -> None:
    assert try_(ok(1)) == 1
    assert try_("plain") == "plain"
    assert try_(lazy(lambda: ok(2))) == 2


def test_try_raises_exceptions_as_is() -> None:
    with pytest.raises(KeyError):
        try_(err(KeyError("k")))


def test_try_wraps_other_errors() -> None:
    with pytest.raises(CarrierError) as info:
        try_(err(A.of()))
    assert info.value.error == A.of()


def test_try_chains_defect_cause() -> None:
    with pytest.raises(CarrierError) as info:
        try_(wrap(lambda: 1 / 0)())
    assert isinstance(info.value.__cause__, ZeroDivisionError)


@pytest.mark.asyncio
async def test_try_on_pending() -> None:
    assert await try_(greet("x")) == "hello x"
    with pytest.raises(CarrierError):
        await try_(greet(""))
