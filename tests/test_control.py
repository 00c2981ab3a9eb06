"""if_ / defer: branching over possibly-infected conditions."""

from __future__ import annotations

import asyncio

import pytest

from fect import Carrier, Lazy, defer, err, force, if_, lazy, ok, tagged_error, try_

pytestmark = pytest.mark.unit

NotAllowed = tagged_error("NotAllowed")


def test_plain_condition_gives_plain_result() -> None:
    assert if_(True, lambda: "a", lambda: "b") == "a"
    assert if_(False, "a", "b") == "b"
    assert if_([], "non-empty", "empty") == "empty"


def test_only_taken_branch_runs() -> None:
    calls = []
    assert if_(True, lambda: "yes", lambda: calls.append(1)) == "yes"
    assert calls == []


def test_builder_forms_take_values_literally() -> None:
    assert if_(True).then(len).else_(str) is len
    assert if_(False).with_(then=1, else_=defer(lambda: 2)) == 2
    assert if_(True).then(defer(lambda: "computed")).else_("value") == "computed"


def test_failing_branch_gives_error_carrier() -> None:
    result = if_(ok(True), lambda: NotAllowed.err(), lambda: 123)
    assert isinstance(result, Carrier)
    assert "NotAllowed" in result.effects.errors
    assert if_(ok(False), lambda: NotAllowed.err(), lambda: 123).payload.unwrap() == 123


def test_error_condition_short_circuits() -> None:
    calls = []
    result = if_(err(NotAllowed.of()), lambda: calls.append(1), lambda: calls.append(2))
    assert calls == []
    assert result.effects.errors == {"NotAllowed"}


def test_lazy_condition_gives_lazy() -> None:
    result = if_(lazy(lambda: True), "a", "b")
    assert isinstance(result, Lazy)
    assert force(result) == "a"


@pytest.mark.asyncio
async def test_async_condition() -> None:
    async def flag() -> bool:
        await asyncio.sleep(0)
        return True

    result = if_(flag(), "on", "off")
    assert result.is_pending
    assert await try_(result) == "on"


def test_branches_must_be_paired() -> None:
    with pytest.raises(TypeError):
        if_(True, "only then")


def test_defer_validates() -> None:
    with pytest.raises(ValueError):
        defer(42)  # type: ignore[arg-type]
