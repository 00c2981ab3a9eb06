"""
RemoteValue
===========

One-shot value container for request/reply style async rendezvous.
Create locally, fill or fail it from another code path, optionally by id.

    rv = remote_value(name="reply", timeout=5.0, register=True)
    send_request(reply_to=rv.id)
    ...
    resolve_by_id(reply_id, payload)   # somewhere else
    ...
    payload = await rv

Only the first settlement wins; later ones are no-ops returning False.
The timer and the registry entry are dropped at settlement.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import math
import typing
import uuid
from collections.abc import Generator
from dataclasses import dataclass

from kungfu import Error, Ok, Result

from ._errors import CarrierError, RemoteValueTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RemoteValueOptions:
    """Configuration of a RemoteValue."""

    name: str = "remote-value"
    timeout: float | None = None
    timeout_ms: float | None = None
    register: bool = False

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout_ms is not None:
            raise ValueError("pass either timeout or timeout_ms, not both")
        for label, value in (("timeout", self.timeout), ("timeout_ms", self.timeout_ms)):
            if value is not None and (not math.isfinite(value) or value < 0.0):
                raise ValueError(f"RemoteValueOptions.{label} must be a finite number >= 0")

    @property
    def seconds(self) -> float | None:
        """Timeout in seconds, None when disabled (0 disables too)."""
        if self.timeout_ms is not None:
            seconds = self.timeout_ms / 1000.0
        else:
            seconds = self.timeout
        if seconds is None or seconds <= 0.0:
            return None
        return seconds


class RemoteRegistry:
    """
    id -> RemoteValue map for settling a value from a distant call site.

    One default instance lives in this module; tests and embedding
    applications may build and inject their own.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[str, RemoteValue[typing.Any]] = {}

    def add(self, value: RemoteValue[typing.Any], /) -> None:
        self._entries[value.id] = value

    def discard(self, id: str, /) -> None:
        self._entries.pop(id, None)

    def get(self, id: str, /) -> RemoteValue[typing.Any] | None:
        return self._entries.get(id)

    def resolve_by_id(self, id: str, value: typing.Any) -> bool:
        """Fill the registered value. False if unknown or already settled."""
        ref = self._entries.get(id)
        if ref is None:
            return False
        return ref.fill(value)

    def reject_by_id(self, id: str, reason: typing.Any = None) -> bool:
        """Fail the registered value. False if unknown or already settled."""
        ref = self._entries.get(id)
        if ref is None:
            return False
        return ref.fail(reason)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, id: object) -> bool:
        return id in self._entries

    def __repr__(self) -> str:
        return f"RemoteRegistry({len(self._entries)} pending)"


default_registry: typing.Final = RemoteRegistry()


class RemoteValue[T]:
    """
    Settle-once awaitable.

    - fill(value) / fail(reason): first call wins and returns True
    - optional timeout: auto-fail with RemoteValueTimeoutError
    - optional registry entry: settle by id via resolve_by_id/reject_by_id
    """

    __slots__ = ("id", "name", "_settled", "_outcome", "_future", "_timer", "_registry")

    def __init__(
        self,
        options: RemoteValueOptions | None = None,
        *,
        name: str | None = None,
        timeout: float | None = None,
        timeout_ms: float | None = None,
        register: bool | None = None,
        registry: RemoteRegistry | None = None,
    ) -> None:
        overrides: dict[str, typing.Any] = {
            key: value
            for key, value in (
                ("name", name),
                ("timeout", timeout),
                ("timeout_ms", timeout_ms),
                ("register", register),
            )
            if value is not None
        }
        opts = dataclasses.replace(options or RemoteValueOptions(), **overrides)

        self.id: str = uuid.uuid4().hex
        self.name: str = opts.name
        self._settled = False
        self._outcome: Result[T, BaseException] | None = None
        self._future: asyncio.Future[T] | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._registry: RemoteRegistry | None = None

        if opts.register or registry is not None:
            self._registry = registry if registry is not None else default_registry
            self._registry.add(self)
            logger.debug("RemoteValue %r (%s) registered", self.name, self.id)

        seconds = opts.seconds
        if seconds is not None:
            # NOTE: таймер требует запущенный event loop
            loop = asyncio.get_running_loop()
            self._timer = loop.call_later(seconds, self._expire, seconds)

    @staticmethod
    def create[V](options: RemoteValueOptions | None = None, **kwargs: typing.Any) -> RemoteValue[V]:
        return RemoteValue(options, **kwargs)

    @staticmethod
    def resolve_by_id(id: str, value: typing.Any) -> bool:
        """Fill a value registered in the default registry."""
        return default_registry.resolve_by_id(id, value)

    @staticmethod
    def reject_by_id(id: str, reason: typing.Any = None) -> bool:
        """Fail a value registered in the default registry."""
        return default_registry.reject_by_id(id, reason)

    @property
    def is_settled(self) -> bool:
        return self._settled

    def fill(self, value: T) -> bool:
        if self._settled:
            return False
        self._settled = True
        self._outcome = Ok(value)
        if self._future is not None and not self._future.done():
            self._future.set_result(value)
        self._cleanup()
        logger.debug("RemoteValue %r (%s) filled", self.name, self.id)
        return True

    def fail(self, reason: typing.Any = None) -> bool:
        if self._settled:
            return False
        self._settled = True
        exc = reason if isinstance(reason, BaseException) else CarrierError(reason)
        self._outcome = Error(exc)
        if self._future is not None and not self._future.done():
            self._future.set_exception(exc)
        self._cleanup()
        logger.debug("RemoteValue %r (%s) failed: %r", self.name, self.id, reason)
        return True

    async def wait(self) -> T:
        """Value once filled; raises the failure reason once failed."""
        outcome = self._outcome
        if outcome is None:
            if self._future is None:
                self._future = asyncio.get_running_loop().create_future()
            # A cancelled waiter must not settle the value for everyone
            return await asyncio.shield(self._future)
        match outcome:
            case Ok(value):
                return value
            case Error(exc):
                raise exc

    def __await__(self) -> Generator[typing.Any, None, T]:
        return self.wait().__await__()

    def _expire(self, seconds: float) -> None:
        self._timer = None
        if self.fail(RemoteValueTimeoutError(self.name, self.id, seconds)):
            logger.debug("RemoteValue %r (%s) timed out after %ss", self.name, self.id, seconds)

    def _cleanup(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._registry is not None:
            self._registry.discard(self.id)
            self._registry = None

    def __repr__(self) -> str:
        state = "settled" if self._settled else "pending"
        return f"RemoteValue({self.name!r}, id={self.id!r}, {state})"


def remote_value[T](options: RemoteValueOptions | None = None, **kwargs: typing.Any) -> RemoteValue[T]:
    """
    Create a RemoteValue.

    Example:
        rv = remote_value(timeout_ms=5)
        await rv   # raises RemoteValueTimeoutError after ~5ms
    """
    return RemoteValue(options, **kwargs)


def resolve_by_id(id: str, value: typing.Any, *, registry: RemoteRegistry | None = None) -> bool:
    return (registry if registry is not None else default_registry).resolve_by_id(id, value)


def reject_by_id(id: str, reason: typing.Any = None, *, registry: RemoteRegistry | None = None) -> bool:
    return (registry if registry is not None else default_registry).reject_by_id(id, reason)


def is_remote_value(value: object) -> typing.TypeGuard[RemoteValue[typing.Any]]:
    return isinstance(value, RemoteValue)


__all__ = (
    "RemoteRegistry",
    "RemoteValue",
    "RemoteValueOptions",
    "default_registry",
    "is_remote_value",
    "reject_by_id",
    "remote_value",
    "resolve_by_id",
)
