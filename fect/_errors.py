from __future__ import annotations

import typing


class FectError(Exception):
    """Base class for contract violations raised by the runtime itself."""


class MissingHandlerError(FectError):
    """match() was given an incomplete set of handlers."""

    branch: str

    def __init__(self, branch: str, message: str | None = None) -> None:
        self.branch = branch
        super().__init__(message or f"Missing {branch} handler")


class UnhandledMatchError(FectError):
    """No handler key matched a plain value."""

    value: typing.Any

    def __init__(self, value: typing.Any) -> None:
        self.value = value
        super().__init__(f"Unhandled match value: {value!r} ({type(value).__name__})")


class PendingCarrierError(FectError):
    """A synchronous inspection was attempted on a pending carrier."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation}() needs a settled carrier; await it or use match()")


class LazyCycleError(FectError):
    """A lazy thunk tried to force itself while being forced."""

    def __init__(self) -> None:
        super().__init__("Lazy value forced re-entrantly")


class CarrierError(FectError):
    """Raised by try_()/unsafe() when the carried error is not an exception."""

    error: typing.Any

    def __init__(self, error: typing.Any) -> None:
        self.error = error
        super().__init__(f"Carrier failed with {error!r}")


class RemoteValueTimeoutError(FectError):
    """RemoteValue was not settled in time."""

    _tag: typing.ClassVar[str] = "RemoteValueTimeout"

    name: str
    id: str
    seconds: float

    def __init__(self, name: str, id: str, seconds: float) -> None:
        self.name = name
        self.id = id
        self.seconds = seconds
        super().__init__(f"RemoteValue '{name}' ({id}) timed out after {seconds * 1000:g}ms")


__all__ = (
    "CarrierError",
    "FectError",
    "LazyCycleError",
    "MissingHandlerError",
    "PendingCarrierError",
    "RemoteValueTimeoutError",
    "UnhandledMatchError",
)
