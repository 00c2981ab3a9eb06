"""
Core type definitions for fect.

Типы и алиасы используемые по всей библиотеке.
"""

from __future__ import annotations

import typing
from collections.abc import Awaitable, Callable

# ============================================================================
# Type aliases
# ============================================================================

# Thunk = zero-arg computation, deferred until someone asks for it
type Thunk[T] = Callable[[], T]

# DefectMapper = turns a raised/rejected exception into a carried error
type DefectMapper[E] = Callable[[Exception], E]

# Declared error variant: a tag string or an error type (its _tag / __name__)
type ErrorDecl = str | type

# ErrorHandlers = tag -> handler; used by match() and partial()
type ErrorHandlers[R] = typing.Mapping[str, Callable[[typing.Any], R]]

# External async source: anything awaitable (coroutine, Future, RemoteValue)
type Source[T] = Awaitable[T]


# NoError = type representing "never fails" semantic
# NOTE: Never (bottom type) вместо None: такие ошибки не могут быть созданы.
type NoError = typing.Never


__all__ = (
    "DefectMapper",
    "ErrorDecl",
    "ErrorHandlers",
    "NoError",
    "Source",
    "Thunk",
)
