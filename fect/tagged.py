"""
Tagged errors
=============

Discriminated error records and the runtime's own defect records.

Declare a domain error in one line:

    NotFound = tagged_error("NotFound", ("resource", str))
    Empty = tagged_error("Empty")

    NotFound.of(resource="repo")   # construct
    NotFound.err(resource="repo")  # Fail marker for a handler body

Any object with a string ``_tag`` works the same way, so a hand-written
frozen dataclass with ``_tag: ClassVar[str] = "..."`` is equally valid.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass, make_dataclass

from .carrier import Fail

type FieldSpec = str | tuple[str, typing.Any] | tuple[str, typing.Any, typing.Any]


def _of(cls: type, *args: typing.Any, **kwargs: typing.Any) -> typing.Any:
    return cls(*args, **kwargs)


def _err(cls: type, *args: typing.Any, **kwargs: typing.Any) -> Fail[typing.Any]:
    return Fail(cls(*args, **kwargs))


def tagged_error(tag: str, /, *fields: FieldSpec) -> type[typing.Any]:
    """
    Build a frozen record type discriminated by ``_tag``.

    Fields follow ``dataclasses.make_dataclass``: a bare name, a
    ``(name, type)`` pair or a ``(name, type, field(...))`` triple.

    The resulting type has:
    - ``_tag``: the tag literal (class and instances)
    - ``of(...)``: construct an instance
    - ``err(...)``: construct and wrap in Fail
    """
    if not tag or not tag.isidentifier():
        raise ValueError(f"tag must be a valid identifier, got {tag!r}")

    return make_dataclass(
        tag,
        list(fields),
        frozen=True,
        slots=True,
        namespace={
            "_tag": tag,
            "of": classmethod(_of),
            "err": classmethod(_err),
        },
    )


# ============================================================================
# Defects
# ============================================================================


@dataclass(frozen=True, slots=True)
class PromiseRejected:
    """An awaited source (or a handler's awaitable) raised."""

    _tag: typing.ClassVar[str] = "PromiseRejected"

    cause: Exception


@dataclass(frozen=True, slots=True)
class UnknownException:
    """A handler raised synchronously."""

    _tag: typing.ClassVar[str] = "UnknownException"

    cause: Exception


DEFECT_TAGS: typing.Final = frozenset({PromiseRejected._tag, UnknownException._tag})


__all__ = (
    "DEFECT_TAGS",
    "PromiseRejected",
    "UnknownException",
    "tagged_error",
)
