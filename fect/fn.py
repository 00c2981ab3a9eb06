"""
wrap
====

Комбинатор функций: обёртка, которая сама разбирается с ошибками,
асинхронностью и ленивостью аргументов.

``wrap(handler)`` returns a callable that accepts, for every argument,
a plain value, a Carrier, a Lazy or any awaitable (coroutine, Future,
RemoteValue), and:

1. plain arguments only -> the handler runs directly; its result is
   normalized into the minimal carrier (``plain=True`` keeps trivial
   successes raw)
2. otherwise every argument becomes a carrier
3. pending carriers are resolved concurrently; the first error BY
   POSITION short-circuits, regardless of completion order
4. successes -> the handler runs on the unwrapped values; a raise becomes
   ``UnknownException``, a rejected awaitable ``PromiseRejected``
5. the handler's Fail / Carrier / Lazy / awaitable result is flattened
6. effects of every input, the declared errors and the result merge

A Lazy argument makes the whole call lazy: the returned Lazy performs the
evaluation when forced. Lazy arguments reach the handler unforced.
"""

from __future__ import annotations

import asyncio
import dataclasses
import functools
import inspect
import itertools
import logging
import types
import typing
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from kungfu import Error, Ok, Result

from ._types import DefectMapper, ErrorDecl
from .carrier import Carrier, Fail, Pending, declared_tag, tag_of
from .effects import EMPTY, Effects, merge_effects
from .lazy import Lazy
from .tagged import PromiseRejected, UnknownException

logger = logging.getLogger(__name__)


# ============================================================================
# Options
# ============================================================================


@dataclass(frozen=True, slots=True)
class WrapOptions:
    """
    Configuration supplied at wrap time.

    - errors: declared error variants (tags or error types)
    - map_rejected: exception of an awaited source -> carried error
    - map_thrown: exception raised by the handler -> carried error
    - map_defect: both of the above at once (explicit mappers win)
    - plain: return trivially successful plain calls unwrapped
    - infer_errors: read ``Fail[...]`` from the handler's return annotation
    """

    errors: tuple[ErrorDecl, ...] = ()
    map_rejected: DefectMapper[typing.Any] | None = None
    map_thrown: DefectMapper[typing.Any] | None = None
    map_defect: DefectMapper[typing.Any] | None = None
    plain: bool = False
    infer_errors: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.errors, tuple):
            object.__setattr__(self, "errors", tuple(self.errors))
        for label in ("map_rejected", "map_thrown", "map_defect"):
            mapper = getattr(self, label)
            if mapper is not None and not callable(mapper):
                raise ValueError(f"WrapOptions.{label} must be callable")
        for decl in self.errors:
            if not isinstance(decl, (str, type)):
                raise ValueError(f"WrapOptions.errors accepts tags or types, got {decl!r}")

    @classmethod
    def defects(cls, mapper: DefectMapper[typing.Any], /, **kwargs: typing.Any) -> WrapOptions:
        """One mapper for both thrown and rejected defects."""
        return cls(map_defect=mapper, **kwargs)

    def rejected(self) -> DefectMapper[typing.Any]:
        return self.map_rejected or self.map_defect or PromiseRejected

    def thrown(self) -> DefectMapper[typing.Any]:
        return self.map_thrown or self.map_defect or UnknownException


def _mapper_tags(mapper: DefectMapper[typing.Any]) -> frozenset[str]:
    # Only a type tells us the tag before the defect happens
    if isinstance(mapper, type):
        return frozenset({declared_tag(mapper)})
    return frozenset()


# ============================================================================
# Declared errors from annotations
# ============================================================================


def _union_members(tp: typing.Any) -> Iterator[typing.Any]:
    if typing.get_origin(tp) in (typing.Union, types.UnionType):
        for arg in typing.get_args(tp):
            yield from _union_members(arg)
    else:
        yield tp


def _fail_tags(tp: typing.Any) -> Iterator[str]:
    if typing.get_origin(tp) is Fail:
        for arg in typing.get_args(tp):
            for member in _union_members(arg):
                if isinstance(member, type):
                    yield declared_tag(member)
        return
    for arg in typing.get_args(tp):
        yield from _fail_tags(arg)


def annotated_errors(handler: Callable[..., typing.Any]) -> frozenset[str]:
    """
    Error tags a handler declares through ``Fail[...]`` in its return type.

    Example:
        def parse(raw: str) -> int | Fail[ParseFailed]: ...
        annotated_errors(parse)  # frozenset({"ParseFailed"})
    """
    try:
        hints = typing.get_type_hints(handler)
    except (NameError, TypeError, AttributeError) as exc:
        logger.debug("Cannot read annotations of %r: %s", handler, exc)
        return frozenset()
    returns = hints.get("return")
    if returns is None:
        return frozenset()
    return frozenset(_fail_tags(returns))


# ============================================================================
# Engine
# ============================================================================


def _is_source(value: object) -> bool:
    """External async source: awaitable that is not a carrier."""
    return not isinstance(value, Carrier) and inspect.isawaitable(value)


def _is_infected(value: object) -> bool:
    return isinstance(value, Carrier) or _is_source(value)


class _Engine:
    """Evaluate-and-wrap step shared by every call of one wrapped handler."""

    __slots__ = (
        "handler",
        "name",
        "plain",
        "declared",
        "on_rejected",
        "on_thrown",
        "rejected_effects",
        "thrown_effects",
        "async_effects",
    )

    def __init__(self, handler: Callable[..., typing.Any], options: WrapOptions) -> None:
        self.handler = handler
        self.name: str = getattr(handler, "__qualname__", None) or repr(handler)
        self.plain = options.plain

        tags = {declared_tag(decl) for decl in options.errors}
        if options.infer_errors:
            tags |= annotated_errors(handler)
        self.declared = Effects(errors=frozenset(tags))

        self.on_rejected = options.rejected()
        self.on_thrown = options.thrown()
        self.rejected_effects = Effects(errors=_mapper_tags(self.on_rejected))
        self.thrown_effects = Effects(errors=_mapper_tags(self.on_thrown))
        self.async_effects = Effects(
            is_async=True,
            errors=self.rejected_effects.errors | self.thrown_effects.errors,
        )

    # --- defects ---

    def rejected(self, exc: Exception) -> Error[typing.Any]:
        logger.debug("%s: awaited source rejected: %r", self.name, exc)
        return Error(self.on_rejected(exc))

    def thrown(self, exc: Exception) -> Error[typing.Any]:
        return Error(self.map_thrown(exc))

    def map_thrown(self, exc: Exception) -> typing.Any:
        logger.debug("%s: handler raised: %r", self.name, exc)
        return self.on_thrown(exc)

    def thrown_carrier(self, exc: Exception, base: Effects) -> Carrier[typing.Any, typing.Any]:
        # Settled defect: the mapped error's tag is known here
        error = self.map_thrown(exc)
        effects = base.combine(self.thrown_effects).combine(Effects.with_errors(tag_of(error)))
        return Carrier(Error(error), effects)

    # --- entry ---

    def evaluate(self, args: tuple[typing.Any, ...], kwargs: dict[str, typing.Any]) -> typing.Any:
        if not any(_is_infected(v) for v in itertools.chain(args, kwargs.values())):
            return self.call_plain(args, kwargs)

        positional = [self.lift_input(a) for a in args]
        named = {key: self.lift_input(v) for key, v in kwargs.items()}
        inputs = [*positional, *named.values()]
        base = merge_effects(c.effects for c in inputs).combine(self.declared)

        if any(c.is_pending for c in inputs):

            async def run() -> Result[typing.Any, typing.Any]:
                return await self.run_async(positional, named)

            return Carrier(Pending(run), base.combine(self.async_effects))

        # Fully settled inputs
        for carrier in inputs:
            match carrier.payload:
                case Error(error):
                    logger.debug("%s: short-circuit on %s", self.name, tag_of(error))
                    return Carrier(carrier.payload, base)
                case _:
                    pass

        values = [_ok_value(c.payload) for c in positional]
        named_values = {key: _ok_value(c.payload) for key, c in named.items()}
        try:
            raw = self.handler(*values, **named_values)
        except Exception as exc:
            return self.thrown_carrier(exc, base)
        return self.settle(raw, base)

    def call_plain(self, args: tuple[typing.Any, ...], kwargs: dict[str, typing.Any]) -> typing.Any:
        try:
            raw = self.handler(*args, **kwargs)
        except Exception as exc:
            return self.thrown_carrier(exc, self.declared)

        if self.plain and not _is_effectful(raw):
            return raw
        if self.plain and isinstance(raw, Lazy):
            return raw
        return self.settle(raw, self.declared)

    # --- inputs ---

    def lift_input(self, value: typing.Any) -> Carrier[typing.Any, typing.Any]:
        if isinstance(value, Carrier):
            return value
        if _is_source(value):

            async def run() -> Result[typing.Any, typing.Any]:
                return await self.settle_async(value)

            return Carrier(Pending(run), self.rejected_effects.combine(Effects(is_async=True)))
        return Carrier(Ok(value), EMPTY)

    async def resolve_input(self, carrier: Carrier[typing.Any, typing.Any]) -> Result[typing.Any, typing.Any]:
        try:
            return await carrier.resolve()
        except Exception as exc:
            return self.rejected(exc)

    async def run_async(
        self,
        positional: list[Carrier[typing.Any, typing.Any]],
        named: dict[str, Carrier[typing.Any, typing.Any]],
    ) -> Result[typing.Any, typing.Any]:
        # Fan-out / fan-in; order of `resolved` is argument order
        resolved = await asyncio.gather(
            *(self.resolve_input(c) for c in itertools.chain(positional, named.values()))
        )
        for result in resolved:
            match result:
                case Error(error):
                    logger.debug("%s: short-circuit on %s", self.name, tag_of(error))
                    return result
                case _:
                    pass

        values = [_ok_value(r) for r in resolved]
        split = len(positional)
        named_values = dict(zip(named.keys(), values[split:], strict=True))
        try:
            raw = self.handler(*values[:split], **named_values)
        except Exception as exc:
            return self.thrown(exc)
        return await self.settle_async(raw)

    # --- results ---

    def settle(self, raw: typing.Any, base: Effects) -> typing.Any:
        """Turn a synchronous handler result into a carrier (or a Lazy of one)."""
        match raw:
            case Fail(error):
                return Carrier(Error(error), base.combine(Effects.with_errors(tag_of(error))))
            case Carrier():
                return Carrier(raw.payload, base.combine(raw.effects))
            case Lazy():
                return Lazy(functools.partial(self.settle_forced, raw, base))
            case _ if _is_source(raw):

                async def run() -> Result[typing.Any, typing.Any]:
                    return await self.settle_async(raw)

                return Carrier(Pending(run), base.combine(self.async_effects))
            case _:
                return Carrier(Ok(raw), base)

    def settle_forced(self, raw: Lazy[typing.Any], base: Effects) -> typing.Any:
        try:
            value = raw.force()
        except Exception as exc:
            return self.thrown_carrier(exc, base)
        return self.settle(value, base)

    async def settle_async(self, raw: typing.Any) -> Result[typing.Any, typing.Any]:
        """Settle any handler result (or awaited source) into a Result."""
        match raw:
            case Fail(error):
                return Error(error)
            case Carrier():
                return await self.resolve_input(raw)
            case Lazy():
                try:
                    value = raw.force()
                except Exception as exc:
                    return self.thrown(exc)
                return await self.settle_async(value)
            case _ if _is_source(raw):
                try:
                    value = await raw
                except Exception as exc:
                    return self.rejected(exc)
                return await self.settle_async(value)
            case _:
                return Ok(raw)


def _ok_value(result: typing.Any) -> typing.Any:
    match result:
        case Ok(value):
            return value
        case _:
            raise AssertionError(f"expected a settled Ok, got {result!r}")


def _is_effectful(raw: object) -> bool:
    return isinstance(raw, (Fail, Carrier, Lazy)) or _is_source(raw)


# ============================================================================
# wrap
# ============================================================================


def wrap(
    handler: Callable[..., typing.Any],
    options: WrapOptions | None = None,
    /,
    **overrides: typing.Any,
) -> Callable[..., typing.Any]:
    """
    Wrap a handler so it participates in the carrier pipeline.

    **When to use:** for every step of a chain that may receive carriers,
    awaitables or lazy values, or may itself fail or go async.

    Example:
        add = wrap(lambda a, b: a + b)
        add(ok(1), 2)                      # Carrier(Ok(3))

        @lifted(errors=(Empty,))
        async def shout(name: str):
            if not name:
                return Empty.err()
            return name.upper()

        await try_(shout("ok"))            # "OK"

    Options (as a WrapOptions or keywords): errors, map_rejected,
    map_thrown, map_defect, plain, infer_errors.

    **Grammar:** `wrap(handler)(*args)` reads as "call handler, wrapped"
    """
    opts = dataclasses.replace(options or WrapOptions(), **overrides)
    engine = _Engine(handler, opts)

    @functools.wraps(handler)
    def wrapped(*args: typing.Any, **kwargs: typing.Any) -> typing.Any:
        if any(isinstance(v, Lazy) for v in itertools.chain(args, kwargs.values())):
            return Lazy(functools.partial(engine.evaluate, args, kwargs))
        return engine.evaluate(args, kwargs)

    wrapped.options = opts  # type: ignore[attr-defined]
    wrapped.declared = engine.declared  # type: ignore[attr-defined]
    return wrapped


__all__ = ("WrapOptions", "annotated_errors", "wrap")
