"""
Effects - метаданные эффектов носителя
======================================

Record of facts accumulated about a carrier while it travels through
a chain of wrapped calls:

- is_async: the payload may be pending (boolean OR across merges)
- errors: every error tag that could reach this point (set union)

Моноидные законы выполняются:
- Identity: Effects().combine(x) == x == x.combine(Effects())
- Associativity: (x.combine(y)).combine(z) == x.combine(y.combine(z))
- Commutativity: x.combine(y) == y.combine(x)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Effects:
    """Effect metadata of a carrier."""

    is_async: bool = False
    errors: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not isinstance(self.errors, frozenset):
            # NOTE: frozen dataclass, поэтому через object.__setattr__
            object.__setattr__(self, "errors", frozenset(self.errors))

    @staticmethod
    def with_errors(*tags: str) -> Effects:
        """Effects declaring the given error tags."""
        return Effects(errors=frozenset(tags))

    @staticmethod
    def asynchronous(*tags: str) -> Effects:
        """Effects of a pending payload, optionally with error tags."""
        return Effects(is_async=True, errors=frozenset(tags))

    def combine(self, other: Effects, /) -> Effects:
        """
        Merge two records (monoidal append).

        Example:
            Effects.with_errors("A").combine(Effects.asynchronous("B"))
            # Effects(is_async=True, errors={"A", "B"})
        """
        if not other.is_async and other.errors <= self.errors:
            return self
        if not self.is_async and self.errors <= other.errors:
            return other
        return Effects(
            is_async=self.is_async or other.is_async,
            errors=self.errors | other.errors,
        )

    def without(self, tags: Iterable[str], /) -> Effects:
        """Drop handled error tags. The only operation that shrinks a record."""
        return Effects(is_async=self.is_async, errors=self.errors - frozenset(tags))

    def __repr__(self) -> str:
        return f"Effects(is_async={self.is_async}, errors={sorted(self.errors)!r})"


EMPTY = Effects()


def merge_effects(effects: Iterable[Effects], /) -> Effects:
    """
    Merge many records into one using monoidal combine.

    Usage:
        merged = merge_effects(c.effects for c in carriers)
    """
    result = EMPTY
    for item in effects:
        result = result.combine(item)
    return result


__all__ = ("EMPTY", "Effects", "merge_effects")
