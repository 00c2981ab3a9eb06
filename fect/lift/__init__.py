"""
Lift helpers with semantic namespaces.

Supports three import styles:
    from fect import lift as L   # Recommended (balance)
    from fect import lift as _   # Minimal (for hardcore)
    from fect import lift        # Explicit (for clarity)

Architecture:
- L.up.*    - подъем значений в Carrier
- L.down.*  - опускание Carrier в значение
- L.call()  - вызов функций с лифтингом

Examples:
    from fect import lift as L

    # Подъем значений
    user = L.up.pure(User(id=42))
    error = L.up.fail(NotFound.of(resource="user"))
    maybe = L.up.optional(db_result, error=lambda: NotFound.of(resource="user"))

    # Вызов функций
    result = L.call(fetch_user, 42)

    # Опускание
    value = await L.down.to_result(result)
    value = await L.down.unsafe(result)

    # Декораторы
    @L.lifted
    async def fetch(): ...
"""

from __future__ import annotations

# Import namespaces
from . import down as down_ns
from . import up as up_ns

# From up namespace - подъем значений
# NOTE: up.fail не экспортируется в корень: fect.fail это маркер Fail
from .up import catching, catching_async, from_awaitable, from_result, optional, pure

# From call namespace - вызов функций
from .call import call, lifted

# From down namespace - опускание
from .down import or_else, to_result, unsafe

# Namespace aliases для явного использования
up = up_ns
down = down_ns

__all__ = (
    # Namespaces (L.up.*, L.down.*)
    "up",
    "down",
    # Up
    "pure",
    "from_result",
    "from_awaitable",
    "optional",
    "catching",
    "catching_async",
    # Call
    "call",
    "lifted",
    # Down
    "to_result",
    "unsafe",
    "or_else",
)
