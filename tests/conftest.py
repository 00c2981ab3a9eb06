"""Pytest configuration and fixtures.

Provides a fresh remote registry per test and keeps the module-level default
registry empty between tests.
"""

from __future__ import annotations

from collections.abc import Iterator
import logging

import pytest

from fect import RemoteRegistry, default_registry


@pytest.fixture(autouse=True)
def _isolate_default_registry() -> Iterator[None]:
    """Values registered by one test never leak into the next."""
    default_registry.clear()
    yield
    default_registry.clear()


@pytest.fixture
def registry() -> RemoteRegistry:
    """Injected registry, independent from the default one."""
    return RemoteRegistry()


@pytest.fixture(autouse=True)
def _debug_logging(caplog: pytest.LogCaptureFixture) -> None:
    """Capture the library's DEBUG records so tests can assert on them."""
    caplog.set_level(logging.DEBUG, logger="fect")
