from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.helpers import EventRecorder, FakeTransport
from webrequest.client import reset_supported_cache

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def supported_cache() -> Generator[None, None, None]:
    """Forget the cached environment support before and after each
    test."""
    reset_supported_cache()
    yield
    reset_supported_cache()


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Create a transport driven by explicit calls."""
    return FakeTransport()


@pytest.fixture
def recorder() -> EventRecorder:
    """Create an event manager recording every fired event."""
    return EventRecorder()
