"""Shared fixtures."""

from __future__ import annotations

import pytest
from helpers import FakeClock, ScriptedGetter, page_body


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def two_pages() -> ScriptedGetter:
    """Two pages: A, B at offset 0 and C at offset 100, total 150."""
    return ScriptedGetter(
        {
            0: page_body(["A", "B"], offset=0, total=150),
            100: page_body(["C"], offset=100, total=150),
        }
    )
