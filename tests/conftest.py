"""
Shared fixtures for doresult tests.

``tracker`` hands out context-managed resources that record when they are
constructed and released, so tests can assert release order and counts.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import pytest

from doresult.config import DEBUG_ENV_VAR, FAULT_POLICY_ENV_VAR


class ResourceTracker:
    """Record construction/destruction events of named resources."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    @contextmanager
    def resource(self, name: str) -> Iterator[str]:
        self.events.append(("construct", name))
        try:
            yield name
        finally:
            self.events.append(("release", name))

    @property
    def constructed(self) -> list[str]:
        return [name for kind, name in self.events if kind == "construct"]

    @property
    def released(self) -> list[str]:
        return [name for kind, name in self.events if kind == "release"]


@pytest.fixture
def tracker() -> ResourceTracker:
    return ResourceTracker()


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's shell settings out of the tests."""

    monkeypatch.delenv(DEBUG_ENV_VAR, raising=False)
    monkeypatch.delenv(FAULT_POLICY_ENV_VAR, raising=False)
