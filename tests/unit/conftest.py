"""Fixtures for docwatch unit tests."""

from __future__ import annotations

import typing as typ

import pytest

from docwatch.tracking.classifier import DocumentLocator
from docwatch.tracking.config import TrackerConfig
from tests.helpers.docwatch_fakes import BASE_TIME, InMemoryUpdateStore

if typ.TYPE_CHECKING:
    import datetime as dt


@pytest.fixture
def now() -> dt.datetime:
    """Fixed clock reading used by pipeline tests."""
    return BASE_TIME


@pytest.fixture
def locator() -> DocumentLocator:
    """Locator rooted at ``docs/`` for short test paths."""
    return DocumentLocator(docs_root="docs/", base_url="https://x.test/docs/")


@pytest.fixture
def tracker_config() -> TrackerConfig:
    """Tracker configuration with the stock window and caps."""
    return TrackerConfig()


@pytest.fixture
def store() -> InMemoryUpdateStore:
    """Empty in-memory update store."""
    return InMemoryUpdateStore()
