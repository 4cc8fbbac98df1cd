"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_docwatch_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without ambient ``DOCWATCH_*`` configuration."""
    for name in list(os.environ):
        if name.startswith("DOCWATCH_"):
            monkeypatch.delenv(name, raising=False)
