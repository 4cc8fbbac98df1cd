"""Shared fixtures for summarizer tests."""

from __future__ import annotations

import datetime as dt

import pytest

from docwatch.summary.config import OpenAISummarizerConfig
from docwatch.tracking.classifier import DocumentLocator
from docwatch.tracking.grouping import Session, group_events
from tests.helpers.docwatch_fakes import BASE_TIME, make_event


@pytest.fixture
def sessions() -> list[Session]:
    """Two unrelated documentation sessions."""
    locator = DocumentLocator(docs_root="docs/", base_url="https://x.test/docs/")
    return group_events(
        [
            make_event(
                "docs/a.md",
                event_id="c1",
                message="Add outbound type table",
                patch_sample="+| Type | Description |",
            ),
            make_event(
                "docs/net/b.md",
                event_id="c2",
                message="Explain upgrade channels",
                timestamp=BASE_TIME + dt.timedelta(hours=1),
            ),
        ],
        url_for=locator.url_for,
    )


@pytest.fixture
def openai_config() -> OpenAISummarizerConfig:
    """Config pointing at a fake endpoint."""
    return OpenAISummarizerConfig(
        api_key="sk-test",
        endpoint="https://llm.test/v1/chat/completions",
        model="gpt-test",
    )
