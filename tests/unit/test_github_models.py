"""Tests for change records built at the GitHub boundary."""

from __future__ import annotations

import dataclasses
import datetime as dt

import pytest

from docwatch.github.models import ChangeStatus, coerce_status
from tests.helpers.docwatch_fakes import make_event


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        pytest.param("added", ChangeStatus.ADDED, id="added"),
        pytest.param("Modified", ChangeStatus.MODIFIED, id="case-insensitive"),
        pytest.param("renamed", ChangeStatus.MODIFIED, id="renamed"),
        pytest.param("removed", ChangeStatus.REMOVED, id="removed"),
        pytest.param("exploded", None, id="unknown"),
        pytest.param(None, None, id="missing"),
    ],
)
def test_coerce_status(raw: object, expected: ChangeStatus | None) -> None:
    """GitHub statuses map onto the three change kinds."""
    assert coerce_status(raw) is expected


def test_change_event_reports_lines_changed() -> None:
    """lines_changed sums additions and deletions."""
    assert make_event(additions=7, deletions=3).lines_changed == 10


def test_change_event_rejects_negative_counts() -> None:
    """Negative line counts are invalid."""
    with pytest.raises(ValueError, match="non-negative"):
        make_event(additions=-1)


def test_change_event_rejects_naive_timestamp() -> None:
    """Timestamps must carry a timezone."""
    event = make_event()
    with pytest.raises(ValueError, match="timezone-aware"):
        dataclasses.replace(event, timestamp=dt.datetime(2025, 3, 10))  # noqa: DTZ001
