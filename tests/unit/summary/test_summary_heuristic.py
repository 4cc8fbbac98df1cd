"""Tests for heuristic session summaries."""

from __future__ import annotations

import pytest

from docwatch.summary.heuristic import (
    DEFAULT_IMPACT,
    HEURISTIC_CONFIDENCE,
    heuristic_verdict,
    impact_for_category,
)
from docwatch.summary.models import Decision
from docwatch.tracking.grouping import Session, group_events
from tests.helpers.docwatch_fakes import make_event


def _single_session(*events: object) -> Session:
    sessions = group_events(events)  # type: ignore[arg-type]
    assert len(sessions) == 1
    return sessions[0]


class TestHeuristicVerdict:
    """Deterministic fallback summaries."""

    def test_names_category_and_line_counts(self) -> None:
        """The summary cites the category and aggregate line counts."""
        verdict = heuristic_verdict(_single_session(make_event()))

        assert verdict.decision is Decision.KEEP
        assert verdict.category == "Networking"
        assert verdict.summary == (
            "Updated documentation for networking (+10/-2 lines)"
        )
        assert verdict.impact == "Review networking configuration guidance for changes"
        assert verdict.confidence == HEURISTIC_CONFIDENCE

    def test_lists_every_category_touched(self) -> None:
        """Sessions spanning categories list them in first-seen order."""
        session = _single_session(
            make_event(message="Refresh cluster baseline guidance"),
            make_event(
                "articles/aks/security-baseline.md",
                event_id="c2",
                message="Refresh cluster baseline guidance",
            ),
        )

        verdict = heuristic_verdict(session)

        assert verdict.category == "Networking"
        assert verdict.summary == (
            "Updated documentation for networking, security (+20/-4 lines)"
        )

    @pytest.mark.parametrize(
        ("message", "suffix", "impact"),
        [
            pytest.param(
                "List prerequisites for the add-on",
                "with updated prerequisites and requirements",
                "Users should review updated requirements before implementation",
                id="prerequisites",
            ),
            pytest.param(
                "Add a sample manifest",
                "including new examples and code samples",
                "Enhanced guidance with practical examples for easier implementation",
                id="examples",
            ),
            pytest.param(
                "Note deprecated kubenet option",
                "noting deprecated features and migration guidance",
                "Critical update - users should plan migration from deprecated "
                "features",
                id="deprecation",
            ),
        ],
    )
    def test_message_keywords_refine_summary(
        self, message: str, suffix: str, impact: str
    ) -> None:
        """Commit titles with telling keywords refine summary and impact."""
        verdict = heuristic_verdict(_single_session(make_event(message=message)))

        assert verdict.summary.endswith(suffix)
        assert verdict.impact == impact

    def test_unknown_paths_fall_back_to_general(self) -> None:
        """Paths matching no rule use the General category."""
        verdict = heuristic_verdict(_single_session(make_event("docs/a.md")))

        assert verdict.category == "General"
        assert verdict.impact == DEFAULT_IMPACT


@pytest.mark.parametrize(
    ("category", "expected"),
    [
        pytest.param(
            "Security",
            "Review the updated security guidance for affected clusters",
            id="known",
        ),
        pytest.param("Storage", DEFAULT_IMPACT, id="unknown"),
    ],
)
def test_impact_for_category(category: str, expected: str) -> None:
    """Categories without a specific impact use the default statement."""
    assert impact_for_category(category) == expected
