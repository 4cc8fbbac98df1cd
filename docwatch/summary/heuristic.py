"""Deterministic summaries used when no summarizer verdict is available."""

from __future__ import annotations

import typing as typ

from docwatch.tracking.classifier import category_of

from .models import Decision, Verdict

if typ.TYPE_CHECKING:
    from docwatch.tracking.grouping import Session

HEURISTIC_CONFIDENCE = 0.5

DEFAULT_IMPACT = "Improved documentation clarity and accuracy"

_CATEGORY_IMPACT: dict[str, str] = {
    "Security": "Review the updated security guidance for affected clusters",
    "Upgrade": "Check the revised upgrade guidance before the next upgrade",
    "Networking": "Review networking configuration guidance for changes",
    "Networking/DNS": "Review DNS configuration guidance for changes",
    "Troubleshooting": "Updated troubleshooting steps may resolve known issues",
    "Reliability": "Revisit reliability recommendations for production workloads",
    "Monitoring": "Monitoring guidance changed; check alerting and dashboards",
}

# (message fragments, summary suffix, impact); first match wins.
_KEYWORD_REFINEMENTS: tuple[tuple[tuple[str, ...], str, str], ...] = (
    (
        ("prerequisite", "requirement"),
        "with updated prerequisites and requirements",
        "Users should review updated requirements before implementation",
    ),
    (
        ("example", "sample"),
        "including new examples and code samples",
        "Enhanced guidance with practical examples for easier implementation",
    ),
    (
        ("deprecat", "remov"),
        "noting deprecated features and migration guidance",
        "Critical update - users should plan migration from deprecated features",
    ),
    (
        ("new feature", "support"),
        "covering new features and capabilities",
        "New functionality available to leverage",
    ),
)


def impact_for_category(category: str) -> str:
    """Return the generic impact statement for ``category``."""
    return _CATEGORY_IMPACT.get(category, DEFAULT_IMPACT)


def heuristic_verdict(session: Session) -> Verdict:
    """Build a keep verdict from paths, line counts and commit titles.

    The summary names the categories touched and the aggregate line counts;
    commit titles mentioning prerequisites, examples, deprecations or new
    features refine both summary and impact.
    """
    categories = list(dict.fromkeys(category_of(path) for path in session.paths))
    category = categories[0]
    summary = (
        f"Updated documentation for {', '.join(categories).lower()} "
        f"(+{session.additions}/-{session.deletions} lines)"
    )
    impact = impact_for_category(category)

    messages = " ".join(title.lower() for title in session.titles)
    for fragments, suffix, refined_impact in _KEYWORD_REFINEMENTS:
        if any(fragment in messages for fragment in fragments):
            summary = f"{summary} {suffix}"
            impact = refined_impact
            break

    return Verdict(
        decision=Decision.KEEP,
        category=category,
        summary=summary,
        impact=impact,
        confidence=HEURISTIC_CONFIDENCE,
    )
