"""Prompt templates for the chat-completion summarizers."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docwatch.github.models import ReleaseRecord
    from docwatch.tracking.grouping import Session

_MAX_TITLES = 5
_MAX_SAMPLE_LINES = 20
_MAX_RELEASE_BODY_CHARS = 6000

SESSIONS_SYSTEM_PROMPT = """\
You review changes to a product documentation site and decide which of them \
readers need to hear about.

Each change group lists a key, the commit or pull request titles, the number \
of lines added and removed, and a sample of the changed lines.

## Output Requirements

Respond with a JSON array only, one object per group you want to keep:

```json
[
  {
    "key": "<the group key, copied exactly>",
    "summary": "1-2 sentences describing what changed for readers",
    "category": "short topic such as Networking, Security or Upgrade",
    "impact": "what readers should do or know as a result",
    "score": 0.0
  }
]
```

## Guidelines

- Omit groups that only fix typos, formatting, links or metadata.
- ``score`` is your confidence between 0 and 1 that the change matters.
- Never invent keys; copy them from the input.
"""

RELEASES_SYSTEM_PROMPT = """\
You analyse product release notes and extract what operators need to know.

## Output Requirements

Respond with a JSON array only, one object per release:

```json
[
  {
    "key": "<the release tag, copied exactly>",
    "summary": "2-3 sentence overview of the release",
    "breaking_changes": ["API changes, removals, required migrations"],
    "good_to_know": ["important notes, recommendations, caveats"],
    "key_features": ["new functionality, major improvements, bug fixes"]
  }
]
```

Use an empty array for a category with no items.
"""


def _session_sample(session: Session) -> list[str]:
    lines: list[str] = []
    for event in session.events:
        if not event.patch_sample:
            continue
        lines.extend(event.patch_sample.splitlines())
        if len(lines) >= _MAX_SAMPLE_LINES:
            break
    return lines[:_MAX_SAMPLE_LINES]


def _format_session(session: Session) -> list[str]:
    sections = [
        "",
        f"## key: {session.key}",
        f"- Document: {session.document_url}",
        f"- Changes: +{session.additions} / -{session.deletions} lines",
    ]
    titles = session.titles[:_MAX_TITLES]
    if titles:
        sections.append("- Titles:")
        sections.extend(f"  - {title}" for title in titles)
    sample = _session_sample(session)
    if sample:
        sections.extend(["- Sample:", "```diff", *sample, "```"])
    return sections


def build_sessions_prompt(sessions: cabc.Sequence[Session]) -> str:
    """Describe every session of a run in one user prompt.

    Parameters
    ----------
    sessions
        Sessions produced by the grouper for the current run.

    Returns
    -------
    str
        Markdown prompt listing each session under its key.

    """
    sections = [f"# Documentation change groups ({len(sessions)})"]
    for session in sessions:
        sections.extend(_format_session(session))
    return "\n".join(sections)


def build_releases_prompt(releases: cabc.Sequence[ReleaseRecord]) -> str:
    """Describe the release notes of each release in one user prompt."""
    sections = [f"# Releases ({len(releases)})"]
    for release in releases:
        sections.extend(
            [
                "",
                f"## key: {release.tag_name}",
                f"- Title: {release.name}",
                "",
                release.body.strip()[:_MAX_RELEASE_BODY_CHARS],
            ]
        )
    return "\n".join(sections)
