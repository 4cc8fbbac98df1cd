"""Noise filtering for documentation change events.

Noise rules are data: an ordered table of ``(field, pattern, reason)``
entries compiled once into a predicate. Patterns are deliberately narrow
because dropping a meaningful change costs more than letting a trivial one
through; the summarizer gets a second chance to skip those.
"""

from __future__ import annotations

import dataclasses
import enum
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import ChangeEvent


class NoiseField(enum.StrEnum):
    """Event attribute a noise rule inspects."""

    AUTHOR = "author"
    MESSAGE = "message"


@dataclasses.dataclass(frozen=True, slots=True)
class NoiseRule:
    """One case-insensitive regex rule applied to a normalised field."""

    field: NoiseField
    pattern: str
    reason: str


DEFAULT_NOISE_RULES: tuple[NoiseRule, ...] = (
    NoiseRule(NoiseField.AUTHOR, r"\[bot\]", "bot author"),
    NoiseRule(NoiseField.AUTHOR, r"(?<![a-z0-9])bot(?![a-z0-9])", "bot author"),
    NoiseRule(NoiseField.AUTHOR, r"(?<![a-z0-9])actions(?![a-z0-9])", "bot author"),
    NoiseRule(NoiseField.AUTHOR, r"dependabot", "bot author"),
    NoiseRule(NoiseField.AUTHOR, r"renovate", "bot author"),
    NoiseRule(NoiseField.AUTHOR, r"learn-build-service-prod", "bot author"),
    NoiseRule(NoiseField.AUTHOR, r"prmerger-automator", "bot author"),
    NoiseRule(NoiseField.MESSAGE, r"^merge pull request", "merge commit"),
    NoiseRule(NoiseField.MESSAGE, r"^merge\b", "merge commit"),
    NoiseRule(NoiseField.MESSAGE, r"^sync\b", "sync commit"),
    NoiseRule(NoiseField.MESSAGE, r"\btypos?\b", "typo fix"),
    NoiseRule(NoiseField.MESSAGE, r"\bgrammar\b", "grammar fix"),
    NoiseRule(NoiseField.MESSAGE, r"\bformatting\b", "formatting"),
    NoiseRule(NoiseField.MESSAGE, r"\bformat fix(es)?\b", "formatting"),
    NoiseRule(NoiseField.MESSAGE, r"\blink fix(es)?\b", "link fix"),
    NoiseRule(NoiseField.MESSAGE, r"\bfix(es|ed|ing)? (broken )?links?\b", "link fix"),
    NoiseRule(NoiseField.MESSAGE, r"\bacrolinx\b", "style checker"),
    NoiseRule(NoiseField.MESSAGE, r"\bspell ?check", "spell check"),
    NoiseRule(NoiseField.MESSAGE, r"\bminor fix(es)?\b", "minor fix"),
    NoiseRule(NoiseField.MESSAGE, r"\bfinal fix\b", "minor fix"),
    NoiseRule(NoiseField.MESSAGE, r"^chore(\(.+\))?!?:", "chore"),
    NoiseRule(
        NoiseField.MESSAGE,
        r"^(update|updated|edit|fix)\s+readme(\.md)?\s*$",
        "readme-only edit",
    ),
)

DEFAULT_CONTENT_SUFFIXES: tuple[str, ...] = (".md", ".markdown")


_CompiledRule: typ.TypeAlias = "tuple[NoiseField, re.Pattern[str], str]"


def _normalise_text(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


@dataclasses.dataclass(frozen=True, slots=True)
class NoiseFilter:
    """Compiled noise predicate for change events and change sets.

    Attributes
    ----------
    rules
        Ordered rule table; the first match decides the reported reason.
    trivial_line_threshold
        Change sets touching only markdown with at most this many added plus
        deleted lines are noise.
    content_suffixes
        Suffixes of files that carry documentation content.

    """

    rules: tuple[NoiseRule, ...] = DEFAULT_NOISE_RULES
    trivial_line_threshold: int = 3
    content_suffixes: tuple[str, ...] = DEFAULT_CONTENT_SUFFIXES
    _compiled: tuple[_CompiledRule, ...] = dataclasses.field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        """Compile the rule table once."""
        compiled = tuple(
            (rule.field, re.compile(rule.pattern, re.IGNORECASE), rule.reason)
            for rule in self.rules
        )
        object.__setattr__(self, "_compiled", compiled)

    def explain(self, event: ChangeEvent) -> str | None:
        """Return the reason ``event`` is noise, or ``None`` when it is not."""
        fields = {
            NoiseField.AUTHOR: _normalise_text(getattr(event, "author", None)),
            NoiseField.MESSAGE: _normalise_text(getattr(event, "message", None)),
        }
        for field, pattern, reason in self._compiled:
            if pattern.search(fields[field]):
                return reason
        return None

    def is_noise(self, event: ChangeEvent) -> bool:
        """Return True when the event's author or message marks it as noise."""
        return self.explain(event) is not None

    def is_content_path(self, path: str) -> bool:
        """Return True when ``path`` is a documentation content file."""
        return _normalise_text(path).endswith(self.content_suffixes)

    def is_noise_change_set(self, events: cabc.Sequence[ChangeEvent]) -> bool:
        """Return True when one commit's or PR's file set is not substantive.

        A set is noise when it touches no content files at all, or when it
        touches only content files and changes no more than
        ``trivial_line_threshold`` lines in total.
        """
        if not events:
            return True
        content = [event for event in events if self.is_content_path(event.path)]
        if not content:
            return True
        if len(content) != len(events):
            return False
        total = sum(event.additions + event.deletions for event in events)
        return total <= self.trivial_line_threshold

    def filter_events(self, events: cabc.Iterable[ChangeEvent]) -> list[ChangeEvent]:
        """Drop noisy events and change sets, keeping content files only.

        Events are judged per change set (all files sharing an ``event_id``)
        so a bot commit or a three-line typo fix disappears as a whole.
        """
        change_sets: dict[str, list[ChangeEvent]] = {}
        for event in events:
            change_sets.setdefault(event.event_id, []).append(event)

        kept: list[ChangeEvent] = []
        for change_set in change_sets.values():
            if any(self.is_noise(event) for event in change_set):
                continue
            if self.is_noise_change_set(change_set):
                continue
            kept.extend(
                event for event in change_set if self.is_content_path(event.path)
            )
        return sorted(kept, key=lambda event: (event.timestamp, event.path))
