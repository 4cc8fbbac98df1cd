"""Summarization of documentation sessions and release notes.

Public API
----------
Summarizer, ReleaseSummarizer
    Protocols implemented by summarization backends.
OpenAISummarizer, OpenAIReleaseSummarizer
    OpenAI-compatible chat completion backends.
enrich_sessions
    Attach verdicts to sessions, falling back to :func:`heuristic_verdict`.
extract_json_array
    Locate the JSON array inside free-form model output.
create_summarizer, create_release_summarizer
    Build backends from ``DOCWATCH_SUMMARIZER_BACKEND``.
"""

from __future__ import annotations

from .config import OpenAISummarizerConfig
from .enrich import EnrichedSession, enrich_sessions
from .errors import (
    EnrichmentUnavailable,
    OpenAIAPIError,
    OpenAIConfigError,
    OpenAIResponseShapeError,
    SummarizerConfigError,
    SummaryError,
)
from .factory import create_release_summarizer, create_summarizer
from .heuristic import heuristic_verdict
from .json_extract import extract_json_array
from .models import Decision, ReleaseAnalysis, Verdict
from .openai_client import OpenAISummarizer, verdicts_from_content
from .protocol import ReleaseSummarizer, Summarizer
from .releases import OpenAIReleaseSummarizer, analyses_from_content

__all__ = [
    "Decision",
    "EnrichedSession",
    "EnrichmentUnavailable",
    "OpenAIAPIError",
    "OpenAIConfigError",
    "OpenAIReleaseSummarizer",
    "OpenAIResponseShapeError",
    "OpenAISummarizer",
    "OpenAISummarizerConfig",
    "ReleaseAnalysis",
    "ReleaseSummarizer",
    "Summarizer",
    "SummarizerConfigError",
    "SummaryError",
    "Verdict",
    "analyses_from_content",
    "create_release_summarizer",
    "create_summarizer",
    "enrich_sessions",
    "extract_json_array",
    "heuristic_verdict",
    "verdicts_from_content",
]
