"""Factory for creating summarizers from environment configuration."""

from __future__ import annotations

import os
import typing as typ

from .errors import SummarizerConfigError

if typ.TYPE_CHECKING:
    from .protocol import ReleaseSummarizer, Summarizer

BACKEND_ENV = "DOCWATCH_SUMMARIZER_BACKEND"

_VALID_BACKENDS = frozenset({"none", "openai"})


def _selected_backend() -> str:
    raw_backend = os.environ.get(BACKEND_ENV, "none")
    backend = raw_backend.strip().lower() or "none"
    if backend not in _VALID_BACKENDS:
        raise SummarizerConfigError.invalid_backend(raw_backend, _VALID_BACKENDS)
    return backend


def create_summarizer() -> Summarizer | None:
    """Create the session summarizer selected by the environment.

    Reads ``DOCWATCH_SUMMARIZER_BACKEND`` (``none`` or ``openai``, default
    ``none``). For ``openai`` the ``DOCWATCH_OPENAI_*`` variables described
    on :class:`~docwatch.summary.config.OpenAISummarizerConfig` apply.

    Returns
    -------
    Summarizer | None
        ``None`` when summaries should come from heuristics alone.

    Raises
    ------
    SummarizerConfigError
        If the backend name is not recognised.
    OpenAIConfigError
        If the OpenAI backend is selected without an API key.

    """
    if _selected_backend() == "none":
        return None

    from .config import OpenAISummarizerConfig
    from .openai_client import OpenAISummarizer

    return OpenAISummarizer(OpenAISummarizerConfig.from_env())


def create_release_summarizer() -> ReleaseSummarizer | None:
    """Create the release-notes summarizer selected by the environment."""
    if _selected_backend() == "none":
        return None

    from .config import OpenAISummarizerConfig
    from .releases import OpenAIReleaseSummarizer

    return OpenAIReleaseSummarizer(OpenAISummarizerConfig.from_env())
