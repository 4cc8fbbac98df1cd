"""Configuration for the OpenAI-compatible summarizer."""

from __future__ import annotations

import dataclasses
import os

from .errors import OpenAIConfigError, SummarizerConfigError

_DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
_DEFAULT_MODEL = "gpt-4o-mini"
_DEFAULT_TIMEOUT_S = 60.0
_DEFAULT_TEMPERATURE = 0.2
_DEFAULT_MAX_TOKENS = 2048

_MIN_TEMPERATURE = 0.0
_MAX_TEMPERATURE = 2.0


def _read_float(
    env_var: str, default: float, lower: float, upper: float, name: str
) -> float:
    raw = os.environ.get(env_var)
    if raw is None or not raw.strip():
        return default
    constraint = f"Must be a float between {lower} and {upper}"
    try:
        value = float(raw)
    except ValueError as exc:
        raise SummarizerConfigError.invalid_parameter(name, raw, constraint) from exc
    if not lower <= value <= upper:
        raise SummarizerConfigError.invalid_parameter(name, raw, constraint)
    return value


def _read_positive_int(env_var: str, default: int, name: str) -> int:
    raw = os.environ.get(env_var)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise SummarizerConfigError.invalid_parameter(
            name, raw, "Must be a positive integer"
        ) from exc
    if value <= 0:
        raise SummarizerConfigError.invalid_parameter(
            name, raw, "Must be a positive integer"
        )
    return value


@dataclasses.dataclass(frozen=True, slots=True)
class OpenAISummarizerConfig:
    """Configuration for the OpenAI-compatible summarizer.

    Attributes
    ----------
    api_key
        API key for authentication with the chat completions endpoint.
    endpoint
        Chat completions endpoint URL.
    model
        Model identifier to use for completions.
    timeout_s
        Request timeout in seconds.
    temperature
        Sampling temperature (0.0 to 2.0).
    max_tokens
        Maximum tokens in the completion response.

    """

    api_key: str
    endpoint: str = _DEFAULT_ENDPOINT
    model: str = _DEFAULT_MODEL
    timeout_s: float = _DEFAULT_TIMEOUT_S
    temperature: float = _DEFAULT_TEMPERATURE
    max_tokens: int = _DEFAULT_MAX_TOKENS

    @classmethod
    def from_env(cls) -> OpenAISummarizerConfig:
        """Build configuration from environment variables.

        Reads the following environment variables:

        - ``DOCWATCH_OPENAI_API_KEY``: Required API key
        - ``DOCWATCH_OPENAI_ENDPOINT``: Optional endpoint override
        - ``DOCWATCH_OPENAI_MODEL``: Optional model override
        - ``DOCWATCH_OPENAI_TIMEOUT_S``: Optional timeout (0 to 600 seconds)
        - ``DOCWATCH_OPENAI_TEMPERATURE``: Optional temperature (0.0 to 2.0)
        - ``DOCWATCH_OPENAI_MAX_TOKENS``: Optional max tokens (positive integer)

        Raises
        ------
        OpenAIConfigError
            If the API key is missing or blank.
        SummarizerConfigError
            If a numeric override is invalid.

        """
        raw_api_key = os.environ.get("DOCWATCH_OPENAI_API_KEY")
        if raw_api_key is None:
            raise OpenAIConfigError.missing_api_key()
        api_key = raw_api_key.strip()
        if not api_key:
            raise OpenAIConfigError.empty_api_key()

        return cls(
            api_key=api_key,
            endpoint=os.environ.get("DOCWATCH_OPENAI_ENDPOINT", _DEFAULT_ENDPOINT),
            model=os.environ.get("DOCWATCH_OPENAI_MODEL", _DEFAULT_MODEL),
            timeout_s=_read_float(
                "DOCWATCH_OPENAI_TIMEOUT_S", _DEFAULT_TIMEOUT_S, 0.0, 600.0, "timeout"
            ),
            temperature=_read_float(
                "DOCWATCH_OPENAI_TEMPERATURE",
                _DEFAULT_TEMPERATURE,
                _MIN_TEMPERATURE,
                _MAX_TEMPERATURE,
                "temperature",
            ),
            max_tokens=_read_positive_int(
                "DOCWATCH_OPENAI_MAX_TOKENS", _DEFAULT_MAX_TOKENS, "max_tokens"
            ),
        )
