"""Locate a JSON array inside free-form model output.

Chat models wrap structured output in prose or markdown fences despite
instructions. :func:`extract_json_array` scans for the first bracketed
region that balances (ignoring brackets inside string literals) and also
decodes as a JSON array.
"""

from __future__ import annotations

import typing as typ

import msgspec


def _balanced_end(text: str, start: int) -> int | None:
    """Return the index of the ``]`` closing the ``[`` at ``start``."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return index
    return None


def extract_json_array(text: str) -> list[typ.Any] | None:
    """Return the first balanced JSON array embedded in ``text``.

    Parameters
    ----------
    text
        Raw model output, possibly fenced or surrounded by prose.

    Returns
    -------
    list | None
        The decoded array, or ``None`` when no candidate decodes.

    Examples
    --------
    >>> extract_json_array('Sure!\\n```json\\n[{"key": "a"}]\\n```')
    [{'key': 'a'}]
    >>> extract_json_array("no structured output") is None
    True

    """
    start = text.find("[")
    while start != -1:
        end = _balanced_end(text, start)
        if end is None:
            start = text.find("[", start + 1)
            continue
        try:
            decoded = msgspec.json.decode(text[start : end + 1])
        except msgspec.DecodeError:
            start = text.find("[", start + 1)
            continue
        if isinstance(decoded, list):
            return decoded
        start = text.find("[", end + 1)
    return None
