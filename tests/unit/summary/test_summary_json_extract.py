"""Tests for locating a JSON array in free-form model output."""

from __future__ import annotations

import pytest

from docwatch.summary.json_extract import extract_json_array


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        pytest.param('[{"key": "a"}]', [{"key": "a"}], id="bare"),
        pytest.param(
            'Here you go:\n```json\n[{"key": "a"}]\n```\nAnything else?',
            [{"key": "a"}],
            id="fenced-with-prose",
        ),
        pytest.param("[]", [], id="empty-array"),
        pytest.param("[[1, 2], [3]]", [[1, 2], [3]], id="nested"),
        pytest.param(
            '[{"key": "a]b", "summary": "[draft"}]',
            [{"key": "a]b", "summary": "[draft"}],
            id="brackets-in-strings",
        ),
        pytest.param(
            '[{"summary": "say \\"hi]\\""}]',
            [{"summary": 'say "hi]"'}],
            id="escaped-quotes",
        ),
        pytest.param(
            "See [note] below.\n[1, 2]",
            [1, 2],
            id="skips-non-json-candidate",
        ),
    ],
)
def test_extracts_first_decodable_array(text: str, expected: list) -> None:
    """The first balanced, decodable array wins."""
    assert extract_json_array(text) == expected


@pytest.mark.parametrize(
    "text",
    [
        pytest.param("", id="empty"),
        pytest.param("No changes worth reporting.", id="prose"),
        pytest.param('[{"key": "a"}', id="unbalanced"),
        pytest.param('{"key": "a"}', id="object-only"),
    ],
)
def test_returns_none_without_array(text: str) -> None:
    """Text without a decodable array yields None."""
    assert extract_json_array(text) is None
