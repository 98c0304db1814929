from __future__ import annotations

import pytest

from app.core.exceptions import JSONParseError
from app.services.response_sanitizer import extract_json, parse_completion

INNER = '{\n  "dailyCalories": 2400,\n  "meals": []\n}'


@pytest.mark.parametrize(
    "wrapped",
    [
        f"```json\n{INNER}\n```",
        f"```JSON\n{INNER}\n```",
        f"```Json\n{INNER}\n```\n",
        f"```\n{INNER}\n```",
        f"  \n```json\n{INNER}\n```  \n",
        f"```json {INNER}```",
        f"``` json\n{INNER}\n```",
        f"```\tjson\n{INNER}\n```",
    ],
)
def test_fenced_output_unwraps_to_inner_text(wrapped):
    assert extract_json(wrapped) == INNER


def test_unfenced_text_is_only_trimmed():
    assert extract_json(f"\n\t {INNER} \n") == INNER
    assert extract_json("plain words") == "plain words"


def test_empty_input_is_safe():
    assert extract_json("") == ""
    assert extract_json("   ") == ""


def test_fenced_block_inside_prose_is_extracted():
    text = f"Here is your plan:\n```json\n{INNER}\n```\nStay consistent!"
    assert extract_json(text) == INNER


def test_spaced_language_tag_inside_prose_is_extracted():
    text = f"Plan below.\n``` json\n{INNER}\n```"
    assert extract_json(text) == INNER
    assert parse_completion(text) == {"dailyCalories": 2400, "meals": []}


def test_parse_completion_returns_loose_tree():
    parsed = parse_completion(f"```json\n{INNER}\n```")
    assert parsed == {"dailyCalories": 2400, "meals": []}


def test_parse_completion_tolerates_trailing_sentence():
    parsed = parse_completion('{"schedule": ["Monday"]}\nLet me know if you need changes.')
    assert parsed == {"schedule": ["Monday"]}


def test_parse_completion_raises_for_non_json():
    with pytest.raises(JSONParseError) as excinfo:
        parse_completion("I'm sorry, I can't help with that.")
    assert "not valid JSON" in str(excinfo.value)


def test_parse_completion_raises_for_truncated_object():
    with pytest.raises(JSONParseError):
        parse_completion('```json\n{"schedule": ["Monday", "Wed\n```')
