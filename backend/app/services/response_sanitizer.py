"""Turn raw LLM completions into parsed JSON values."""
from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Union

from app.core.exceptions import JSONParseError

# Loosely typed parse tree produced by json.loads on model output.
LooseValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

_LEADING_FENCE = re.compile(r"^```[ \t]*[A-Za-z0-9_+-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?```$")
_EMBEDDED_BLOCK = re.compile(r"```[ \t]*[A-Za-z0-9_+-]*[ \t]*\r?\n(.*?)```", re.DOTALL)


def extract_json(text: str) -> str:
    """Drop markdown code fences (any language tag, any case) and trim.

    Text without fences is only trimmed. When the model wraps a fenced block in
    prose, the block's content is returned.
    """
    if not text:
        return ""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _LEADING_FENCE.sub("", stripped, count=1)
        stripped = _TRAILING_FENCE.sub("", stripped, count=1)
        return stripped.strip()

    block = _EMBEDDED_BLOCK.search(stripped)
    if block:
        return block.group(1).strip()
    return stripped


def parse_completion(text: str) -> LooseValue:
    cleaned = extract_json(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        error = exc

    # Models sometimes add a sentence before or after the object.
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError:
            pass

    preview = cleaned[:80].replace("\n", " ")
    raise JSONParseError(f"Model response is not valid JSON ({error.msg}): {preview!r}")
