"""Response parser for Mistral chat completion outputs.

Reasoning models return content as a list of typed chunks (thinking
chunks plus text chunks); other models return a plain string. Both are
handled, with a regex fallback for responses wrapped in prose.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

# A JSON object with up to two levels of nested braces
_JSON_OBJECT_PATTERN = re.compile(r"\{(?:[^{}]|\{(?:[^{}]|\{[^{}]*\})*\})*\}", re.DOTALL)


def parse_json_response(response: Any) -> dict:
    """Extract and parse the JSON object from a chat completion response.

    Phases:
      1. Chunk list: keep chunks with type == 'text', join, json.loads().
      2. Plain string: json.loads() directly.
      3. Regex fallback: last complete JSON object in the text.
      4. Raise ValueError.

    A JSON array holding exactly one object is unwrapped; any other
    array is an error.

    Args:
        response: Mistral ChatCompletionResponse (or compatible mock with
                  response.choices[0].message.content).

    Raises:
        ValueError: If no JSON object can be extracted.
    """
    content = response.choices[0].message.content

    if isinstance(content, list):
        text = "".join(
            getattr(chunk, "text", "")
            for chunk in content
            if getattr(chunk, "type", None) == "text"
        )
    elif isinstance(content, str):
        text = content
    else:
        text = str(content)

    try:
        return _as_object(json.loads(text))
    except json.JSONDecodeError:
        pass

    result = _regex_extract_json(text)
    if result is not None:
        return result

    raise ValueError("No valid JSON found in response")


def _as_object(parsed: object) -> dict:
    if isinstance(parsed, dict):
        return parsed
    if isinstance(parsed, list):
        logger.warning("Model returned JSON array of length %d instead of object", len(parsed))
        if len(parsed) == 1 and isinstance(parsed[0], dict):
            return parsed[0]
        raise ValueError(
            f"Model returned JSON array with {len(parsed)} elements instead of JSON object"
        )
    raise ValueError(f"Model returned JSON {type(parsed).__name__} instead of object")


def _regex_extract_json(text: str) -> dict | None:
    """Find the last complete JSON object in text, or None."""
    for match in reversed(_JSON_OBJECT_PATTERN.findall(text)):
        try:
            return json.loads(match)
        except json.JSONDecodeError:
            continue
    return None
