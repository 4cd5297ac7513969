"""JSON helpers for model replies and stored JSON columns."""
import json
import re
from typing import Any, List, Optional

from loguru import logger


def extract_json_object(raw_response: str) -> Any:
    """Best-effort extraction of a JSON object from a model response string.

    Strips markdown code fences, then falls back to the span between the
    first "{" and the last "}" (tolerating trailing commas) when the reply
    carries extra prose.

    Raises:
        ValueError: If no JSON object can be recovered.
    """
    text = (raw_response or "").strip()

    if "```" in text:
        text = re.sub(r"```[a-zA-Z]*\n?", "", text)
        text = text.replace("```", "").strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug("Direct JSON parse failed: {}", e)

    start_idx = text.find("{")
    end_idx = text.rfind("}")
    if start_idx != -1 and end_idx > start_idx:
        candidate = text[start_idx:end_idx + 1]
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            candidate = re.sub(r",\s*}", "}", candidate)
            candidate = re.sub(r",\s*]", "]", candidate)
            try:
                return json.loads(candidate)
            except json.JSONDecodeError:
                pass

    logger.error("Could not extract valid JSON from response. First 500 chars: {}", text[:500])
    raise ValueError("Model response does not contain a valid JSON object")


def decode_json(raw: Any) -> Optional[Any]:
    """Decode a stored JSON column, returning None when it is empty or malformed."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, (dict, list)):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return None


def decode_string_list(raw: Any) -> List[str]:
    """Decode a stored JSON array of strings; anything else yields an empty list."""
    value = decode_json(raw)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]
