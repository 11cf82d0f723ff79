"""
JSON repair and SWOT list extraction for LLM responses.
"""

import re
import json
from typing import Any, Dict, List, Optional

import json5

from src.core.logging import get_logger

logger = get_logger(__name__)

# ---------------- JSON Repair Utilities ----------------

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_SMART_QUOTES = {
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "«": '"',
    "»": '"'
}
_CTRL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")


def sanitize_json_text(text: str) -> str:
    """
    Best-effort cleanups for common JSON issues: code fences, smart quotes,
    control characters and trailing commas.

    Example:
        >>> sanitize_json_text('```json\\n{"key": "value",}\\n```')
        '{"key": "value"}'
    """
    t = text.strip()
    t = _FENCE_RE.sub("", t)
    for k, v in _SMART_QUOTES.items():
        t = t.replace(k, v)
    t = _CTRL_RE.sub("", t)
    t = re.sub(r",(\s*[\]\}])", r"\1", t)
    return t.strip()


def parse_json_robust(text: str) -> Dict[str, Any]:
    """
    Parse JSON text with fallback strategies.

    Tries in order:
    1. json.loads() on the raw text
    2. Sanitize + json.loads()
    3. json5.loads() (single quotes, comments, unquoted keys)
    4. Slice between the first { and the last } and retry both parsers

    Raises:
        ValueError: If all parsing strategies fail

    Example:
        >>> parse_json_robust("Sure! {'strengths': []}")
        {'strengths': []}
    """
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        pass

    t2 = sanitize_json_text(text or "")
    try:
        return json.loads(t2)
    except ValueError:
        pass

    try:
        return json5.loads(t2)
    except ValueError:
        pass

    start = t2.find("{")
    end = t2.rfind("}")
    if start >= 0 and end > start:
        sliced = t2[start:end + 1]
        try:
            return json.loads(sliced)
        except ValueError:
            try:
                return json5.loads(sliced)
            except ValueError:
                pass

    logger.error(f"Failed to parse JSON after all strategies. Text preview: {(text or '')[:200]}...")
    raise ValueError("Unparseable JSON after all fallback strategies")


# ---------------- SWOT extraction ----------------

SWOT_ALIASES: Dict[str, tuple] = {
    "strengths": ("strengths", "your_strengths", "yourstrengths", "your_business_strengths"),
    "weaknesses": ("weaknesses", "your_weaknesses", "yourweaknesses", "your_business_weaknesses"),
    "opportunities": ("opportunities", "market_opportunities"),
    "threats": ("threats", "market_threats"),
}

MAX_ITEMS = 8


def _key(name: str) -> str:
    snake = re.sub(r"(?<=[a-z])(?=[A-Z])", "_", str(name))
    return re.sub(r"[^a-z_]", "", snake.lower().replace(" ", "_"))


def _strip_ws(val: Any) -> Any:
    if isinstance(val, str):
        return re.sub(r"\s+", " ", val).strip()
    return val


def _as_items(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("item") or item.get("text") or item.get("description") or ""
        text = _strip_ws(str(item)) if item is not None else ""
        if text and text not in items:
            items.append(text)
    return items[:MAX_ITEMS]


def parse_swot_lists(parsed: Any) -> Optional[Dict[str, List[str]]]:
    """
    Pull the four SWOT lists out of a decoded LLM response.

    Key spellings such as "yourStrengths" or "Market Threats" are accepted.
    A top-level "swot" object is unwrapped.

    Returns:
        Dict with strengths/weaknesses/opportunities/threats, or None when any
        of the four is missing or empty

    Example:
        >>> parse_swot_lists({"yourStrengths": ["a"], "weaknesses": ["b"],
        ...                   "opportunities": ["c"], "threats": ["d"]})["strengths"]
        ['a']
    """
    if not isinstance(parsed, dict):
        return None
    if isinstance(parsed.get("swot"), dict):
        parsed = parsed["swot"]

    by_key = {_key(k): v for k, v in parsed.items()}
    result: Dict[str, List[str]] = {}
    for name, aliases in SWOT_ALIASES.items():
        value = next((by_key[a] for a in aliases if a in by_key), None)
        items = _as_items(value)
        if not items:
            logger.warning(f"LLM SWOT response has no usable '{name}' list")
            return None
        result[name] = items
    return result
