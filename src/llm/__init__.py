"""
Optional narrative SWOT using Google Gemini.

Module Structure:
- parsers: JSON repair and SWOT list extraction
- client: Gemini API interactions
- swot: GeminiSwotNarrator used by the aggregator
"""

# Parser functions don't require Gemini
from src.llm.parsers import (
    parse_json_robust,
    parse_swot_lists,
    sanitize_json_text,
)


# Lazy import for objects that require google-generativeai
def __getattr__(name):
    if name == "GeminiSwotNarrator":
        from src.llm.swot import GeminiSwotNarrator
        return GeminiSwotNarrator

    if name in ("get_gemini_client", "call_gemini_with_retries", "call_gemini"):
        from src.llm import client
        return getattr(client, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "parse_json_robust",
    "parse_swot_lists",
    "sanitize_json_text",
    "GeminiSwotNarrator",
    "get_gemini_client",
    "call_gemini_with_retries",
    "call_gemini",
]
