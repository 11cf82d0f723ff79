"""
Gemini API client for the narrative SWOT.

Settings come from the shared Config (GEMINI_API_KEY, GEMINI_MODEL).
"""

import time
from typing import Any, Callable, Dict, Optional

import google.generativeai as genai

from src.core.config import get_config
from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_RETRIES = 2
RETRY_BASE_SLEEP = 1.6

DEFAULT_GENERATION_CONFIG: Dict[str, Any] = {
    "temperature": 0.4,
    "candidate_count": 1,
    "response_mime_type": "application/json",
}


def get_gemini_client(api_key: Optional[str] = None, model_name: Optional[str] = None):
    """
    Configure the SDK and return a GenerativeModel.

    Raises:
        RuntimeError: If no API key is configured
    """
    config = get_config()
    key = api_key or config.gemini_api_key
    if not key:
        raise RuntimeError("GEMINI_API_KEY missing. Set it in configs/.env (e.g., GEMINI_API_KEY=...)")

    genai.configure(api_key=key)
    model = model_name or config.gemini_model
    logger.info(f"[LLM Client] Initialized Gemini model: {model}")
    return genai.GenerativeModel(model)


def call_gemini_with_retries(
    model,
    prompt: str,
    generation_config: Optional[Dict[str, Any]] = None,
    max_retries: int = MAX_RETRIES,
    base_sleep: float = RETRY_BASE_SLEEP,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    generate_content with exponential backoff.

    Returns:
        GenerateContentResponse

    Raises:
        Last exception if all retries exhausted
    """
    generation_config = generation_config or DEFAULT_GENERATION_CONFIG
    tries = max_retries + 1
    last_err: Optional[Exception] = None

    for i in range(tries):
        try:
            return model.generate_content(prompt, generation_config=generation_config)
        except Exception as e:
            last_err = e
            if i < tries - 1:
                delay = base_sleep * (2 ** i)
                logger.info(f"[LLM Client] attempt {i + 1}/{tries} failed: {e}. Retrying in {delay:.1f}s")
                sleep(delay)

    logger.error(f"[LLM Client] All {tries} attempts failed. Last error: {last_err}")
    raise last_err


def call_gemini(model, prompt: str, **kwargs) -> str:
    """Response text of one prompt, stripped."""
    response = call_gemini_with_retries(model, prompt, **kwargs)
    return (getattr(response, "text", "") or "").strip()
