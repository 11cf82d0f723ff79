"""
Gemini-written SWOT lists.

The narrator is optional. Whatever goes wrong (no key, API error, response
that does not parse) it returns None and the rule-based lists stay.
"""

import json
from typing import Any, Dict, List, Optional, Sequence

from src.core.config import get_config
from src.core.error_logger import get_error_logger
from src.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage
from src.core.logging import get_logger
from src.llm.client import MAX_RETRIES, call_gemini, get_gemini_client
from src.llm.parsers import parse_json_robust, parse_swot_lists
from src.models.reports import AnalysisContext, CompetitorProfile

logger = get_logger(__name__)

SWOT_PROMPT = """You are a competitive strategy analyst.
Analyze these competitor profiles and write a SWOT analysis for a business in the {industry} industry.

Analysis focus: {focus}

Competitor profiles (JSON):
{profiles}

Return ONLY a JSON object with four arrays of short strings:
{{"strengths": [...], "weaknesses": [...], "opportunities": [...], "threats": [...]}}
- strengths: openings left by gaps in competitor offerings
- weaknesses: areas where competitors excel
- opportunities: untapped segments and trends
- threats: competitive risks and market changes
"""


def profile_digest(profile: CompetitorProfile) -> Dict[str, Any]:
    """Compact view of a profile for the prompt."""
    return {
        "name": profile.competitor_name,
        "domain": profile.domain,
        "data_quality": profile.data_quality,
        "seo_score": profile.website_analysis.seo_score,
        "content_categories": profile.content_analysis.content_categories,
        "content_frequency": profile.content_analysis.content_frequency,
        "runs_ads": profile.marketing_analysis.has_ads,
        "has_pricing": profile.pricing_info.has_pricing,
        "social": profile.social_links.present(),
        "brand_strength": profile.competitive_position.brand_strength,
        "innovation_score": profile.competitive_position.innovation_score,
    }


def build_swot_prompt(profiles: Sequence[CompetitorProfile], context: AnalysisContext) -> str:
    digests: List[Dict[str, Any]] = [profile_digest(p) for p in profiles]
    return SWOT_PROMPT.format(
        industry=context.industry or "general",
        focus=context.analysis_focus or "overall competitive position",
        profiles=json.dumps(digests, indent=2),
    )


class GeminiSwotNarrator:
    """
    Args:
        model: Optional pre-built GenerativeModel (tests pass a fake)
        model_name: Gemini model name when building one from config
        max_retries: generate_content retries before giving up
    """

    def __init__(
        self,
        model=None,
        model_name: Optional[str] = None,
        max_retries: int = MAX_RETRIES,
        error_logger=None,
    ):
        self._model = model
        self.model_name = model_name
        self.max_retries = max_retries
        self._error_logger = error_logger

    @classmethod
    def from_config(cls) -> Optional["GeminiSwotNarrator"]:
        """Narrator built from Config, or None when the LLM SWOT is switched off."""
        config = get_config()
        if not (config.llm_swot_enabled and config.gemini_api_key):
            return None
        return cls(model_name=config.gemini_model)

    @property
    def error_logger(self):
        if self._error_logger is None:
            self._error_logger = get_error_logger()
        return self._error_logger

    @property
    def model(self):
        if self._model is None:
            self._model = get_gemini_client(model_name=self.model_name)
        return self._model

    def narrate(
        self, profiles: Sequence[CompetitorProfile], context: AnalysisContext
    ) -> Optional[Dict[str, List[str]]]:
        if not profiles:
            return None

        prompt = build_swot_prompt(profiles, context)
        try:
            text = call_gemini(self.model, prompt, max_retries=self.max_retries)
        except Exception as e:
            self._log(e, ErrorStage.CALL_LLM)
            return None

        try:
            parsed = parse_json_robust(text)
        except ValueError as e:
            self._log(e, ErrorStage.PARSE_JSON, {"preview": text[:200]})
            return None

        lists = parse_swot_lists(parsed)
        if lists is not None:
            logger.info(f"LLM SWOT accepted for {len(profiles)} profiles")
        return lists

    def _log(self, exc: Exception, stage: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        logger.warning(f"LLM SWOT unavailable at {stage}: {exc}")
        self.error_logger.log_exception(
            exc,
            component=ErrorComponent.LLM,
            stage=stage,
            domain="generativelanguage.googleapis.com",
            severity=ErrorSeverity.WARNING,
            metadata=metadata,
        )
