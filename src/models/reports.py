"""
Aggregate report models built once per batch.

Every field has a human-readable default ("Unknown", "N/A", 0) so a report
renders completely even when every target failed.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any
from pydantic import BaseModel, Field

from src.models.payload import (
    BlogPost,
    ContactInfo,
    EstimateSource,
    PricingInfo,
    SocialLinks,
    TrafficSources,
)
from src.models.results import KeywordRanking, SubmissionResult


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AnalysisContext(BaseModel):
    """Caller-supplied context for aggregation."""
    industry: str = ""
    analysis_focus: str = ""
    competitor_names: List[str] = Field(default_factory=list)
    business_name: str = ""


# ---------------------------------------------------------------------------
# Competitor profile
# ---------------------------------------------------------------------------

class SocialPresence(BaseModel):
    og_title: str = ""
    og_description: str = ""
    og_image: str = ""
    twitter_card: str = ""


class WebsiteAnalysis(BaseModel):
    title: str = "Unknown"
    description: str = "Unknown"
    meta_keywords: str = ""
    social_presence: SocialPresence = Field(default_factory=SocialPresence)
    seo_score: int = Field(50, ge=0, le=100)


class ContentAnalysis(BaseModel):
    blog_topics: List[BlogPost] = Field(default_factory=list)
    content_categories: List[str] = Field(default_factory=lambda: ["General"])
    content_frequency: str = "Very Low (Quarterly)"
    content_quality: str = "Unknown"


class MarketingAnalysis(BaseModel):
    has_ads: bool = False
    ad_networks: List[str] = Field(default_factory=list)
    total_ads: int = 0
    active_campaigns: int = 0
    estimated_ad_spend: str = "Unknown"
    targeting_strategy: List[str] = Field(default_factory=list)
    creative_themes: List[str] = Field(default_factory=list)
    source: EstimateSource = EstimateSource.FALLBACK


class SEOAnalysis(BaseModel):
    total_backlinks: int = 0
    referring_domains: int = 0
    domain_authority: int = 0
    link_quality: str = "Unknown"
    source: EstimateSource = EstimateSource.FALLBACK


class TrafficAnalysis(BaseModel):
    total_visits: int = 0
    traffic_sources: TrafficSources = Field(default_factory=TrafficSources)
    top_referrers: List[str] = Field(default_factory=list)
    search_keywords: List[str] = Field(default_factory=list)
    geographic_reach: List[str] = Field(default_factory=list)
    source: EstimateSource = EstimateSource.FALLBACK


class CompetitivePosition(BaseModel):
    market_share: str = "Unknown"
    brand_strength: int = Field(50, ge=0, le=100)
    innovation_score: int = Field(50, ge=0, le=100)
    customer_engagement: int = Field(50, ge=0, le=100)


class CompetitorProfile(BaseModel):
    competitor_name: str = "Unknown"
    website: str = ""
    domain: str = "unknown"
    industry: str = ""
    data_quality: str = Field("failed", description="ok, fallback or failed")
    failure: Optional[str] = None
    website_analysis: WebsiteAnalysis = Field(default_factory=WebsiteAnalysis)
    content_analysis: ContentAnalysis = Field(default_factory=ContentAnalysis)
    marketing_analysis: MarketingAnalysis = Field(default_factory=MarketingAnalysis)
    seo_analysis: SEOAnalysis = Field(default_factory=SEOAnalysis)
    traffic_analysis: TrafficAnalysis = Field(default_factory=TrafficAnalysis)
    competitive_position: CompetitivePosition = Field(default_factory=CompetitivePosition)
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    pricing_info: PricingInfo = Field(default_factory=PricingInfo)


# ---------------------------------------------------------------------------
# SWOT and insights
# ---------------------------------------------------------------------------

class Recommendation(BaseModel):
    recommendation: str
    priority: str = "Medium"
    impact: str = "N/A"
    effort: str = "N/A"
    timeline: str = "N/A"
    category: str = "Strategy"


class SynthesizedReport(BaseModel):
    """SWOT-style synthesis over a set of competitor profiles."""
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)
    threats: List[str] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    source: str = Field("rules", description="rules or llm")


class PerformanceMetrics(BaseModel):
    profiles_analyzed: int = 0
    live_profiles: int = 0
    fallback_profiles: int = 0
    average_seo_score: float = 0.0
    average_brand_strength: float = 0.0
    average_innovation_score: float = 0.0
    average_customer_engagement: float = 0.0


class StrategicInsights(BaseModel):
    market_gaps: List[str] = Field(default_factory=list)
    competitive_advantages: Dict[str, str] = Field(default_factory=dict)
    strategic_recommendations: List[Recommendation] = Field(default_factory=list)
    performance_metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)


class CompetitorAnalysisReport(BaseModel):
    context: AnalysisContext = Field(default_factory=AnalysisContext)
    generated_at: str = Field(default_factory=_now)
    profiles: List[CompetitorProfile] = Field(default_factory=list)
    swot: SynthesizedReport = Field(default_factory=SynthesizedReport)
    insights: StrategicInsights = Field(default_factory=StrategicInsights)
    total_competitors: int = 0
    successful_extractions: int = 0
    failed_extractions: int = 0


# ---------------------------------------------------------------------------
# Citations
# ---------------------------------------------------------------------------

class CitationListing(BaseModel):
    """An existing listing of the business on a directory."""
    platform: str
    url: str = ""
    status: str = "Unknown"
    phone: str = ""
    address: str = ""


class MissingCitation(BaseModel):
    platform: str
    importance: str = "Low"
    url: str = "#"
    description: str = "Essential directory for local business visibility"


class CitationGapReport(BaseModel):
    current_citations: int = 0
    citation_details: List[CitationListing] = Field(default_factory=list)
    missing_citations: List[MissingCitation] = Field(default_factory=list)
    inconsistencies: List[str] = Field(default_factory=list)


class CitationBatchSummary(BaseModel):
    """Counts over one citation batch. total_submitted includes low-confidence submissions."""
    business_name: str = "Unknown"
    total_directories: int = 0
    total_submitted: int = 0
    total_low_confidence: int = 0
    total_failed: int = 0
    results: List[SubmissionResult] = Field(default_factory=list)
    gap_report: CitationGapReport = Field(default_factory=CitationGapReport)
    generated_at: str = Field(default_factory=_now)


# ---------------------------------------------------------------------------
# Local rankings
# ---------------------------------------------------------------------------

class CompetitorRankingScore(BaseModel):
    name: str
    keywords: List[KeywordRanking] = Field(default_factory=list)
    overall_score: int = 0


class RankingSummary(BaseModel):
    total_keywords: int = 0
    average_ranking: int = 0
    top3_rankings: int = 0
    local_pack_appearances: int = 0
    overall_score: int = 0


class LocalRecommendation(BaseModel):
    priority: str
    category: str
    recommendation: str
    action: str


class LocalPerformanceReport(BaseModel):
    business_name: str = "Unknown"
    location: str = "Unknown"
    report_date: str = Field(default_factory=_now)
    profile_completeness: int = 0
    rankings: List[KeywordRanking] = Field(default_factory=list)
    summary: RankingSummary = Field(default_factory=RankingSummary)
    competitors: List[CompetitorRankingScore] = Field(default_factory=list)
    recommendations: List[LocalRecommendation] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------

@dataclass
class BatchReport:
    """Ordered results of one batch run. results[i] belongs to targets[i]."""
    run_id: str
    batch_kind: str
    results: List[Any] = field(default_factory=list)
    started_at: str = field(default_factory=_now)
    completed_at: Optional[str] = None
    duration_seconds: float = 0.0
    cancelled: bool = False

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.is_failed)

    @property
    def succeeded(self) -> int:
        return self.total - self.failed
