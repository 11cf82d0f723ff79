"""
Extraction payload models.

Every field has a default, so a payload built with no arguments is the
zeroed fallback shape the aggregator can always consume.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List
from pydantic import BaseModel, Field


class EstimateSource(str, Enum):
    """Where an ads/backlinks/traffic estimate came from."""
    LIVE = "live"
    SIMULATED = "simulated"
    FALLBACK = "fallback"


class MetaTags(BaseModel):
    title: str = ""
    description: str = ""
    keywords: str = ""
    author: str = ""
    viewport: str = ""
    og_title: str = ""
    og_description: str = ""
    og_image: str = ""
    og_url: str = ""
    og_type: str = ""
    twitter_card: str = ""
    twitter_title: str = ""
    twitter_description: str = ""
    twitter_image: str = ""
    canonical: str = ""


class Heading(BaseModel):
    tag: str
    text: str


class NavLink(BaseModel):
    text: str
    href: str


class ContentBlock(BaseModel):
    class_name: str = ""
    text: str = ""


class FormInput(BaseModel):
    type: str = "text"
    name: str = ""
    placeholder: str = ""


class FormInfo(BaseModel):
    action: str = ""
    method: str = "get"
    inputs: List[FormInput] = Field(default_factory=list)


class ButtonInfo(BaseModel):
    text: str
    class_name: str = ""


class ContentStructure(BaseModel):
    headings: List[Heading] = Field(default_factory=list)
    navigation: List[NavLink] = Field(default_factory=list)
    main_content: List[ContentBlock] = Field(default_factory=list)
    forms: List[FormInfo] = Field(default_factory=list)
    buttons: List[ButtonInfo] = Field(default_factory=list)

    @property
    def heading_texts(self) -> List[str]:
        return [h.text for h in self.headings]


class SocialLinks(BaseModel):
    facebook: str = ""
    twitter: str = ""
    linkedin: str = ""
    instagram: str = ""
    youtube: str = ""
    tiktok: str = ""

    def present(self) -> List[str]:
        return [name for name, href in self.model_dump().items() if href]


class ContactInfo(BaseModel):
    phone: str = ""
    email: str = ""
    address: str = ""
    contact_form: bool = False


class PricingInfo(BaseModel):
    has_pricing: bool = False
    pricing_elements: List[str] = Field(default_factory=list)
    currency: str = ""


class BlogPost(BaseModel):
    title: str
    url: str = ""
    excerpt: str = ""


class BlogContent(BaseModel):
    has_blog: bool = False
    total_links: int = Field(0, ge=0, description="Blog/post/article links found on the page")
    posts: List[BlogPost] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=lambda: ["General"])


class AdCreatives(BaseModel):
    has_ads: bool = False
    ad_elements: List[str] = Field(default_factory=list)
    ad_networks: List[str] = Field(default_factory=list)


class AdEstimate(BaseModel):
    total_ads: int = 0
    active_campaigns: int = 0
    estimated_spend: str = "Unknown"
    ad_types: List[str] = Field(default_factory=list)
    targeting: List[str] = Field(default_factory=list)
    creative_themes: List[str] = Field(default_factory=list)
    source: EstimateSource = EstimateSource.FALLBACK


class BacklinkEstimate(BaseModel):
    total_backlinks: int = 0
    referring_domains: int = 0
    domain_authority: int = 0
    link_quality: str = "Unknown"
    top_referring_domains: List[str] = Field(default_factory=list)
    source: EstimateSource = EstimateSource.FALLBACK


class TrafficSources(BaseModel):
    direct: float = 0
    search: float = 0
    social: float = 0
    referral: float = 0
    email: float = 0


class TrafficEstimate(BaseModel):
    total_visits: int = 0
    unique_visitors: int = 0
    page_views: int = 0
    traffic_sources: TrafficSources = Field(default_factory=TrafficSources)
    top_referrers: List[str] = Field(default_factory=list)
    search_keywords: List[str] = Field(default_factory=list)
    geographic_distribution: List[str] = Field(default_factory=list)
    source: EstimateSource = EstimateSource.FALLBACK


class Estimates(BaseModel):
    """Off-page estimates attached after extraction."""
    ads: AdEstimate = Field(default_factory=AdEstimate)
    backlinks: BacklinkEstimate = Field(default_factory=BacklinkEstimate)
    traffic: TrafficEstimate = Field(default_factory=TrafficEstimate)


class ExtractionPayload(BaseModel):
    """Structured bag of fields pulled from one competitor page."""
    url: str = ""
    scraped_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    meta_tags: MetaTags = Field(default_factory=MetaTags)
    content_structure: ContentStructure = Field(default_factory=ContentStructure)
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    pricing_info: PricingInfo = Field(default_factory=PricingInfo)
    blog_content: BlogContent = Field(default_factory=BlogContent)
    ad_creatives: AdCreatives = Field(default_factory=AdCreatives)
    estimates: Estimates = Field(default_factory=Estimates)
