"""
Deterministic scoring rules.

Every function is total: empty or missing input yields a neutral default and
scores stay inside [0, 100]. Nothing here draws random numbers.
"""

from typing import Iterable, List, Optional, Sequence

from src.models.payload import BlogPost, ExtractionPayload, TrafficEstimate
from src.models.results import KeywordRanking

BASE_SCORE = 50
MAX_SCORE = 100

CANONICAL_SERVICES = ["SEO", "Content Marketing", "Social Media", "Email Marketing", "PPC"]
NO_GAPS_MESSAGE = "Market research needed to identify specific gaps"

BLOG_CATEGORY_KEYWORDS = [
    ("seo", "SEO"),
    ("marketing", "Marketing"),
    ("business", "Business"),
    ("technology", "Technology"),
]
DEFAULT_CATEGORY = "General"

# Blog link volume thresholds, highest first
FREQUENCY_TIERS = [
    (100, "High (Daily)"),
    (50, "Medium (Weekly)"),
    (20, "Low (Monthly)"),
]
LOWEST_FREQUENCY = "Very Low (Quarterly)"


def _cap(score: float) -> int:
    return int(max(0, min(MAX_SCORE, round(score))))


def calculate_seo_score(payload: Optional[ExtractionPayload]) -> int:
    """
    SEO completeness: base 50 plus fixed increments per present field.

    title +10, description +10, keywords +5, og:title +5, og:description +5,
    at least one heading +10. Capped at 100.

    Example:
        >>> calculate_seo_score(ExtractionPayload())
        50
    """
    if payload is None:
        return BASE_SCORE

    meta = payload.meta_tags
    score = BASE_SCORE
    if meta.title:
        score += 10
    if meta.description:
        score += 10
    if meta.keywords:
        score += 5
    if meta.og_title:
        score += 5
    if meta.og_description:
        score += 5
    if payload.content_structure.headings:
        score += 10
    return _cap(score)


def estimate_content_frequency(total_posts: int) -> str:
    """
    Map blog volume to a publishing-frequency tier.

    Examples:
        >>> estimate_content_frequency(101)
        'High (Daily)'
        >>> estimate_content_frequency(20)
        'Very Low (Quarterly)'
    """
    total = total_posts or 0
    for threshold, label in FREQUENCY_TIERS:
        if total > threshold:
            return label
    return LOWEST_FREQUENCY


def assess_content_quality(posts: Sequence[BlogPost]) -> str:
    """High/Medium/Low from the mean title+excerpt length; Unknown without posts."""
    if not posts:
        return "Unknown"

    avg_length = sum(len(p.title) + len(p.excerpt) for p in posts) / len(posts)
    if avg_length > 200:
        return "High"
    if avg_length > 100:
        return "Medium"
    return "Low"


def assess_brand_strength(payload: Optional[ExtractionPayload]) -> int:
    """Base 50, +20 og:title, +20 og:description, +10 og:image."""
    if payload is None:
        return BASE_SCORE

    meta = payload.meta_tags
    score = BASE_SCORE
    if meta.og_title:
        score += 20
    if meta.og_description:
        score += 20
    if meta.og_image:
        score += 10
    return _cap(score)


def calculate_innovation_score(payload: Optional[ExtractionPayload]) -> int:
    """Base 50, +25 for more than 10 blog posts, +25 for an AI/innovation heading."""
    if payload is None:
        return BASE_SCORE

    score = BASE_SCORE
    if len(payload.blog_content.posts) > 10:
        score += 25
    if any(_mentions_innovation(h) for h in payload.content_structure.heading_texts):
        score += 25
    return _cap(score)


def _mentions_innovation(text: str) -> bool:
    lowered = text.lower()
    return "ai" in lowered or "innovation" in lowered


def assess_customer_engagement(payload: Optional[ExtractionPayload]) -> int:
    """Base 50, +25 when social traffic share exceeds 15, +25 for more than 5 posts."""
    if payload is None:
        return BASE_SCORE

    score = BASE_SCORE
    if payload.estimates.traffic.traffic_sources.social > 15:
        score += 25
    if len(payload.blog_content.posts) > 5:
        score += 25
    return _cap(score)


def calculate_market_share(traffic: TrafficEstimate, batch_total_visits: int) -> str:
    """
    Share of the batch's known visits, as a percentage string.

    Examples:
        >>> calculate_market_share(TrafficEstimate(total_visits=250), 1000)
        '25%'
        >>> calculate_market_share(TrafficEstimate(), 0)
        'Unknown'
    """
    if batch_total_visits <= 0 or traffic.total_visits <= 0:
        return "Unknown"
    return f"{round(100 * traffic.total_visits / batch_total_visits)}%"


def keyword_rank_score(ranking: int) -> int:
    """Linear decay: rank 1 scores 100, each further position loses 10, floor 0."""
    if ranking <= 0:
        return 0
    return max(0, 100 - (ranking - 1) * 10)


def calculate_competitor_score(rankings: Iterable[KeywordRanking]) -> int:
    """
    Mean rank score over keywords with a positive rank; 0 when none ranked.

    Example:
        >>> calculate_competitor_score([KeywordRanking(keyword="a", ranking=1),
        ...                             KeywordRanking(keyword="b", ranking=3),
        ...                             KeywordRanking(keyword="c", ranking=-1)])
        90
    """
    scores = [keyword_rank_score(r.ranking) for r in rankings or [] if r.ranking > 0]
    if not scores:
        return 0
    return int(round(sum(scores) / len(scores)))


def extract_blog_categories(posts: Sequence[BlogPost]) -> List[str]:
    """Categories named in post titles, in a fixed order; ["General"] when none match."""
    found: List[str] = []
    for post in posts or []:
        title = (post.title or "").lower()
        for keyword, category in BLOG_CATEGORY_KEYWORDS:
            if keyword in title and category not in found:
                found.append(category)
    return found or [DEFAULT_CATEGORY]


def identify_market_gaps(category_lists: Iterable[Sequence[str]]) -> List[str]:
    """
    Flag each canonical service no competitor category mentions.

    Matching is a case-insensitive substring test of the service name inside
    each category.
    """
    categories = [c.lower() for cats in category_lists or [] for c in cats if c]
    gaps = [
        f"Underserved {service} market segment"
        for service in CANONICAL_SERVICES
        if not any(service.lower() in category for category in categories)
    ]
    return gaps or [NO_GAPS_MESSAGE]


def average(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), 1)
