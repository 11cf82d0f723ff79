"""
Named DOM queries run over a rendered competitor page.

Each query takes the parsed document and returns one payload section. The
extractor runs them by name so a failing query can be reported precisely.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from src.analysis.scoring import extract_blog_categories
from src.models.payload import (
    AdCreatives,
    BlogContent,
    BlogPost,
    ButtonInfo,
    ContactInfo,
    ContentBlock,
    ContentStructure,
    FormInfo,
    FormInput,
    Heading,
    MetaTags,
    NavLink,
    PricingInfo,
    SocialLinks,
)

PRICE_REGEX = re.compile(r"[$€£₹]\s?\d+")
PHONE_REGEX = re.compile(r"\+?[\d\s\-().]{10,}")
EMAIL_REGEX = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

CURRENCIES = [("$", "USD"), ("€", "EUR"), ("£", "GBP"), ("₹", "INR")]

SOCIAL_PATTERNS: Dict[str, Tuple[str, ...]] = {
    "facebook": ("facebook.com", "fb.com"),
    "twitter": ("twitter.com", "x.com"),
    "linkedin": ("linkedin.com",),
    "instagram": ("instagram.com",),
    "youtube": ("youtube.com",),
    "tiktok": ("tiktok.com",),
}

BLOG_INDICATORS = ["blog", "news", "articles", "posts", "insights"]
BLOG_LINK_SELECTOR = 'a[href*="blog"], a[href*="post"], a[href*="article"]'
MAX_BLOG_POSTS = 5

AD_NETWORKS = [
    "googleadservices",
    "googlesyndication",
    "doubleclick",
    "facebook.com/tr",
    "pixel",
    "analytics",
]
AD_CLASS_SELECTOR = ".ad, .advertisement, .banner, .sponsored"

MAX_PRICING_ELEMENTS = 20
MAX_TEXT = 200


def _clean_text(value: str) -> str:
    return re.sub(r"\s+", " ", value or "").strip()


def _attr(soup: BeautifulSoup, selector: str, attr: str = "content") -> str:
    node = soup.select_one(selector)
    if node is None:
        return ""
    value = node.get(attr)
    if isinstance(value, list):
        value = " ".join(value)
    return _clean_text(value or "")


def _class_name(node: Tag) -> str:
    value = node.get("class") or []
    return " ".join(value) if isinstance(value, list) else str(value)


def query_meta_tags(soup: BeautifulSoup) -> MetaTags:
    title_node = soup.find("title")
    return MetaTags(
        title=_clean_text(title_node.get_text()) if title_node else "",
        description=_attr(soup, 'meta[name="description"]'),
        keywords=_attr(soup, 'meta[name="keywords"]'),
        author=_attr(soup, 'meta[name="author"]'),
        viewport=_attr(soup, 'meta[name="viewport"]'),
        og_title=_attr(soup, 'meta[property="og:title"]'),
        og_description=_attr(soup, 'meta[property="og:description"]'),
        og_image=_attr(soup, 'meta[property="og:image"]'),
        og_url=_attr(soup, 'meta[property="og:url"]'),
        og_type=_attr(soup, 'meta[property="og:type"]'),
        twitter_card=_attr(soup, 'meta[name="twitter:card"]'),
        twitter_title=_attr(soup, 'meta[name="twitter:title"]'),
        twitter_description=_attr(soup, 'meta[name="twitter:description"]'),
        twitter_image=_attr(soup, 'meta[name="twitter:image"]'),
        canonical=_attr(soup, 'link[rel="canonical"]', attr="href"),
    )


def query_content_structure(soup: BeautifulSoup) -> ContentStructure:
    structure = ContentStructure()

    for node in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        text = _clean_text(node.get_text(" "))
        if text:
            structure.headings.append(Heading(tag=node.name, text=text))

    for node in soup.select("nav a, .nav a, .navigation a, .menu a"):
        text = _clean_text(node.get_text(" "))
        href = node.get("href")
        if text and href:
            structure.navigation.append(NavLink(text=text, href=href))

    for node in soup.select("main, .main, .content, .container, .wrapper"):
        text = _clean_text(node.get_text(" "))[:MAX_TEXT]
        if text:
            structure.main_content.append(ContentBlock(class_name=_class_name(node), text=text))

    for form in soup.find_all("form"):
        inputs = [
            FormInput(
                type=field.get("type") or "text",
                name=field.get("name") or "",
                placeholder=field.get("placeholder") or "",
            )
            for field in form.find_all(["input", "select", "textarea"])
        ]
        structure.forms.append(
            FormInfo(action=form.get("action") or "", method=form.get("method") or "get", inputs=inputs)
        )

    for node in soup.select('button, .btn, .button, input[type="submit"]'):
        text = _clean_text(node.get_text(" ")) or (node.get("value") or "")
        if text:
            structure.buttons.append(ButtonInfo(text=text, class_name=_class_name(node)))

    return structure


def query_social_links(soup: BeautifulSoup) -> SocialLinks:
    """First outbound link per social network."""
    found: Dict[str, str] = {}
    for node in soup.find_all("a", href=True):
        href = node["href"]
        lowered = href.lower()
        for network, patterns in SOCIAL_PATTERNS.items():
            if network not in found and any(p in lowered for p in patterns):
                found[network] = href
    return SocialLinks(**found)


def query_contact_info(soup: BeautifulSoup) -> ContactInfo:
    body = soup.body or soup
    text = body.get_text(" ")

    phone = ""
    for match in PHONE_REGEX.finditer(text):
        candidate = match.group(0).strip()
        digits = re.sub(r"\D", "", candidate)
        if 10 <= len(digits) <= 15:
            phone = candidate
            break

    email_match = EMAIL_REGEX.search(text)
    address_node = soup.find("address")

    return ContactInfo(
        phone=phone,
        email=email_match.group(0) if email_match else "",
        address=_clean_text(address_node.get_text(" ")) if address_node else "",
        contact_form=soup.find("form") is not None,
    )


def query_pricing_info(soup: BeautifulSoup) -> PricingInfo:
    """Text of elements holding a currency-symbol price token."""
    elements: List[str] = []
    for text_node in soup.find_all(string=PRICE_REGEX):
        parent = text_node.parent
        if parent is None or parent.name in ("script", "style"):
            continue
        text = _clean_text(parent.get_text(" "))[:MAX_TEXT]
        if text and text not in elements:
            elements.append(text)
        if len(elements) >= MAX_PRICING_ELEMENTS:
            break

    currency = ""
    if elements:
        first = PRICE_REGEX.search(elements[0])
        symbol = first.group(0)[0] if first else ""
        currency = next((code for sym, code in CURRENCIES if sym == symbol), "")

    return PricingInfo(has_pricing=bool(elements), pricing_elements=elements, currency=currency)


def query_blog_content(soup: BeautifulSoup) -> BlogContent:
    has_blog = any(
        soup.select(f'a[href*="{indicator}"], .{indicator}, #{indicator}')
        for indicator in BLOG_INDICATORS
    )
    if not has_blog:
        return BlogContent()

    links = soup.select(BLOG_LINK_SELECTOR)
    posts: List[BlogPost] = []
    for node in links[:MAX_BLOG_POSTS]:
        title = _clean_text(node.get_text(" "))
        href = node.get("href")
        if title and href:
            posts.append(BlogPost(title=title[:100], url=href))

    return BlogContent(
        has_blog=True,
        total_links=len(links),
        posts=posts,
        categories=extract_blog_categories(posts),
    )


def query_ad_creatives(soup: BeautifulSoup) -> AdCreatives:
    networks = [
        network
        for network in AD_NETWORKS
        if soup.select(f'[src*="{network}"], [href*="{network}"]')
    ]
    elements = [name for name in (_class_name(n) for n in soup.select(AD_CLASS_SELECTOR)) if name]
    return AdCreatives(has_ads=bool(networks or elements), ad_elements=elements, ad_networks=networks)


QueryFn = Callable[[BeautifulSoup], object]

# Payload field name -> query. Order is the order the extractor runs them.
QUERIES: Dict[str, QueryFn] = {
    "meta_tags": query_meta_tags,
    "content_structure": query_content_structure,
    "social_links": query_social_links,
    "contact_info": query_contact_info,
    "pricing_info": query_pricing_info,
    "blog_content": query_blog_content,
    "ad_creatives": query_ad_creatives,
}

# A failure in one of these fails the whole extraction.
CORE_QUERIES = frozenset({"meta_tags"})


@dataclass(frozen=True)
class ExtractionProfile:
    """
    What to run against a page and how long to wait for it.

    Args:
        queries: Names from QUERIES, run in this order
        nav_timeout_ms: Navigation timeout
        settle_ms: Extra wait after the load signal
        wait_until: Playwright load state passed to page.goto
    """
    name: str = "competitor"
    queries: Tuple[str, ...] = tuple(QUERIES)
    nav_timeout_ms: int = 30_000
    settle_ms: int = 2_000
    wait_until: str = "networkidle"

    def __post_init__(self):
        unknown = [q for q in self.queries if q not in QUERIES]
        if unknown:
            raise ValueError(f"Unknown extraction queries: {unknown}")
        if self.nav_timeout_ms <= 0:
            raise ValueError("nav_timeout_ms must be positive")
        if self.settle_ms < 0:
            raise ValueError("settle_ms must be non-negative")


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def run_query(name: str, soup: BeautifulSoup, queries: Optional[Dict[str, QueryFn]] = None):
    """Run one named query. Exceptions propagate to the caller."""
    registry = queries if queries is not None else QUERIES
    return registry[name](soup)
