"""
Unit tests for the DOM queries run over a rendered page.
"""

import pytest

from src.automation.queries import (
    QUERIES,
    ExtractionProfile,
    parse_document,
    query_ad_creatives,
    query_blog_content,
    query_contact_info,
    query_content_structure,
    query_meta_tags,
    query_pricing_info,
    query_social_links,
    run_query,
)


@pytest.fixture
def soup(sample_html):
    return parse_document(sample_html)


class TestMetaTags:
    def test_reads_meta_and_open_graph(self, soup):
        meta = query_meta_tags(soup)
        assert meta.title == "Acme Marketing - Growth Agency"
        assert meta.description == "Full-service growth marketing agency."
        assert meta.keywords == "seo, ppc, growth"
        assert meta.og_title == "Acme Marketing"
        assert meta.og_image == "https://acme.example/og.png"
        assert meta.twitter_card == "summary_large_image"
        assert meta.canonical == "https://acme.example/"

    def test_missing_tags_are_empty(self):
        meta = query_meta_tags(parse_document("<html><body></body></html>"))
        assert meta.title == ""
        assert meta.og_description == ""


class TestContentStructure:
    def test_headings_nav_forms_buttons(self, soup):
        structure = query_content_structure(soup)
        assert [h.tag for h in structure.headings] == ["h1", "h2"]
        assert structure.heading_texts[0] == "AI-powered marketing for modern brands"
        assert [n.href for n in structure.navigation] == ["/services", "/pricing", "/blog"]
        assert len(structure.forms) == 1
        assert structure.forms[0].method == "post"
        assert [i.name for i in structure.forms[0].inputs] == ["email", ""]
        assert [b.text for b in structure.buttons] == ["Book a call", "Send"]
        assert structure.main_content and len(structure.main_content[0].text) <= 200


class TestSocialAndContact:
    def test_first_link_per_network(self, soup):
        social = query_social_links(soup)
        assert social.facebook == "https://facebook.com/acme"
        assert social.linkedin == "https://www.linkedin.com/company/acme"
        assert social.twitter == "https://x.com/acme"
        assert social.instagram == ""
        assert social.present() == ["facebook", "twitter", "linkedin"]

    def test_contact_info(self, soup):
        contact = query_contact_info(soup)
        assert contact.phone == "+1 (555) 123-4567"
        assert contact.email == "hello@acme.example"
        assert contact.address == "100 Main St, Springfield, IL"
        assert contact.contact_form is True

    def test_short_digit_runs_are_not_phones(self):
        contact = query_contact_info(parse_document("<body>Open 9 to 5, since 1985</body>"))
        assert contact.phone == ""


class TestPricingBlogAds:
    def test_pricing_elements_and_currency(self, soup):
        pricing = query_pricing_info(soup)
        assert pricing.has_pricing is True
        assert pricing.pricing_elements == ["$49", "$199"]
        assert pricing.currency == "USD"

    def test_no_pricing(self):
        pricing = query_pricing_info(parse_document("<body><p>Contact us for a quote</p></body>"))
        assert pricing.has_pricing is False
        assert pricing.currency == ""

    def test_blog_posts_and_categories(self, soup):
        blog = query_blog_content(soup)
        assert blog.has_blog is True
        assert blog.total_links == 4
        assert len(blog.posts) == 4
        assert blog.categories == ["SEO", "Marketing", "Business"]

    def test_no_blog(self):
        blog = query_blog_content(parse_document("<body><a href='/about'>About</a></body>"))
        assert blog.has_blog is False
        assert blog.categories == ["General"]

    def test_ads(self, soup):
        ads = query_ad_creatives(soup)
        assert ads.has_ads is True
        assert ads.ad_networks == ["googleadservices"]
        assert ads.ad_elements == ["sponsored"]


class TestProfileAndRegistry:
    def test_default_profile_runs_every_query(self):
        assert ExtractionProfile().queries == tuple(QUERIES)

    def test_unknown_query_rejected(self):
        with pytest.raises(ValueError, match="Unknown extraction queries"):
            ExtractionProfile(queries=("meta_tags", "screenshots"))

    def test_invalid_timeout_rejected(self):
        with pytest.raises(ValueError):
            ExtractionProfile(nav_timeout_ms=0)

    def test_run_query_uses_override_registry(self, soup):
        assert run_query("meta_tags", soup, {"meta_tags": lambda s: "custom"}) == "custom"
