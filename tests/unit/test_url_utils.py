"""
Unit tests for URL utility functions.
"""

import pytest
from src.utils.url_utils import (
    domain_of,
    extract_company_name,
    extract_domain,
    normalize_target_url,
    validate_url,
)


class TestNormalizeTargetUrl:
    """Tests for normalize_target_url."""

    def test_bare_domain_gets_https(self):
        assert normalize_target_url("competitor.com") == "https://competitor.com"

    def test_existing_scheme_kept(self):
        assert normalize_target_url("http://competitor.com/pricing") == "http://competitor.com/pricing"

    def test_whitespace_trimmed(self):
        assert normalize_target_url("  https://competitor.com  ") == "https://competitor.com"

    @pytest.mark.parametrize("value", ["", "   ", None, 42])
    def test_unusable_input(self, value):
        assert normalize_target_url(value) is None


class TestValidateUrl:
    def test_valid(self):
        assert validate_url("https://example.com/pricing") is True

    @pytest.mark.parametrize("value", ["/pricing", "example.com", "ftp://example.com", "https://", None])
    def test_invalid(self, value):
        assert validate_url(value) is False


class TestExtractDomain:
    def test_strips_www_and_lowercases(self):
        assert extract_domain("https://WWW.Competitor.com/blog/post") == "competitor.com"

    def test_keeps_subdomain(self):
        assert extract_domain("https://biz.yelp.com/claim") == "biz.yelp.com"

    def test_invalid(self):
        assert extract_domain("invalid") is None
        assert extract_domain("") is None

    def test_domain_of_never_none(self):
        assert domain_of("invalid") == "unknown"
        assert domain_of("https://api.similarweb.com/v1") == "api.similarweb.com"


class TestExtractCompanyName:
    @pytest.mark.parametrize(
        "domain, expected",
        [
            ("acme-marketing.com", "Acme Marketing"),
            ("www.rival_plumbing.co.uk", "Rival Plumbing"),
            ("", "Unknown"),
        ],
    )
    def test_names(self, domain, expected):
        assert extract_company_name(domain) == expected
