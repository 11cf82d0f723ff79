"""
Unit tests for citation gap analysis and submission summaries.
"""

from src.analysis.citations import (
    ADDRESS_INCONSISTENT,
    ESSENTIAL_DIRECTORIES,
    PHONE_INCONSISTENT,
    build_gap_report,
    calculate_profile_completeness,
    find_citation_inconsistencies,
    identify_missing_citations,
    summarize_submissions,
)
from src.core.exceptions import FailureReason
from src.models.reports import CitationListing
from src.models.results import SubmissionResult
from src.models.targets import BusinessData, DirectoryDescriptor


def _submitted(directory, fields=("name",)):
    return SubmissionResult.submitted(directory, list(fields), [], True, entry_url=directory.url)


class TestMissingCitations:
    def test_all_missing_without_listings(self):
        missing = identify_missing_citations([])
        assert [m.platform for m in missing] == [name for name, _, _ in ESSENTIAL_DIRECTORIES]

    def test_match_is_case_insensitive(self):
        existing = [CitationListing(platform="yelp"), CitationListing(platform=" Google My Business ")]
        platforms = [m.platform for m in identify_missing_citations(existing)]

        assert "Yelp" not in platforms
        assert "Google My Business" not in platforms
        assert len(platforms) == len(ESSENTIAL_DIRECTORIES) - 2


class TestInconsistencies:
    def test_phone_formats_compare_by_digits(self):
        listings = [
            CitationListing(platform="Yelp", phone="(217) 555-0142"),
            CitationListing(platform="BBB", phone="217.555.0142"),
        ]
        assert find_citation_inconsistencies(listings) == []

    def test_conflicting_phone_and_address(self):
        listings = [
            CitationListing(platform="Yelp", phone="217-555-0142", address="742 Evergreen Terrace"),
            CitationListing(platform="BBB", phone="217-555-0199", address="742 Evergreen Ter."),
        ]
        assert find_citation_inconsistencies(listings) == [PHONE_INCONSISTENT, ADDRESS_INCONSISTENT]

    def test_single_listing_is_never_inconsistent(self):
        assert find_citation_inconsistencies([CitationListing(platform="Yelp", phone="1")]) == []


class TestProfileCompleteness:
    def test_sample_business(self, sample_business):
        # hours and photo are missing
        assert calculate_profile_completeness(sample_business) == 75

    def test_empty_and_missing(self):
        assert calculate_profile_completeness(BusinessData()) == 0
        assert calculate_profile_completeness(None) == 0


class TestGapReport:
    def test_submitted_directories_count_as_listings(self, sample_business, sample_directories):
        results = [_submitted(d) for d in sample_directories]
        report = build_gap_report([CitationListing(platform="Yelp", status="Live")], results, sample_business)

        assert report.current_citations == 2
        assert [c.platform for c in report.citation_details] == ["Yelp", "Hotfrog"]
        assert report.citation_details[0].status == "Live"
        assert report.citation_details[1].phone == sample_business.phone
        assert "Yelp" not in [m.platform for m in report.missing_citations]

    def test_failed_submissions_are_not_listings(self, sample_business, sample_directories):
        results = [SubmissionResult.failed(d, FailureReason.NAVIGATION_FAILED) for d in sample_directories]
        report = build_gap_report([], results, sample_business)
        assert report.current_citations == 0

    def test_repeated_platform_in_batch_counted_once(self, sample_business):
        directories = [
            DirectoryDescriptor(name="Hotfrog", url="https://www.hotfrog.com/add"),
            DirectoryDescriptor(name="hotfrog", url="https://www.hotfrog.com/add-business"),
            DirectoryDescriptor(name="Manta", url="https://www.manta.com/claim"),
        ]
        report = build_gap_report([], [_submitted(d) for d in directories], sample_business)

        assert report.current_citations == 2
        assert [c.platform for c in report.citation_details] == ["Hotfrog", "Manta"]


class TestSummarizeSubmissions:
    def test_counts(self, sample_business, sample_directories):
        yelp, hotfrog = sample_directories
        results = [
            _submitted(yelp),
            _submitted(hotfrog, fields=()),
            SubmissionResult.failed(hotfrog, FailureReason.NAVIGATION_TIMEOUT),
        ]
        summary = summarize_submissions(results, sample_business)

        assert summary.business_name == "Springfield Plumbing"
        assert summary.total_directories == 3
        assert summary.total_submitted == 2
        assert summary.total_low_confidence == 1
        assert summary.total_failed == 1
        assert summary.results == results

    def test_empty_batch(self):
        summary = summarize_submissions([])
        assert summary.business_name == "Unknown"
        assert summary.total_directories == 0
        assert len(summary.gap_report.missing_citations) == len(ESSENTIAL_DIRECTORIES)
