"""
Citation gap analysis and submission batch summaries.
"""

import re
from typing import Iterable, List, Optional, Sequence

from src.models.reports import (
    CitationBatchSummary,
    CitationGapReport,
    CitationListing,
    MissingCitation,
)
from src.models.results import Confidence, SubmissionResult
from src.models.targets import BusinessData

# (platform, importance, signup url)
ESSENTIAL_DIRECTORIES = [
    ("Google My Business", "High", "https://business.google.com"),
    ("Yelp", "High", "https://biz.yelp.com"),
    ("Facebook Business", "High", "https://facebook.com/business"),
    ("Yellow Pages", "Medium", "https://yellowpages.com"),
    ("Angie's List", "Medium", "https://angi.com"),
    ("Better Business Bureau", "Medium", "https://bbb.org"),
    ("Foursquare", "Low", "https://foursquare.com"),
    ("Apple Maps", "Low", "https://maps.apple.com"),
    ("Bing Places", "Low", "https://bingplaces.com"),
    ("TripAdvisor", "Low", "https://tripadvisor.com"),
]

PHONE_INCONSISTENT = "Phone number varies across directories"
ADDRESS_INCONSISTENT = "Address format differs between directories"


def identify_missing_citations(existing: Iterable[CitationListing]) -> List[MissingCitation]:
    """Essential directories with no listing, matched by case-insensitive platform name."""
    present = {c.platform.strip().lower() for c in existing or []}
    return [
        MissingCitation(platform=name, importance=importance, url=url)
        for name, importance, url in ESSENTIAL_DIRECTORIES
        if name.lower() not in present
    ]


def find_citation_inconsistencies(citations: Sequence[CitationListing]) -> List[str]:
    """
    NAP conflicts across listings.

    Phones are compared by digits only; addresses by lower-cased, trimmed
    text. A check needs at least two listings carrying the value.

    Example:
        >>> find_citation_inconsistencies([
        ...     CitationListing(platform="Yelp", phone="(555) 010-2000"),
        ...     CitationListing(platform="BBB", phone="555-010-2001"),
        ... ])
        ['Phone number varies across directories']
    """
    issues: List[str] = []

    phones = [re.sub(r"\D", "", c.phone) for c in citations if c.phone]
    if len(phones) > 1 and len(set(phones)) > 1:
        issues.append(PHONE_INCONSISTENT)

    addresses = [c.address.lower().strip() for c in citations if c.address]
    if len(addresses) > 1 and len(set(addresses)) > 1:
        issues.append(ADDRESS_INCONSISTENT)

    return issues


def calculate_profile_completeness(business: Optional[BusinessData]) -> int:
    """Percentage of the 8 profile fields that are filled (name, address, phone,
    website, hours, categories, description, photo)."""
    if business is None:
        return 0
    fields = [
        business.business_name,
        business.address,
        business.phone,
        business.website,
        business.hours,
        business.categories or business.business_type,
        business.description,
        business.photo_url,
    ]
    return round(100 * sum(1 for f in fields if f) / len(fields))


def listing_from_submission(result: SubmissionResult, business: BusinessData) -> CitationListing:
    status = "Submitted" if result.is_submitted else "Failed"
    return CitationListing(
        platform=result.directory_name,
        url=result.entry_url or result.directory.url,
        status=status,
        phone=business.phone if result.is_submitted else "",
        address=business.address if result.is_submitted else "",
    )


def build_gap_report(
    existing: Sequence[CitationListing],
    results: Sequence[SubmissionResult] = (),
    business: Optional[BusinessData] = None,
) -> CitationGapReport:
    """
    Gap report over existing listings plus this batch's submitted directories.
    """
    business = business or BusinessData()
    listings = list(existing)
    known = {c.platform.strip().lower() for c in existing}
    for result in results:
        if not result.is_submitted:
            continue
        listing = listing_from_submission(result, business)
        key = listing.platform.strip().lower()
        if key not in known:
            known.add(key)
            listings.append(listing)
    return CitationGapReport(
        current_citations=len(listings),
        citation_details=listings,
        missing_citations=identify_missing_citations(listings),
        inconsistencies=find_citation_inconsistencies(listings),
    )


def summarize_submissions(
    results: Sequence[SubmissionResult],
    business: Optional[BusinessData] = None,
    existing: Sequence[CitationListing] = (),
) -> CitationBatchSummary:
    """
    Counts over one citation batch.

    total_submitted counts every SUBMITTED result, low-confidence ones
    included; total_low_confidence reports how many of them filled nothing.
    """
    business = business or BusinessData()
    results = list(results)
    return CitationBatchSummary(
        business_name=business.business_name or "Unknown",
        total_directories=len(results),
        total_submitted=sum(1 for r in results if r.is_submitted),
        total_low_confidence=sum(
            1 for r in results if r.is_submitted and r.confidence == Confidence.LOW
        ),
        total_failed=sum(1 for r in results if r.is_failed),
        results=results,
        gap_report=build_gap_report(existing, results, business),
    )
