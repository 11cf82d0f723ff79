"""
Browser automation over a shared Playwright session.

Module Structure:
- queries: Page queries over parsed HTML (beautifulsoup4, no playwright dependency)
- forms: Form field filling helpers for directory submissions
- session: AutomationSession owning one headless Chromium (requires playwright)
- extractor: TargetExtractor loading a competitor site and running the queries
- strategies: Per-directory submission strategies and the DirectoryDispatcher
"""

# Export page queries directly (no playwright dependency)
from src.automation.queries import (
    CORE_QUERIES,
    ExtractionProfile,
    parse_document,
    run_query,
)

__all__ = [
    "CORE_QUERIES",
    "ExtractionProfile",
    "parse_document",
    "run_query",
]
