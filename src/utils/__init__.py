"""
Shared utility functions for the intelligence engine.

This module contains reusable utilities used across components:
- URL validation and normalization
- Retry logic with exponential backoff

File I/O helpers live in src.utils.file_manager (they depend on the models).
"""

from src.utils.url_utils import (
    normalize_target_url,
    validate_url,
    extract_domain,
    domain_of,
    extract_company_name,
)
from src.utils.retry import retry_with_backoff, RetryConfig

__all__ = [
    # URL utilities
    "normalize_target_url",
    "validate_url",
    "extract_domain",
    "domain_of",
    "extract_company_name",
    # Retry utilities
    "retry_with_backoff",
    "RetryConfig",
]
