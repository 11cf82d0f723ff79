"""
Intelligence Engine Test Suite

This package contains the automated tests for the intelligence engine.

Structure:
- unit/: Fast, isolated unit tests (fake browser, no network)
- conftest.py: Shared fixtures, fake Playwright objects and sample data
"""
