"""Labelled placeholder and simulated data."""

from src.fallback.provider import DEFAULT_SEED, FallbackDataProvider

__all__ = ["DEFAULT_SEED", "FallbackDataProvider"]
