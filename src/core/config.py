"""
Configuration Management for the intelligence engine

This module provides centralized configuration management with:
- Environment variable loading
- Type validation
- Sensible defaults
- Configuration documentation
"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
)

_FALSY = {"0", "false", "False"}
_TRUTHY = {"1", "true", "True"}


class Config:
    """
    Application configuration loaded from environment variables.

    All configuration is read from configs/.env file or environment variables.
    See configs/.env.example for documentation of all settings.
    """

    def __init__(self, env_path: Optional[Path] = None):
        """
        Initialize configuration from environment.

        Args:
            env_path: Path to .env file (default: configs/.env)
        """
        if env_path is None:
            env_path = Path("configs/.env")

        # Load environment variables
        load_dotenv(dotenv_path=env_path, override=True)

        # === Browser automation ===
        self.headless: bool = os.getenv("HEADLESS", "1") not in _FALSY
        self.user_agent: str = os.getenv("USER_AGENT", DEFAULT_USER_AGENT)
        self.nav_timeout_ms: int = int(os.getenv("NAV_TIMEOUT_MS", "30000"))
        self.settle_ms: int = int(os.getenv("SETTLE_MS", "2000"))

        # === Batch orchestration ===
        self.inter_item_delay_ms: int = int(os.getenv("INTER_ITEM_DELAY_MS", "2000"))
        self.batch_concurrency: int = int(os.getenv("BATCH_CONCURRENCY", "1"))
        deadline = os.getenv("BATCH_DEADLINE_S")
        self.batch_deadline_s: Optional[float] = float(deadline) if deadline else None

        # === Fallback data ===
        self.fallback_seed: int = int(os.getenv("FALLBACK_SEED", "42"))

        # === Outbound lookups ===
        self.google_api_key: str = os.getenv("GOOGLE_API_KEY", "")
        self.google_cse_id: str = os.getenv("GOOGLE_CUSTOM_SEARCH_ENGINE_ID", "")
        self.similarweb_api_key: str = os.getenv("SIMILARWEB_API_KEY", "")
        self.http_timeout_s: float = float(os.getenv("HTTP_TIMEOUT_S", "10"))
        self.http_max_retries: int = int(os.getenv("HTTP_MAX_RETRIES", "2"))

        # === Gemini (optional narrative SWOT) ===
        self.gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
        self.gemini_model: str = os.getenv("GEMINI_MODEL", "models/gemini-1.5-pro-latest")
        self.llm_swot_enabled: bool = os.getenv("LLM_SWOT_ENABLED", "0") in _TRUTHY

        # === Supabase (error / process log sink) ===
        self.supabase_enabled: bool = os.getenv("SUPABASE_ENABLED", "0") not in _FALSY
        self.supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
        self.supabase_service_role_key: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

        # === Logging Configuration ===
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_dir: Path = Path(os.getenv("LOG_DIR", "logs"))

        # === Output Paths ===
        self.base_out_dir: Path = Path(os.getenv("BASE_OUT_DIR", "out"))

    @property
    def inter_item_delay_s(self) -> float:
        return self.inter_item_delay_ms / 1000.0

    @property
    def rankings_configured(self) -> bool:
        return bool(self.google_api_key and self.google_cse_id)

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If configuration is missing or invalid
        """
        errors = []

        if self.supabase_enabled:
            if not self.supabase_url:
                errors.append("SUPABASE_URL is required when Supabase is enabled")
            if not self.supabase_service_role_key:
                errors.append("SUPABASE_SERVICE_ROLE_KEY is required when Supabase is enabled")

        if self.llm_swot_enabled and not self.gemini_api_key:
            errors.append("GEMINI_API_KEY is required when LLM_SWOT_ENABLED is set")

        if self.nav_timeout_ms <= 0:
            errors.append(f"NAV_TIMEOUT_MS must be positive, got {self.nav_timeout_ms}")

        if self.settle_ms < 0:
            errors.append(f"SETTLE_MS must be non-negative, got {self.settle_ms}")

        if self.inter_item_delay_ms < 0:
            errors.append(f"INTER_ITEM_DELAY_MS must be non-negative, got {self.inter_item_delay_ms}")

        if not 1 <= self.batch_concurrency <= 3:
            errors.append(f"BATCH_CONCURRENCY must be between 1 and 3, got {self.batch_concurrency}")

        if self.batch_deadline_s is not None and self.batch_deadline_s <= 0:
            errors.append(f"BATCH_DEADLINE_S must be positive, got {self.batch_deadline_s}")

        if self.http_max_retries < 0:
            errors.append(f"HTTP_MAX_RETRIES must be non-negative, got {self.http_max_retries}")

        if errors:
            raise ValueError(f"Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    def __repr__(self) -> str:
        """Return string representation of config (without secrets)."""
        return (
            f"Config(\n"
            f"  headless={self.headless},\n"
            f"  nav_timeout_ms={self.nav_timeout_ms},\n"
            f"  inter_item_delay_ms={self.inter_item_delay_ms},\n"
            f"  batch_concurrency={self.batch_concurrency},\n"
            f"  google_api_key={'***' if self.google_api_key else 'NOT SET'},\n"
            f"  similarweb_api_key={'***' if self.similarweb_api_key else 'NOT SET'},\n"
            f"  gemini_api_key={'***' if self.gemini_api_key else 'NOT SET'},\n"
            f"  supabase_enabled={self.supabase_enabled},\n"
            f"  log_level={self.log_level}\n"
            f")"
        )


# Global configuration instance (lazy-loaded)
_config: Optional[Config] = None


def get_config(env_path: Optional[Path] = None) -> Config:
    """
    Get the global configuration instance.

    Args:
        env_path: Optional path to .env file (only used on first call)

    Returns:
        Global Config instance

    Example:
        >>> config = get_config()
        >>> config.nav_timeout_ms
        30000
    """
    global _config
    if _config is None:
        _config = Config(env_path=env_path)
    return _config
