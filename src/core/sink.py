"""
Record sink shared by the error and process loggers.

Rows go to a Supabase table when credentials are configured and to a dated
JSONL file otherwise (or when the insert fails). Writing never raises.
"""

import json
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from src.core.logging import get_logger

logger = get_logger(__name__)


def create_supabase_client(url: Optional[str], key: Optional[str], label: str):
    """
    Build a Supabase client or return None when unavailable.

    Args:
        url: Supabase project URL
        key: Service role key
        label: Logger name used in warnings ("Error logging", "Process logging")
    """
    if not url or not key:
        logger.warning(f"{label}: Supabase credentials missing, using file fallback")
        return None

    try:
        from supabase import create_client

        client = create_client(url, key)
        logger.info(f"{label} initialized with Supabase")
        return client
    except ImportError:
        logger.warning(f"{label}: supabase package not installed, using file fallback")
    except Exception as e:
        logger.warning(f"{label}: Database init failed ({e}), using file fallback")
    return None


class RecordSink:
    """
    Append-only destination for validated log rows.

    Args:
        table: Supabase table name
        fallback_dir: Directory for `<prefix>_<YYYYMMDD>.jsonl` files
        file_prefix: File name prefix
        client: Optional Supabase client (None means file-only)
    """

    def __init__(self, table: str, fallback_dir: Path, file_prefix: str, client=None):
        self.table = table
        self.file_prefix = file_prefix
        self._client = client
        self._fallback_dir = Path(fallback_dir)
        self._fallback_dir.mkdir(exist_ok=True, parents=True)

    @property
    def db_available(self) -> bool:
        return self._client is not None

    @property
    def fallback_dir(self) -> Path:
        return self._fallback_dir

    def current_file(self) -> Path:
        date_str = datetime.now(timezone.utc).strftime("%Y%m%d")
        return self._fallback_dir / f"{self.file_prefix}_{date_str}.jsonl"

    def write(self, row: Dict[str, Any]) -> bool:
        if self._client is not None:
            try:
                self._client.table(self.table).insert(row).execute()
                return True
            except Exception as e:
                logger.warning(f"Database write to {self.table} failed: {e}, falling back to file")
        return self._write_to_file(row)

    def _write_to_file(self, row: Dict[str, Any]) -> bool:
        try:
            with open(self.current_file(), "a", encoding="utf-8") as f:
                json.dump(row, f)
                f.write("\n")
            return True
        except Exception as e:
            logger.error(f"File write to {self._fallback_dir} failed: {e}")
            return False
