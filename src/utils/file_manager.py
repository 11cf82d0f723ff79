"""
File I/O for CLI inputs and report outputs.

Inputs are a plain URL list (one per line) and a business JSON file; outputs
are pretty-printed report JSON under the configured output directory.
"""

import json
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from src.models.reports import CitationListing
from src.models.targets import BusinessData, DirectoryDescriptor


@dataclass
class BusinessFile:
    """Contents of a business JSON file."""
    business: BusinessData
    directories: List[DirectoryDescriptor] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    competitors: List[str] = field(default_factory=list)
    existing_citations: List[CitationListing] = field(default_factory=list)


def read_urls_from_file(path: Path) -> List[str]:
    """
    Read URLs from a text file, one per line.

    Blank lines and lines starting with # are skipped; duplicates are dropped
    keeping the first occurrence.

    Example:
        >>> read_urls_from_file(Path("competitors.txt"))
        ['https://a.com', 'https://b.com']
    """
    out: List[str] = []
    seen = set()
    for line in path.read_text("utf-8").splitlines():
        s = line.strip()
        if not s or s.startswith("#") or s in seen:
            continue
        seen.add(s)
        out.append(s)
    return out


def read_business_file(path: Path) -> BusinessFile:
    """
    Load a business JSON file.

    The file holds either the business fields at the top level or under a
    "business" key, plus optional "directories", "keywords", "competitors"
    and "existing_citations" lists.

    Raises:
        ValueError: If the file is not a JSON object
    """
    data = json.loads(path.read_text("utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")

    business_data = data.get("business", data)
    business_fields = {k: v for k, v in business_data.items() if k in BusinessData.model_fields}

    return BusinessFile(
        business=BusinessData(**business_fields),
        directories=[DirectoryDescriptor(**d) for d in data.get("directories") or []],
        keywords=[str(k) for k in data.get("keywords") or [] if str(k).strip()],
        competitors=[str(c) for c in data.get("competitors") or [] if str(c).strip()],
        existing_citations=[CitationListing(**c) for c in data.get("existing_citations") or []],
    )


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "report"


def write_report(report: Any, out_dir: Path, name: str, stamp: Optional[int] = None) -> Path:
    """
    Write a report as JSON and return its path.

    Example:
        >>> write_report(summary, Path("out"), "citations Acme Plumbing")
        PosixPath('out/citations-acme-plumbing.1700000000.json')
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    if isinstance(report, BaseModel):
        payload: Dict[str, Any] = report.model_dump(mode="json")
    else:
        payload = report

    path = out_dir / f"{_slug(name)}.{stamp if stamp is not None else int(time.time())}.json"
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
    return path
