"""
Command-line entry point.

Usage:
    python -m src.cli competitors --urls competitors.txt --industry "Digital Marketing"
    python -m src.cli citations --business business.json
    python -m src.cli rankings --business business.json --keywords "plumber,emergency plumber"
"""

import argparse
import asyncio
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from src.core.config import get_config
from src.core.exceptions import SessionStartFailed
from src.core.logging import init_cli_logging
from src.models.reports import AnalysisContext
from src.utils.file_manager import read_business_file, read_urls_from_file, write_report


def _split(value: Optional[str]) -> List[str]:
    return [s.strip() for s in (value or "").split(",") if s.strip()]


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Competitive and local-business intelligence batches.")
    ap.add_argument("-v", "--verbose", action="store_true", help="DEBUG logging")
    sub = ap.add_subparsers(dest="command", required=True)

    comp = sub.add_parser("competitors", help="Extract competitor sites and build a SWOT report")
    comp.add_argument("--urls", required=True, help="Path to a file with one URL per line")
    comp.add_argument("--industry", default="", help="Industry label for the report")
    comp.add_argument("--focus", default="", help="Analysis focus passed to the narrative SWOT")
    comp.add_argument("--names", default="", help="Comma-separated competitor names, in URL order")
    comp.add_argument("--no-browser", action="store_true", help="Skip page loads and report fallback data")

    cit = sub.add_parser("citations", help="Submit the business to directories")
    cit.add_argument("--business", required=True, help="Business JSON file")
    cit.add_argument("--directories", default="",
                     help="Comma-separated directory names to keep (default: all)")

    rank = sub.add_parser("rankings", help="Local keyword rankings and performance score")
    rank.add_argument("--business", required=True, help="Business JSON file")
    rank.add_argument("--keywords", default="", help="Comma-separated keywords (overrides the file)")
    rank.add_argument("--competitors", default="", help="Comma-separated competitor names (overrides the file)")
    return ap


async def run_competitors(args) -> Path:
    from src.services.competitor_analysis import CompetitorAnalysisService

    url_file = Path(args.urls)
    if not url_file.exists():
        raise FileNotFoundError(f"URLs file not found: {url_file}")
    urls = read_urls_from_file(url_file)
    if not urls:
        raise ValueError("No URLs found in file.")

    context = AnalysisContext(
        industry=args.industry,
        analysis_focus=args.focus,
        competitor_names=_split(args.names),
    )
    service = CompetitorAnalysisService.from_config(use_browser=not args.no_browser)
    report = await service.analyze(urls, context)
    return write_report(report, get_config().base_out_dir, f"competitors {args.industry}")


async def run_citations(args) -> Path:
    from src.services.citation_building import CitationBuildingService

    data = read_business_file(Path(args.business))
    directories = data.directories or None
    wanted = {n.lower() for n in _split(args.directories)}
    if wanted:
        from src.automation.strategies import DEFAULT_DIRECTORIES
        directories = [d for d in (directories or DEFAULT_DIRECTORIES) if d.name.lower() in wanted]

    service = CitationBuildingService.from_config()
    summary = await service.build(data.business, directories, data.existing_citations)
    return write_report(summary, get_config().base_out_dir, f"citations {data.business.business_name}")


async def run_rankings(args) -> Path:
    from src.services.local_rankings import LocalRankingService

    data = read_business_file(Path(args.business))
    keywords = _split(args.keywords) or data.keywords
    if not keywords:
        raise ValueError("No keywords given (use --keywords or a 'keywords' list in the business file).")
    competitors = _split(args.competitors) or data.competitors

    report = await LocalRankingService().report(data.business, keywords, competitors)
    return write_report(report, get_config().base_out_dir, f"rankings {data.business.business_name}")


COMMANDS = {
    "competitors": run_competitors,
    "citations": run_citations,
    "rankings": run_rankings,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    logger = init_cli_logging(verbose=args.verbose, log_dir=config.log_dir)

    try:
        config.validate()
    except ValueError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2

    try:
        path = asyncio.run(COMMANDS[args.command](args))
    except KeyboardInterrupt:
        print("\n[abort] KeyboardInterrupt - stopping batch.")
        return 1
    except (FileNotFoundError, ValueError) as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1
    except SessionStartFailed as e:
        print(f"[fatal] browser could not be started: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"[fatal] uncaught error during {args.command}: {e}")
        traceback.print_exc()
        return 1

    logger.info(f"Report written to {path}")
    print(f"[saved] {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
