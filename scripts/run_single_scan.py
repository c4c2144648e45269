"""CLI tool to scan a single page for alt-text problems."""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


async def run_scan(url: str, deep: bool = False, html_only: bool = False) -> int:
    from alt_checker.scanner.aggregator import build_payload, error_payload
    from alt_checker.scanner.analysis import PageAnalyzer
    from alt_checker.scanner.base import ScanResult
    from alt_checker.scanner.errors import ScanError
    from alt_checker.scanner.templates.static_pass import StaticHTMLPass
    from alt_checker.services.scan_service import ScanService, normalize_url

    if html_only:
        try:
            target = normalize_url(url)
            result = await StaticHTMLPass(target, PageAnalyzer.from_settings(deep=deep)).run()
        except ScanError as e:
            payload, status = error_payload(e)
        else:
            payload, status = build_payload(ScanResult(result.report, result.engine)), 200
            print(f"Raw candidates: {result.report.raw_count}", file=sys.stderr)
            print(f"Duration: {result.duration_seconds:.1f}s", file=sys.stderr)
    else:
        payload, status = await ScanService().scan_payload(url, deep=deep)

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if status == 200 else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Scan one page and print the alt-text report")
    parser.add_argument("--url", "-u", required=True, help="Page URL (https:// assumed)")
    parser.add_argument("--deep", action="store_true", help="Use the 300-word proximity window")
    parser.add_argument(
        "--html-only", action="store_true", help="Skip the headless browser, static HTML only"
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(run_scan(args.url, deep=args.deep, html_only=args.html_only)))
